from __future__ import annotations

import random
import time
import logging

from ..config import PlacementConfig
from ..models import Node, NewNodeData, ScopeMode, PlacementResult, PlacementError
from ..repository import NodeRepository, ConflictError, DuplicateNodeError
from ..aggregate import AggregateRecomputer
from .selector import CandidateSelector

logger = logging.getLogger(__name__)


class PlacementExecutor:
    """
    Commits a selected candidate as the new node's parent.

    This is the only component that mutates parent_id, depth,
    child_count and accepting. Each attempt selects from fresh state
    and hands the commit to the repository, which re-validates the
    candidate under that candidate's own lock. A conflict discards the
    candidate and starts a new attempt, up to the configured budget.
    """

    def __init__(
        self,
        repository: NodeRepository,
        selector: CandidateSelector,
        recomputer: AggregateRecomputer,
        config: PlacementConfig,
    ) -> None:
        self._repository = repository
        self._selector = selector
        self._recomputer = recomputer
        self._config = config

    # ============================================================
    # MAIN EXECUTION
    # ============================================================

    def place(
        self,
        data: NewNodeData,
        scope_root_id: str,
        scope_mode,
    ) -> PlacementResult:

        mode = ScopeMode.parse(scope_mode)

        if self._repository.has_node(data.id):
            return PlacementResult.failure(
                data.id,
                PlacementError.DUPLICATE_NODE,
                detail=f"Node '{data.id}' is already placed",
            )

        max_attempts = self._config.max_attempts
        last_conflict = None
        effective = mode.value

        # ------------------------------------------------------------
        # Attempt Loop
        # ------------------------------------------------------------
        for attempt in range(1, max_attempts + 1):

            outcome = self._selector.select(scope_root_id, mode)
            effective = outcome.effective_mode.value

            if outcome.error is not None:
                logger.info(
                    "[PLACEMENT] Rejected %s | error=%s detail=%s",
                    data.id,
                    outcome.error.value,
                    outcome.detail,
                )
                return PlacementResult.failure(
                    data.id,
                    outcome.error,
                    detail=outcome.detail,
                    attempts=attempt,
                    effective_mode=effective,
                )

            candidate = outcome.best
            child = self._build_child(data, candidate, scope_root_id, mode)

            try:
                self._repository.commit_child(
                    candidate.id,
                    candidate.child_count,
                    child,
                    self._config.max_depth,
                    require_accepting=self._config.respect_accepting,
                )

            except ConflictError as e:
                last_conflict = str(e)
                logger.info(
                    "[PLACEMENT] Conflict on %s for %s | attempt=%d/%d | %s",
                    candidate.id,
                    data.id,
                    attempt,
                    max_attempts,
                    e,
                )
                self._backoff(attempt)
                continue

            except DuplicateNodeError as e:
                return PlacementResult.failure(
                    data.id,
                    PlacementError.DUPLICATE_NODE,
                    detail=str(e),
                    attempts=attempt,
                    effective_mode=effective,
                )

            self._recomputer.on_insert(child)

            logger.info(
                "[PLACEMENT] Committed %s | parent=%s depth=%d mode=%s attempts=%d",
                data.id,
                candidate.id,
                child.depth,
                effective,
                attempt,
            )

            return PlacementResult.success(
                data.id,
                candidate.id,
                child.depth,
                attempt,
                effective,
            )

        logger.warning(
            "[PLACEMENT] Retry budget exhausted for %s | attempts=%d",
            data.id,
            max_attempts,
        )

        return PlacementResult.failure(
            data.id,
            PlacementError.CONCURRENT_CONFLICT_RETRY_EXHAUSTED,
            detail=last_conflict,
            attempts=max_attempts,
            effective_mode=effective,
        )

    # ============================================================
    # HELPERS
    # ============================================================

    def _build_child(
        self,
        data: NewNodeData,
        parent: Node,
        scope_root_id: str,
        mode: ScopeMode,
    ) -> Node:

        max_children = (
            data.max_children
            if data.max_children is not None
            else self._config.default_max_children
        )

        child = Node(
            id=data.id,
            sequence=data.sequence,
            parent_id=parent.id,
            depth=parent.depth + 1,
            max_children=max_children,
            child_count=0,
            created_at=data.created_at,
            own_value=data.own_value,
            aggregate_value=0.0,
            admin_closed=not self._config.default_accepting,
            scope_mode=mode.value,
            scope_root_id=scope_root_id,
        )
        child.refresh_accepting()
        return child

    def _backoff(self, attempt: int) -> None:
        base = self._config.retry_backoff_seconds
        if base <= 0:
            return
        time.sleep(random.uniform(0, base * attempt))
