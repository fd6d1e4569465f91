from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from ..config import PlacementConfig
from ..models import Node, ScopeMode, PlacementError
from ..repository import NodeRepository
from ..tree import TreeIndex
from .policy import TieBreakPolicy, create_policy

logger = logging.getLogger(__name__)


@dataclass
class SelectionOutcome:
    """
    Ordered candidates for one scope, computed from a single snapshot.

    `candidates` holds every eligible node, best first. `error` is set
    when there is nothing to choose from.
    """

    scope_root_id: str
    requested_mode: ScopeMode
    effective_mode: ScopeMode
    candidates: List[Node] = field(default_factory=list)
    relative_depths: Dict[str, int] = field(default_factory=dict)
    depth_limited: int = 0
    error: Optional[PlacementError] = None
    detail: Optional[str] = None

    @property
    def best(self) -> Optional[Node]:
        return self.candidates[0] if self.candidates else None

    @property
    def fell_back(self) -> bool:
        return self.requested_mode != self.effective_mode


class CandidateSelector:
    """
    Computes the best parent for a new node inside a scope.

    Selection is a pure read: each call snapshots the scope through
    TreeIndex and never writes to the repository.
    """

    def __init__(
        self,
        repository: NodeRepository,
        config: PlacementConfig,
        policy: Optional[TieBreakPolicy] = None,
    ) -> None:
        self._repository = repository
        self._config = config
        self._policy = policy or create_policy(config)

    @property
    def policy(self) -> TieBreakPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def select(self, scope_root_id: str, scope_mode) -> SelectionOutcome:
        """Same as rank(); `.best` is the chosen parent."""
        outcome = self.rank(scope_root_id, scope_mode)

        if outcome.best is not None:
            logger.debug(
                "[SELECTOR] Selected %s | scope=%s mode=%s rel_depth=%d",
                outcome.best.id,
                scope_root_id,
                outcome.effective_mode.value,
                outcome.relative_depths[outcome.best.id],
            )

        return outcome

    def rank(self, scope_root_id: str, scope_mode) -> SelectionOutcome:
        """
        Return every eligible candidate in the minimal layer, best first.
        """

        mode = ScopeMode.parse(scope_mode)

        if not self._repository.has_node(scope_root_id):
            logger.info("[SELECTOR] Scope root not found: %s", scope_root_id)
            return SelectionOutcome(
                scope_root_id=scope_root_id,
                requested_mode=mode,
                effective_mode=mode,
                error=PlacementError.INVITER_NOT_FOUND,
                detail=f"Scope root '{scope_root_id}' does not exist",
            )

        index = self._snapshot(scope_root_id, mode)
        depths = index.relative_depths(scope_root_id)

        effective = mode
        pool = self._pool(depths, index, mode)
        eligible, depth_limited = self._filter(pool)

        if not eligible and mode is ScopeMode.DIRECT:
            logger.info(
                "[SELECTOR] DIRECT scope %s exhausted, falling back to SUBTREE",
                scope_root_id,
            )
            effective = ScopeMode.SUBTREE
            index = TreeIndex.from_repository(self._repository, scope_root_id)
            depths = index.relative_depths(scope_root_id)
            pool = self._pool(depths, index, effective)
            eligible, more_limited = self._filter(pool)
            depth_limited += more_limited

        outcome = SelectionOutcome(
            scope_root_id=scope_root_id,
            requested_mode=mode,
            effective_mode=effective,
            relative_depths=depths,
            depth_limited=depth_limited,
        )

        if not eligible:
            outcome.error = PlacementError.NO_CAPACITY_AVAILABLE
            if depth_limited:
                outcome.detail = (
                    f"{PlacementError.DEPTH_LIMIT_EXCEEDED.value}: "
                    f"{depth_limited} candidate(s) at max depth "
                    f"{self._config.max_depth} under '{scope_root_id}'"
                )
            else:
                outcome.detail = f"No open slot under '{scope_root_id}'"
            return outcome

        # Layer-first: closest to the scope root wins before any tie-break
        min_layer = min(depths[n.id] for n in eligible)
        layer = [n for n in eligible if depths[n.id] == min_layer]
        layer.sort(key=self._policy.sort_key)

        outcome.candidates = layer
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _snapshot(self, scope_root_id: str, mode: ScopeMode) -> TreeIndex:
        if mode is ScopeMode.DIRECT:
            return TreeIndex([self._repository.get_node(scope_root_id)])
        return TreeIndex.from_repository(self._repository, scope_root_id)

    @staticmethod
    def _pool(
        depths: Dict[str, int],
        index: TreeIndex,
        mode: ScopeMode,
    ) -> List[Node]:
        if mode is ScopeMode.DIRECT:
            return [index.get(nid) for nid, d in depths.items() if d == 0]
        return [index.get(nid) for nid, d in depths.items() if d >= 1]

    def _filter(self, pool: List[Node]):
        """Split the pool into eligible nodes and a count of depth-blocked ones.

        With `respect_accepting` off, admin-closed nodes stay in the pool
        as long as they have a free slot.
        """

        max_depth = self._config.max_depth
        respect_accepting = self._config.respect_accepting
        eligible: List[Node] = []
        depth_limited = 0

        for node in pool:
            if not node.has_capacity:
                continue
            if respect_accepting and not node.accepting:
                continue
            if node.depth + 1 > max_depth:
                depth_limited += 1
                continue
            eligible.append(node)

        return eligible, depth_limited
