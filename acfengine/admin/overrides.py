from __future__ import annotations

from typing import List
import logging

from ..config import PlacementConfig
from ..models import Node
from ..repository import NodeRepository
from ..aggregate import AggregateRecomputer
from ..tree import TreeIndex

logger = logging.getLogger(__name__)


class AdminOverrides:
    """
    Administrative edits that sit outside the placement path.

    Capacity and candidacy edits keep `accepting` derived from the live
    child count; value edits go through the aggregate delta path.
    """

    def __init__(
        self,
        repository: NodeRepository,
        recomputer: AggregateRecomputer,
        config: PlacementConfig,
    ) -> None:
        self._repository = repository
        self._recomputer = recomputer
        self._config = config

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    def set_max_children(self, node_id: str, max_children: int) -> Node:
        """
        Override a node's capacity.

        The value is clamped into the configured admin range. Values
        below the node's live child count are rejected.
        """

        clamped = max(
            self._config.min_max_children,
            min(self._config.max_max_children, int(max_children)),
        )

        node = self._repository.set_max_children(node_id, clamped)

        logger.info(
            "[ADMIN] max_children | node=%s requested=%s applied=%d accepting=%s",
            node_id,
            max_children,
            clamped,
            node.accepting,
        )
        return node

    # ------------------------------------------------------------------
    # Candidacy
    # ------------------------------------------------------------------

    def set_accepting(self, node_id: str, accepting: bool) -> Node:
        """
        Open or close a node for placement.

        Opening only takes effect while the node still has capacity.
        """

        node = self._repository.set_admin_closed(node_id, not accepting)

        logger.info(
            "[ADMIN] accepting | node=%s requested=%s effective=%s",
            node_id,
            accepting,
            node.accepting,
        )
        return node

    def set_subtree_accepting(self, root_id: str, accepting: bool) -> List[Node]:
        """Apply set_accepting to `root_id` and every node below it."""

        index = TreeIndex.from_repository(self._repository, root_id)
        updated = [
            self._repository.set_admin_closed(node_id, not accepting)
            for node_id in index.relative_depths(root_id)
        ]

        logger.info(
            "[ADMIN] subtree accepting | root=%s accepting=%s count=%d",
            root_id,
            accepting,
            len(updated),
        )
        return updated

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def set_own_value(self, node_id: str, value: float) -> float:
        """Replace own_value and propagate the delta; returns the old value."""

        old = self._repository.set_own_value(node_id, value)
        self._recomputer.on_own_value_change(node_id, old, value)

        logger.info(
            "[ADMIN] own_value | node=%s old=%s new=%s",
            node_id,
            old,
            value,
        )
        return old
