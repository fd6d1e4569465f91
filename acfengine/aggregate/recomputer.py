from __future__ import annotations

from typing import Dict, Iterable
import logging

from ..models import Node
from ..repository import NodeRepository
from ..tree import TreeIndex

logger = logging.getLogger(__name__)


class AggregateRecomputer:
    """
    Keeps every node's aggregate_value equal to the sum of its subtree.

    Mutations are applied as deltas along the ancestor chain, so an
    insertion or value edit costs O(depth). Each delta goes through
    the repository's atomic add, which makes concurrent propagations
    through a shared ancestor commutative.
    """

    def __init__(self, repository: NodeRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # Incremental Propagation
    # ------------------------------------------------------------------

    def on_insert(self, node: Node) -> int:
        """
        Credit a freshly placed node's own_value to itself and its ancestors.

        Returns the number of nodes touched.
        """
        return self._propagate(node.id, node.own_value)

    def on_own_value_change(self, node_id: str, old: float, new: float) -> int:
        """Propagate `new - old` from `node_id` up to the root."""
        return self._propagate(node_id, new - old)

    def _propagate(self, start_id: str, delta: float) -> int:
        if not delta:
            return 0

        touched = 0
        current = start_id

        while current is not None:
            self._repository.add_aggregate_delta(current, delta)
            touched += 1
            current = self._repository.get_node(current).parent_id

        logger.debug(
            "[AGGREGATE] Propagated delta=%s from %s | touched=%d",
            delta,
            start_id,
            touched,
        )
        return touched

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    @staticmethod
    def full_recompute(nodes: Iterable[Node]) -> Dict[str, float]:
        """
        Recompute every aggregate from scratch over a snapshot.

        Used for audits only; placement never calls this.
        """

        index = TreeIndex(nodes)
        totals: Dict[str, float] = {}

        # Children before parents: reverse BFS order from each top node
        order = []
        for node in index.nodes():
            if node.parent_id is None or node.parent_id not in index:
                order.extend(index.relative_depths(node.id))

        for node_id in reversed(order):
            node = index.get(node_id)
            totals[node_id] = node.own_value + sum(
                totals[child.id] for child in index.children_of(node_id)
            )

        return totals
