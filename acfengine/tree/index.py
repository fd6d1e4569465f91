from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from ..models import Node


def _order_key(node: Node):
    return (node.created_at, node.sequence)


class TreeIndex:
    """
    Read-only parent → children adjacency over a snapshot of nodes.

    The index never touches the live store after construction, so a
    placement retry can simply build a new one from fresh state.
    Only parent edges are followed; nothing else is structural.
    """

    def __init__(self, nodes: Iterable[Node]) -> None:
        self._nodes: Dict[str, Node] = {}
        self._children: Dict[str, List[Node]] = {}

        for node in nodes:
            self._nodes[node.id] = node

        for node in self._nodes.values():
            if node.parent_id is not None:
                self._children.setdefault(node.parent_id, []).append(node)

        for children in self._children.values():
            children.sort(key=_order_key)

    # ------------------------------------------------------------------
    # Construction from a repository
    # ------------------------------------------------------------------

    @classmethod
    def from_repository(cls, repository, root_id: str) -> "TreeIndex":
        """
        Snapshot only the subtree under `root_id`, level by level.

        Cost is proportional to the subtree, not the whole store.
        """

        collected: List[Node] = [repository.get_node(root_id)]
        queue = deque([root_id])

        while queue:
            current = queue.popleft()
            for child in repository.children_of(current):
                collected.append(child)
                queue.append(child.id)

        return cls(collected)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def nodes(self) -> Iterable[Node]:
        return self._nodes.values()

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # ------------------------------------------------------------------
    # Structural Queries
    # ------------------------------------------------------------------

    def children_of(self, node_id: str) -> List[Node]:
        """Children ordered by created_at ascending."""
        return list(self._children.get(node_id, []))

    def subtree_ids(self, root_id: str) -> Set[str]:
        """All ids reachable from `root_id` via parent edges, root included."""
        return set(self.relative_depths(root_id))

    def relative_depths(self, root_id: str) -> Dict[str, int]:
        """
        BFS from `root_id`; the root is at relative depth 0.

        Returns an empty map when the root is not in the snapshot.
        """

        if root_id not in self._nodes:
            return {}

        depths: Dict[str, int] = {root_id: 0}
        queue = deque([root_id])

        while queue:
            current = queue.popleft()
            next_depth = depths[current] + 1
            for child in self._children.get(current, []):
                if child.id in depths:
                    continue
                depths[child.id] = next_depth
                queue.append(child.id)

        return depths

    def ancestors(self, node_id: str) -> List[str]:
        """Ids from the parent of `node_id` up to the top of the snapshot."""

        chain: List[str] = []
        seen: Set[str] = {node_id}
        node = self._nodes.get(node_id)

        while node is not None and node.parent_id is not None:
            if node.parent_id in seen:
                raise ValueError(f"Cycle detected above '{node_id}'")
            seen.add(node.parent_id)
            chain.append(node.parent_id)
            node = self._nodes.get(node.parent_id)

        return chain
