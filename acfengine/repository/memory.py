from __future__ import annotations

from typing import Dict, List, Optional
from threading import RLock
import logging

from ..models import Node
from .base import (
    NodeRepository,
    NodeNotFoundError,
    DuplicateNodeError,
    ConflictError,
    _validate_commit,
)

logger = logging.getLogger(__name__)


class InMemoryNodeRepository(NodeRepository):
    """
    Thread-safe arena of nodes addressed by id.

    Locking
    -------
    • One RLock per node serializes validate-then-mutate on that node
      (commits under the same parent, counter CAS, aggregate deltas).
    • The arena lock only guards the dictionaries themselves while a
      read copies a node or a write publishes one.

    Commits under different parents never wait on each other's node
    lock, so unrelated registrations proceed in parallel.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._children: Dict[str, List[str]] = {}
        self._node_locks: Dict[str, RLock] = {}
        self._root_id: Optional[str] = None
        self._lock = RLock()
        logger.info("[REPOSITORY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Lock Management
    # ------------------------------------------------------------------

    def _node_lock(self, node_id: str) -> RLock:
        with self._lock:
            if node_id not in self._nodes:
                raise NodeNotFoundError(f"Node '{node_id}' does not exist.")
            lock = self._node_locks.get(node_id)
            if lock is None:
                lock = self._node_locks[node_id] = RLock()
            return lock

    def _stored(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(f"Node '{node_id}' does not exist.") from None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Node:
        with self._lock:
            return self._stored(node_id).copy()

    def has_node(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._nodes

    def children_of(self, parent_id: str) -> List[Node]:
        with self._lock:
            ids = self._children.get(parent_id, [])
            children = [self._nodes[cid].copy() for cid in ids]
        children.sort(key=lambda n: (n.created_at, n.sequence))
        return children

    def all_nodes(self) -> List[Node]:
        with self._lock:
            return [n.copy() for n in self._nodes.values()]

    def root_id(self) -> Optional[str]:
        with self._lock:
            return self._root_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_node(self, node: Node) -> None:
        with self._lock:
            self._publish(node)

    def _publish(self, node: Node) -> None:
        if node.id in self._nodes:
            raise DuplicateNodeError(f"Node '{node.id}' already exists.")

        if node.parent_id is None:
            if self._root_id is not None:
                raise ValueError(
                    f"System root already exists ('{self._root_id}')."
                )
            self._root_id = node.id
        elif node.parent_id not in self._nodes:
            raise NodeNotFoundError(f"Parent '{node.parent_id}' does not exist.")

        self._nodes[node.id] = node.copy()
        self._children.setdefault(node.id, [])
        if node.parent_id is not None:
            self._children.setdefault(node.parent_id, []).append(node.id)

    def update_node_counters(
        self,
        node_id: str,
        expected_child_count: int,
        child_count: int,
        accepting: bool,
    ) -> None:
        with self._node_lock(node_id):
            with self._lock:
                stored = self._stored(node_id)
                if stored.child_count != expected_child_count:
                    raise ConflictError(
                        f"CAS failed on '{node_id}': "
                        f"child_count={stored.child_count}, expected={expected_child_count}"
                    )
                stored.child_count = child_count
                stored.accepting = accepting

    def add_aggregate_delta(self, node_id: str, delta: float) -> None:
        with self._node_lock(node_id):
            with self._lock:
                self._stored(node_id).aggregate_value += delta

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit_child(
        self,
        parent_id: str,
        expected_child_count: int,
        child: Node,
        max_depth: int,
        require_accepting: bool = True,
    ) -> Node:
        with self._node_lock(parent_id):
            parent = self.get_node(parent_id)
            _validate_commit(
                parent, expected_child_count, child, max_depth, require_accepting
            )

            with self._lock:
                self._publish(child)

                stored = self._nodes[parent_id]
                stored.child_count += 1
                stored.refresh_accepting()
                parent = stored.copy()

        logger.debug(
            "[REPOSITORY] Committed child | parent=%s child=%s count=%d/%d",
            parent_id,
            child.id,
            parent.child_count,
            parent.max_children,
        )
        return parent

    # ------------------------------------------------------------------
    # Administrative Writes
    # ------------------------------------------------------------------

    def set_max_children(self, node_id: str, max_children: int) -> Node:
        with self._node_lock(node_id):
            with self._lock:
                stored = self._stored(node_id)
                if max_children < stored.child_count:
                    raise ValueError(
                        f"max_children={max_children} is below live "
                        f"child_count={stored.child_count} for '{node_id}'"
                    )
                stored.max_children = max_children
                stored.refresh_accepting()
                return stored.copy()

    def set_admin_closed(self, node_id: str, closed: bool) -> Node:
        with self._node_lock(node_id):
            with self._lock:
                stored = self._stored(node_id)
                stored.admin_closed = closed
                stored.refresh_accepting()
                return stored.copy()

    def set_own_value(self, node_id: str, value: float) -> float:
        with self._node_lock(node_id):
            with self._lock:
                stored = self._stored(node_id)
                old = stored.own_value
                stored.own_value = value
                return old

    # ------------------------------------------------------------------
    # Persistence Support
    # ------------------------------------------------------------------

    def load_state(self, nodes: List[Node]) -> None:
        """
        Replace the entire arena during persistence restore.

        Parents are published before children regardless of input order.
        """

        pending = sorted(nodes, key=lambda n: (n.depth, n.created_at, n.sequence))

        with self._lock:
            self._nodes = {}
            self._children = {}
            self._node_locks = {}
            self._root_id = None

            for node in pending:
                self._publish(node)

        logger.info("[REPOSITORY] State loaded | nodes=%d", len(pending))
