from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..models import Node

logger = logging.getLogger(__name__)


class NodeNotFoundError(KeyError):
    """Raised when a node id is not present in the repository."""
    pass


class ConflictError(Exception):
    """Raised when a compare-and-swap or commit validation fails."""
    pass


class DuplicateNodeError(Exception):
    """Raised when inserting a node whose id already exists."""
    pass


class NodeRepository(ABC):
    """
    Abstract node store representing the boundary between the placement
    engine and the surrounding persistence layer.

    Architectural Role
    -------------------
    PlacementExecutor enforces *policy* (selection, retries, limits).
    NodeRepository performs the *actual reads and writes*.

    Repositories must:
        • Return detached Node copies from every read
        • Apply update_node_counters with compare-and-swap semantics
        • Apply add_aggregate_delta atomically per node
        • Raise NodeNotFoundError for unknown ids
        • Propagate storage failures unchanged
    """

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @abstractmethod
    def get_node(self, node_id: str) -> Node:
        raise NotImplementedError

    @abstractmethod
    def children_of(self, parent_id: str) -> List[Node]:
        """Children of `parent_id` ordered by created_at, then sequence."""
        raise NotImplementedError

    @abstractmethod
    def all_nodes(self) -> List[Node]:
        raise NotImplementedError

    @abstractmethod
    def root_id(self) -> Optional[str]:
        raise NotImplementedError

    def has_node(self, node_id: str) -> bool:
        try:
            self.get_node(node_id)
            return True
        except NodeNotFoundError:
            return False

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @abstractmethod
    def insert_node(self, node: Node) -> None:
        """Insert a node. Raises DuplicateNodeError on an existing id."""
        raise NotImplementedError

    @abstractmethod
    def update_node_counters(
        self,
        node_id: str,
        expected_child_count: int,
        child_count: int,
        accepting: bool,
    ) -> None:
        """
        Compare-and-swap the counters of a node.

        Raises ConflictError when the stored child_count differs from
        `expected_child_count`.
        """
        raise NotImplementedError

    @abstractmethod
    def add_aggregate_delta(self, node_id: str, delta: float) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Administrative Writes
    # ------------------------------------------------------------------

    @abstractmethod
    def set_max_children(self, node_id: str, max_children: int) -> Node:
        raise NotImplementedError

    @abstractmethod
    def set_admin_closed(self, node_id: str, closed: bool) -> Node:
        raise NotImplementedError

    @abstractmethod
    def set_own_value(self, node_id: str, value: float) -> float:
        """Replace own_value and return the previous value."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Commit (validate-then-mutate)
    # ------------------------------------------------------------------

    def commit_child(
        self,
        parent_id: str,
        expected_child_count: int,
        child: Node,
        max_depth: int,
        require_accepting: bool = True,
    ) -> Node:
        """
        Attach `child` under `parent_id` as a single unit.

        This default composes the primitive contract: the parent's
        counters are claimed first through compare-and-swap, then the
        child is inserted. A failed insert releases the claimed slot and
        re-raises the insert's own exception. Stores with native
        transactions should override this.

        With `require_accepting=False` an admin-closed parent may still
        take children while it has capacity.

        Returns the parent as it looks after the commit.
        """

        parent = self.get_node(parent_id)
        _validate_commit(
            parent, expected_child_count, child, max_depth, require_accepting
        )

        new_count = parent.child_count + 1
        parent.child_count = new_count
        parent.refresh_accepting()

        self.update_node_counters(
            parent_id, expected_child_count, new_count, parent.accepting
        )

        try:
            self.insert_node(child)
        except Exception:
            logger.warning(
                "[REPOSITORY] Insert failed, releasing slot | parent=%s child=%s",
                parent_id,
                child.id,
            )
            self._release_slot(parent_id)
            raise

        return parent

    def _release_slot(self, parent_id: str) -> None:
        """
        Give back one claimed slot on `parent_id`.

        Other commits may land on the parent after the claim, so the
        decrement is read-then-CAS against the current count.
        """

        while True:
            current = self.get_node(parent_id)
            current.child_count -= 1
            current.refresh_accepting()
            try:
                self.update_node_counters(
                    parent_id,
                    current.child_count + 1,
                    current.child_count,
                    current.accepting,
                )
                return
            except ConflictError:
                logger.debug("[REPOSITORY] Slot release raced on %s, retrying", parent_id)

    def __len__(self) -> int:
        return len(self.all_nodes())


def _validate_commit(
    parent: Node,
    expected_child_count: int,
    child: Node,
    max_depth: int,
    require_accepting: bool = True,
) -> None:
    if parent.child_count != expected_child_count:
        raise ConflictError(
            f"Parent '{parent.id}' changed: child_count={parent.child_count}, "
            f"expected={expected_child_count}"
        )
    if not parent.has_capacity:
        raise ConflictError(f"Parent '{parent.id}' is full")
    if require_accepting and not parent.accepting:
        raise ConflictError(f"Parent '{parent.id}' is not accepting")
    if parent.depth + 1 > max_depth:
        raise ConflictError(
            f"Parent '{parent.id}' at depth {parent.depth} cannot take children"
        )
    if child.parent_id != parent.id or child.depth != parent.depth + 1:
        raise ValueError(
            f"Child '{child.id}' is not shaped for parent '{parent.id}'"
        )
