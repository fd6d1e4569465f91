from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional
import time


@dataclass
class Node:
    """
    A participant placed in the ACF tree.

    Identity fields (id, sequence, created_at, parent_id, depth) never
    change after a successful placement. Only the counters
    (child_count, accepting), the aggregate value and the administrative
    overrides (max_children, admin_closed, own_value) move afterwards.

    Nodes returned by a repository are detached copies.
    """

    id: str
    sequence: int
    parent_id: Optional[str]
    depth: int
    max_children: int
    child_count: int = 0
    accepting: bool = True
    created_at: float = field(default_factory=time.time)
    own_value: float = 0.0
    aggregate_value: float = 0.0

    admin_closed: bool = False
    """Set when an administrator removed the node from candidacy."""

    scope_mode: Optional[str] = None
    """Scope the node was placed under (informational)."""

    scope_root_id: Optional[str] = None
    """Inviter or ACF root used for placement (informational)."""

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    @property
    def has_capacity(self) -> bool:
        return self.child_count < self.max_children

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def is_eligible(self, max_depth: int) -> bool:
        """True when a child may be placed under this node right now."""
        return self.accepting and self.has_capacity and self.depth + 1 <= max_depth

    def refresh_accepting(self) -> None:
        """Recompute `accepting` from capacity and the admin flag."""
        self.accepting = (not self.admin_closed) and self.has_capacity

    # ------------------------------------------------------------------
    # Copies / Serialization
    # ------------------------------------------------------------------

    def copy(self) -> "Node":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(**data)

    def __repr__(self) -> str:
        return (
            f"Node(id={self.id}, parent={self.parent_id}, depth={self.depth}, "
            f"children={self.child_count}/{self.max_children}, "
            f"accepting={self.accepting})"
        )


@dataclass(frozen=True)
class NewNodeData:
    """
    Immutable registration data for a node that has not been placed yet.

    The executor derives parent_id and depth; everything else comes
    from the registration service.
    """

    id: str
    sequence: int
    created_at: float = field(default_factory=time.time)
    own_value: float = 0.0
    max_children: Optional[int] = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("New node must have a non-empty string id.")
        if self.sequence < 0:
            raise ValueError("Node sequence must be >= 0.")
        if self.max_children is not None and self.max_children < 0:
            raise ValueError("max_children must be >= 0.")
