from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Literal


class PlacementError(str, Enum):
    """Typed failure kinds returned by PlaceNode."""

    INVITER_NOT_FOUND = "InviterNotFound"
    NO_CAPACITY_AVAILABLE = "NoCapacityAvailable"
    DEPTH_LIMIT_EXCEEDED = "DepthLimitExceeded"
    CONCURRENT_CONFLICT_RETRY_EXHAUSTED = "ConcurrentConflictRetryExhausted"
    DUPLICATE_NODE = "DuplicateNode"


@dataclass(frozen=True)
class PlacementResult:
    """
    Immutable record of a single PlaceNode call.

    Attributes
    ----------
    node_id : str
        Id of the node that was (or would have been) placed.

    status : {"success", "failure"}
        success → node committed under parent_id at depth
        failure → nothing was written, see `error`

    parent_id : Optional[str]
        Chosen parent. None on failure.

    depth : Optional[int]
        Absolute depth of the new node. None on failure.

    error : Optional[PlacementError]
        Failure kind when status is failure.

    detail : Optional[str]
        Human readable context for logs and callers.

    attempts : int
        Number of commit attempts consumed (1 when no conflict occurred).

    effective_mode : Optional[str]
        Scope mode actually used after the DIRECT → SUBTREE fallback.
    """

    node_id: str
    status: Literal["success", "failure"]
    parent_id: Optional[str] = None
    depth: Optional[int] = None
    error: Optional[PlacementError] = None
    detail: Optional[str] = None
    attempts: int = 0
    effective_mode: Optional[str] = None

    # ------------------------------------------------------------------
    # Convenience Properties
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def success(
        cls,
        node_id: str,
        parent_id: str,
        depth: int,
        attempts: int,
        effective_mode: Optional[str],
    ) -> "PlacementResult":
        return cls(
            node_id=node_id,
            status="success",
            parent_id=parent_id,
            depth=depth,
            attempts=attempts,
            effective_mode=effective_mode,
        )

    @classmethod
    def failure(
        cls,
        node_id: str,
        error: PlacementError,
        detail: Optional[str] = None,
        attempts: int = 0,
        effective_mode: Optional[str] = None,
    ) -> "PlacementResult":
        return cls(
            node_id=node_id,
            status="failure",
            error=error,
            detail=detail,
            attempts=attempts,
            effective_mode=effective_mode,
        )

    # ------------------------------------------------------------------
    # Safe Serialization Boundary
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-safe dictionary for the registration service.
        """

        return {
            "node_id": self.node_id,
            "status": self.status,
            "parent_id": self.parent_id,
            "depth": self.depth,
            "error": self.error.value if self.error else None,
            "detail": self.detail,
            "attempts": self.attempts,
            "effective_mode": self.effective_mode,
        }
