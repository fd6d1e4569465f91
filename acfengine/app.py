from typing import List, Optional
import time
import logging

from .config import PlacementConfig
from .models import Node, NewNodeData, PlacementResult
from .repository import NodeRepository, InMemoryNodeRepository
from .tree import TreeIndex
from .placement import (
    CandidateSelector,
    PlacementExecutor,
    ScopeResolver,
    create_policy,
)
from .aggregate import AggregateRecomputer
from .admin import AdminOverrides
from .audit import TreeVerifier, VerificationReport, NetworkReport

logger = logging.getLogger(__name__)


class ACFEngine:
    """
    Top-level facade for the ACF placement engine.

    This class is the **official entry point** for the surrounding
    registration service. It wires together:

        • CandidateSelector   (pure read, layer-first + tie-break)
        • PlacementExecutor   (validate-then-commit, bounded retry)
        • AggregateRecomputer (O(depth) delta propagation)
        • AdminOverrides / audit helpers

    The repository is consumer-provided; the engine never holds tree
    state of its own.
    """

    def __init__(
        self,
        repository: NodeRepository,
        config: Optional[PlacementConfig] = None,
    ) -> None:
        self.config = config or PlacementConfig()
        self.repository = repository

        policy = create_policy(self.config)
        self.selector = CandidateSelector(repository, self.config, policy)
        self.recomputer = AggregateRecomputer(repository)
        self.executor = PlacementExecutor(
            repository, self.selector, self.recomputer, self.config
        )
        self.scopes = ScopeResolver(repository, self.config)
        self.admin = AdminOverrides(repository, self.recomputer, self.config)

        logger.info("[ENGINE] Ready | %r | policy=%s", self.config, policy.name)

    @classmethod
    def create(
        cls,
        *,
        config: Optional[PlacementConfig] = None,
        repository: Optional[NodeRepository] = None,
    ) -> "ACFEngine":
        """Assemble an engine; defaults to an empty in-memory repository."""
        if repository is None:
            repository = InMemoryNodeRepository()
        return cls(repository, config)

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    def bootstrap_root(
        self,
        root_id: str,
        *,
        sequence: int = 0,
        created_at: Optional[float] = None,
        own_value: float = 0.0,
        max_children: Optional[int] = None,
    ) -> Node:
        """Create the single system root. Fails if a root already exists."""

        existing = self.repository.root_id()
        if existing is not None:
            raise ValueError(f"System root already exists ('{existing}').")

        root = Node(
            id=root_id,
            sequence=sequence,
            parent_id=None,
            depth=0,
            max_children=(
                self.config.root_max_children if max_children is None else max_children
            ),
            created_at=time.time() if created_at is None else created_at,
            own_value=own_value,
            aggregate_value=own_value,
        )
        root.refresh_accepting()

        self.repository.insert_node(root)
        logger.info("[ENGINE] System root created: %s", root_id)
        return self.repository.get_node(root_id)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place_node(
        self,
        data: NewNodeData,
        scope_root_id: str,
        scope_mode,
    ) -> PlacementResult:
        """PlaceNode(newNodeData, scopeRootId, scopeMode)."""
        return self.executor.place(data, scope_root_id, scope_mode)

    def register(
        self,
        data: NewNodeData,
        invite_code: Optional[str] = None,
    ) -> PlacementResult:
        """
        Resolve the scope from an invite code and place the node.

        Raises NodeNotFoundError when called before bootstrap_root.
        """
        scope_root_id, mode = self.scopes.resolve(invite_code)
        return self.place_node(data, scope_root_id, mode)

    def preview_candidates(self, scope_root_id: str, scope_mode) -> List[Node]:
        """Ordered eligible parents for a scope, best first (read only)."""
        return list(self.selector.rank(scope_root_id, scope_mode).candidates)

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def snapshot(self) -> TreeIndex:
        return TreeIndex(self.repository.all_nodes())

    def verify(self) -> VerificationReport:
        return TreeVerifier(self.config).verify(self.repository.all_nodes())

    def report(self, root_id: Optional[str] = None) -> NetworkReport:
        root_id = root_id or self.repository.root_id()
        return NetworkReport.build(self.repository.all_nodes(), root_id, self.config)
