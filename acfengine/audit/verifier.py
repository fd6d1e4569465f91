from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List
import math

from ..config import PlacementConfig
from ..models import Node
from ..tree import TreeIndex
from ..aggregate import AggregateRecomputer


@dataclass
class VerificationReport:
    """Outcome of an invariant audit over one snapshot."""

    node_count: int = 0
    max_depth_found: int = 0
    violations: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


class TreeVerifier:
    """
    Independent audit of the tree invariants.

    Checks, on a quiescent snapshot:
    • exactly one root
    • every node reachable from the root, no cycles
    • child_count / accepting match the live child set
    • capacity and depth bounds
    • stored depth equals parent depth + 1
    • aggregate_value equals a full recomputation
    """

    def __init__(self, config: PlacementConfig, tolerance: float = 1e-9) -> None:
        self._config = config
        self._tolerance = tolerance

    def verify(self, nodes: Iterable[Node]) -> VerificationReport:
        nodes = list(nodes)
        index = TreeIndex(nodes)
        report = VerificationReport(node_count=len(nodes))

        roots = [n for n in nodes if n.parent_id is None]
        if len(roots) != 1:
            report.violations.append(f"expected exactly one root, found {len(roots)}")

        for node in nodes:
            if node.parent_id is not None and node.parent_id not in index:
                report.violations.append(f"{node.id}: parent {node.parent_id} missing")

        if len(roots) == 1:
            reachable = index.relative_depths(roots[0].id)
            unreachable = [n.id for n in nodes if n.id not in reachable]
            if unreachable:
                report.violations.append(
                    f"unreachable from root: {sorted(unreachable)}"
                )

        live_children = Counter(n.parent_id for n in nodes if n.parent_id is not None)

        for node in nodes:
            self._check_node(node, index, live_children[node.id], report)

        if not report.violations:
            totals = AggregateRecomputer.full_recompute(nodes)
            for node in nodes:
                expected = totals[node.id]
                if not math.isclose(
                    node.aggregate_value, expected, abs_tol=self._tolerance
                ):
                    report.violations.append(
                        f"{node.id}: aggregate_value={node.aggregate_value} "
                        f"!= recomputed {expected}"
                    )

        report.max_depth_found = max((n.depth for n in nodes), default=0)
        return report

    def _check_node(
        self,
        node: Node,
        index: TreeIndex,
        live_count: int,
        report: VerificationReport,
    ) -> None:

        if node.child_count != live_count:
            report.violations.append(
                f"{node.id}: child_count={node.child_count} but {live_count} live children"
            )

        if node.child_count > node.max_children:
            report.violations.append(
                f"{node.id}: child_count={node.child_count} exceeds "
                f"max_children={node.max_children}"
            )

        if node.depth > self._config.max_depth:
            report.violations.append(
                f"{node.id}: depth={node.depth} exceeds max_depth={self._config.max_depth}"
            )

        expected_accepting = (not node.admin_closed) and node.has_capacity
        if node.accepting != expected_accepting:
            report.violations.append(
                f"{node.id}: accepting={node.accepting}, expected {expected_accepting}"
            )

        if node.parent_id is None:
            if node.depth != 0:
                report.violations.append(f"{node.id}: root depth is {node.depth}")
            return

        try:
            index.ancestors(node.id)
        except ValueError as e:
            report.violations.append(str(e))
            return

        parent = index.get(node.parent_id)
        if parent is not None and node.depth != parent.depth + 1:
            report.violations.append(
                f"{node.id}: depth={node.depth} but parent depth={parent.depth}"
            )
