from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd

from ..config import PlacementConfig
from ..models import Node
from ..tree import TreeIndex


def theoretical_max_size(levels: int, fan_out: int) -> int:
    """
    Maximum network size for `levels` levels (self included) at `fan_out`.

    theoretical_max_size(7, 5) == 1 + 5 + 25 + ... + 15625 == 19531
    """

    if levels < 1:
        return 0
    return int(sum(fan_out ** k for k in range(levels)))


@dataclass
class LevelStats:
    level: int
    members: int
    capacity: int
    open_slots: int
    mean_children: float
    max_children_seen: int

    @property
    def fill_ratio(self) -> float:
        return self.members / self.capacity if self.capacity else 0.0


@dataclass
class NetworkReport:
    """
    Per-level shape of the network below one root.

    Levels are relative to the report root (root = level 0).
    Capacity per level assumes every node at the previous level uses
    its own max_children; open_slots counts free, accepting slots.
    """

    root_id: str
    total_members: int
    levels: List[LevelStats] = field(default_factory=list)
    aggregate_value: float = 0.0
    fan_out_std: float = 0.0

    @classmethod
    def build(
        cls,
        nodes: Iterable[Node],
        root_id: str,
        config: PlacementConfig,
    ) -> "NetworkReport":

        index = TreeIndex(nodes)
        depths = index.relative_depths(root_id)
        if not depths:
            raise KeyError(f"Root '{root_id}' is not in the snapshot.")

        max_level = max(depths.values())
        by_level: Dict[int, List[Node]] = {lvl: [] for lvl in range(max_level + 1)}
        for node_id, lvl in depths.items():
            by_level[lvl].append(index.get(node_id))

        levels: List[LevelStats] = []
        previous_capacity = 1

        for lvl in range(max_level + 1):
            members = by_level[lvl]
            counts = np.array([n.child_count for n in members], dtype=float)
            open_slots = int(sum(
                n.max_children - n.child_count
                for n in members
                if n.is_eligible(config.max_depth)
            ))

            levels.append(LevelStats(
                level=lvl,
                members=len(members),
                capacity=previous_capacity,
                open_slots=open_slots,
                mean_children=float(np.mean(counts)) if counts.size else 0.0,
                max_children_seen=int(np.max(counts)) if counts.size else 0,
            ))
            previous_capacity = int(sum(n.max_children for n in members))

        # Fan-out spread across internal nodes (lower means fairer distribution)
        internal = np.array(
            [n.child_count for n in index.nodes() if n.id in depths and n.child_count > 0],
            dtype=float,
        )

        return cls(
            root_id=root_id,
            total_members=len(depths),
            levels=levels,
            aggregate_value=index.get(root_id).aggregate_value,
            fan_out_std=float(np.std(internal)) if internal.size else 0.0,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "level": s.level,
                    "members": s.members,
                    "capacity": s.capacity,
                    "fill_ratio": s.fill_ratio,
                    "open_slots": s.open_slots,
                    "mean_children": s.mean_children,
                    "max_children_seen": s.max_children_seen,
                }
                for s in self.levels
            ]
        ).set_index("level")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root_id": self.root_id,
            "total_members": self.total_members,
            "aggregate_value": self.aggregate_value,
            "fan_out_std": self.fan_out_std,
            "open_slots": sum(s.open_slots for s in self.levels),
            "levels": [
                {
                    "level": s.level,
                    "members": s.members,
                    "capacity": s.capacity,
                    "fill_ratio": s.fill_ratio,
                    "open_slots": s.open_slots,
                }
                for s in self.levels
            ],
        }
