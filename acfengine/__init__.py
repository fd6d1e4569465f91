"""
ACF placement engine.

Assigns every newly registered member a parent inside a capacity and
depth bounded tree, breadth first, with a fair tie-break, and stays
correct when many registrations race for the same slots.
"""

from .app import ACFEngine
from .config import PlacementConfig
from .identity import MemberIdGenerator
from .models import Node, NewNodeData, ScopeMode, PlacementResult, PlacementError

__all__ = [
    "ACFEngine",
    "PlacementConfig",
    "MemberIdGenerator",
    "Node",
    "NewNodeData",
    "ScopeMode",
    "PlacementResult",
    "PlacementError",
]
