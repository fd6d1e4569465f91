"""
Core data models for the ACF placement engine.

These dataclasses define the structured records that move between the
engine layers (Selector, Executor, Aggregates, Repository).
"""

from .node import Node, NewNodeData
from .scope import ScopeMode
from .placement_result import PlacementResult, PlacementError

__all__ = ["Node", "NewNodeData", "ScopeMode", "PlacementResult", "PlacementError"]
