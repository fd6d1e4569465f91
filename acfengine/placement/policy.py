from abc import ABC, abstractmethod
from typing import Tuple

from ..config import PlacementConfig
from ..models import Node


class TieBreakPolicy(ABC):
    """
    Ordering applied inside the shallowest eligible layer.

    Layer-first restriction always happens before the policy is
    consulted; a policy only orders siblings of the same relative depth.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def sort_key(self, node: Node) -> Tuple:
        raise NotImplementedError


class FairDistributionPolicy(TieBreakPolicy):
    """Least-loaded first, then earliest registration, then sequence."""

    def sort_key(self, node: Node) -> Tuple:
        return (node.child_count, node.created_at, node.sequence)


class EarliestFirstPolicy(TieBreakPolicy):
    """Earliest registration first; saturates one node before the next."""

    def sort_key(self, node: Node) -> Tuple:
        return (node.created_at, node.child_count, node.sequence)


def create_policy(config: PlacementConfig) -> TieBreakPolicy:
    """
    Factory for the tie-break policy.

    Supported values:
    - "fair"     → FairDistributionPolicy
    - "earliest" → EarliestFirstPolicy
    """

    if config.tie_break == "fair":
        return FairDistributionPolicy()

    if config.tie_break == "earliest":
        return EarliestFirstPolicy()

    raise ValueError(f"Unsupported tie_break: {config.tie_break}")
