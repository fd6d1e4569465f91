from .policy import TieBreakPolicy, FairDistributionPolicy, EarliestFirstPolicy, create_policy
from .selector import CandidateSelector, SelectionOutcome
from .executor import PlacementExecutor
from .scope import ScopeResolver

__all__ = [
    "TieBreakPolicy",
    "FairDistributionPolicy",
    "EarliestFirstPolicy",
    "create_policy",
    "CandidateSelector",
    "SelectionOutcome",
    "PlacementExecutor",
    "ScopeResolver",
]
