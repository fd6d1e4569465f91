from .verifier import TreeVerifier, VerificationReport
from .report import NetworkReport, LevelStats, theoretical_max_size

__all__ = [
    "TreeVerifier",
    "VerificationReport",
    "NetworkReport",
    "LevelStats",
    "theoretical_max_size",
]
