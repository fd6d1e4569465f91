from .recomputer import AggregateRecomputer

__all__ = ["AggregateRecomputer"]
