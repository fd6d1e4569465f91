from enum import Enum


class ScopeMode(str, Enum):
    """
    Canonical placement scopes.

    DIRECT  → only the scope root itself is a candidate (falls back to SUBTREE)
    SUBTREE → every node below the scope root, excluding the root
    """

    DIRECT = "DIRECT"
    SUBTREE = "SUBTREE"

    @classmethod
    def parse(cls, value) -> "ScopeMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unsupported scope mode: {value!r}") from None
