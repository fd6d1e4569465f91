import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class PlacementConfig:
    """
    Central configuration object for placement behavior.
    Controls structural bounds, retry budget and tie-break policy.
    """

    def __init__(
        self,
        max_depth: int = 7,
        root_max_children: int = 1,
        default_max_children: int = 5,
        min_max_children: int = 1,
        max_max_children: int = 5,
        max_retries: int = 8,
        retry_backoff_seconds: float = 0.0,
        tie_break: str = "fair",        # "fair" or "earliest"
        acf_root_id: str = None,
        respect_accepting: bool = True,  # skip admin-closed nodes during selection
        default_accepting: bool = True,  # new members start open to children
    ):
        self.max_depth = max_depth
        self.root_max_children = root_max_children
        self.default_max_children = default_max_children
        self.min_max_children = min_max_children
        self.max_max_children = max_max_children
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.tie_break = tie_break
        self.acf_root_id = acf_root_id
        self.respect_accepting = respect_accepting
        self.default_accepting = default_accepting

        self._validate()

    def _validate(self):
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")

        if self.root_max_children < 0 or self.default_max_children < 0:
            raise ValueError("Default capacities must be >= 0")

        if not 0 <= self.min_max_children <= self.max_max_children:
            raise ValueError(
                f"Invalid admin capacity bounds: "
                f"[{self.min_max_children}, {self.max_max_children}]"
            )

        if not self.min_max_children <= self.default_max_children <= self.max_max_children:
            raise ValueError(
                f"default_max_children={self.default_max_children} is outside "
                f"[{self.min_max_children}, {self.max_max_children}]"
            )

        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")

        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be >= 0")

        if self.tie_break not in {"fair", "earliest"}:
            raise ValueError(f"Unsupported tie_break: {self.tie_break}")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_env(cls) -> "PlacementConfig":
        """Build a config from ACF_* environment variables."""
        return cls(
            max_depth=int(os.getenv("ACF_MAX_DEPTH", "7")),
            root_max_children=int(os.getenv("ACF_ROOT_MAX_CHILDREN", "1")),
            default_max_children=int(os.getenv("ACF_DEFAULT_MAX_CHILDREN", "5")),
            min_max_children=int(os.getenv("ACF_MIN_MAX_CHILDREN", "1")),
            max_max_children=int(os.getenv("ACF_MAX_MAX_CHILDREN", "5")),
            max_retries=int(os.getenv("ACF_MAX_RETRIES", "8")),
            retry_backoff_seconds=float(os.getenv("ACF_RETRY_BACKOFF_SECONDS", "0")),
            tie_break=os.getenv("ACF_TIE_BREAK", "fair"),
            acf_root_id=os.getenv("ACF_ROOT_ID") or None,
            respect_accepting=_env_flag("ACF_RESPECT_ACCEPTING", True),
            default_accepting=_env_flag("ACF_DEFAULT_ACCEPTING", True),
        )

    def __repr__(self) -> str:
        return (
            f"PlacementConfig(max_depth={self.max_depth}, "
            f"default_max_children={self.default_max_children}, "
            f"max_retries={self.max_retries}, tie_break='{self.tie_break}', "
            f"respect_accepting={self.respect_accepting})"
        )
