from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Callable, Optional


class MemberIdGenerator:
    """
    Issues member ids of the form YY + letters + zero-padded sequence.

    Example: sequence 1 in 2025 with letters "AAA" → "25AAA0001".
    Sequence 0 is conventionally the system root.
    """

    def __init__(
        self,
        letters: str = "AAA",
        width: int = 4,
        start: int = 1,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not letters or not letters.isalpha():
            raise ValueError("letters must be a non-empty alphabetic string")
        if width < 1:
            raise ValueError("width must be >= 1")
        if start < 0:
            raise ValueError("start must be >= 0")

        self._letters = letters.upper()
        self._width = width
        self._next = start
        self._clock = clock or datetime.now
        self._lock = Lock()

    def make(self, sequence: int) -> str:
        if sequence < 0:
            raise ValueError("sequence must be >= 0")
        if sequence >= 10 ** self._width:
            raise ValueError(
                f"sequence {sequence} does not fit in {self._width} digits"
            )
        yy = f"{self._clock().year % 100:02d}"
        return f"{yy}{self._letters}{sequence:0{self._width}d}"

    def next(self) -> tuple:
        """Reserve the next sequence number; returns (sequence, id)."""
        with self._lock:
            sequence = self._next
            self._next += 1
        return sequence, self.make(sequence)

    @property
    def peek(self) -> int:
        with self._lock:
            return self._next
