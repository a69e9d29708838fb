"""
Turn-frequency heuristic.

Too many evasive turns in a short time usually means the robot is in a
corner, bouncing between walls. When that happens it should look both
ways instead of picking a random direction again.
"""

from __future__ import annotations

from collections import deque

from catbot.config import MAX_RECENT_TURNS, RECENT_TURNS_TIMEFRAME


class RecentTurnLog:
    """Timestamps of the last `capacity` evasive turns, oldest first."""

    def __init__(self, capacity: int = MAX_RECENT_TURNS):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._turns: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._turns.maxlen

    @capacity.setter
    def capacity(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        if capacity != self._turns.maxlen:
            # deque(maxlen) keeps the newest entries
            self._turns = deque(self._turns, maxlen=capacity)

    @property
    def oldest(self) -> float | None:
        return self._turns[0] if self._turns else None

    @property
    def is_full(self) -> bool:
        return len(self._turns) == self._turns.maxlen

    def record(self, timestamp: float):
        """Log a turn, evicting the oldest once at capacity."""
        self._turns.append(timestamp)

    def timestamps(self) -> list[float]:
        return list(self._turns)

    def __len__(self):
        return len(self._turns)


def needs_look_around(turns: RecentTurnLog, now: float, timeframe: float = RECENT_TURNS_TIMEFRAME) -> bool:
    """True if the log is full and its oldest turn is younger than timeframe."""
    if not turns.is_full:
        return False
    return now - turns.oldest < timeframe
