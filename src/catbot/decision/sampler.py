"""
Proximity sampler - averages readings over a look window.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from catbot.config import MAX_PROXIMITY

logger = logging.getLogger(__name__)


def normalize_proximity(proximity: float, max_proximity: float = MAX_PROXIMITY) -> float:
    """Out of range readings (zero, negative, NaN) count as far away."""
    if not math.isfinite(proximity) or proximity <= 0:
        return max_proximity
    return proximity


class ProximitySampler:
    """
    Collects readings between begin_recording() and end_recording().

    Readings arriving outside a window are dropped, so the sample set is
    only ever non-empty while recording.
    """

    def __init__(self, max_proximity: float = MAX_PROXIMITY):
        self.max_proximity = max_proximity
        self._recording = False
        self._samples: list[float] = []

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    def begin_recording(self):
        self._samples.clear()
        self._recording = True

    def add(self, proximity: float) -> bool:
        """Record a reading. Returns False (and drops it) when not recording."""
        if not self._recording:
            return False
        self._samples.append(normalize_proximity(proximity, self.max_proximity))
        return True

    def end_recording(self) -> float:
        """Stop recording and return the mean reading (0 if nothing was recorded)."""
        self._recording = False
        if not self._samples:
            logger.debug("No proximities recorded")
            return 0.0
        mean = float(np.mean(self._samples))
        self._samples.clear()
        return mean
