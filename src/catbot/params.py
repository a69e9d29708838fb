"""
Runtime tunable parameters with JSON persistence.

All layers share one Parameters instance. The web interface
can modify values at runtime; changes take effect on the next
maneuver. Single-threaded asyncio means no locks needed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from catbot import config

logger = logging.getLogger(__name__)

PARAMS_FILE = Path(__file__).parent / "params.json"


@dataclass
class Parameters:
    """Runtime tunable parameters."""

    # Obstacle thresholds (cm)
    min_proximity: float = config.MIN_PROXIMITY
    max_proximity: float = config.MAX_PROXIMITY

    # Wheel speeds (0.0-1.0)
    normal_speed: float = config.NORMAL_SPEED
    reverse_speed: float = config.REVERSE_SPEED
    turning_speed: float = config.TURNING_SPEED

    # Maneuver timing (s)
    turn_duration: float = config.TURN_DURATION
    backup_duration: float = config.BACKUP_DURATION
    recording_duration: float = config.RECORDING_DURATION

    # Corner detection
    max_recent_turns: int = config.MAX_RECENT_TURNS
    recent_turns_timeframe: float = config.RECENT_TURNS_TIMEFRAME

    def update(self, **kwargs):
        """Update parameters from dict (e.g., from web API)."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                expected_type = type(getattr(self, key))
                try:
                    setattr(self, key, expected_type(value))
                except (TypeError, ValueError):
                    logger.warning(f"Invalid value for {key}: {value}")
            else:
                logger.warning(f"Unknown parameter: {key}")

    def save(self, path: Path = PARAMS_FILE):
        """Persist to JSON file."""
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        logger.info(f"Parameters saved to {path}")

    @classmethod
    def load(cls, path: Path = PARAMS_FILE) -> Parameters:
        """Load from JSON file, or return defaults."""
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                params = cls()
                params.update(**data)
                logger.info(f"Parameters loaded from {path}")
                return params
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load {path}: {e}, using defaults")
        return cls()

    def to_dict(self) -> dict:
        """Convert to dict for JSON API."""
        return asdict(self)
