# utility functions for the panel simulation
import math
from datetime import datetime, timezone
from typing import Protocol


class RandomSource(Protocol):
    """Anything with a ``random()`` returning a float in [0, 1).

    ``random.Random`` instances qualify; tests pass a scripted sequence.
    """

    def random(self) -> float:
        ...


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw uniformly from [low, high) using a single ``rng.random()`` call."""
    return low + (high - low) * rng.random()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_float(raw) -> float:
    """
    Normalize a raw CSV cell to a float.
    Missing, unparsable and non-finite (NaN, inf) cells all become 0.0.
    """
    if raw is None:
        return 0.0
    try:
        value = float(str(raw).strip())
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value
