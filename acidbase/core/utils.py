"""
Shared utility functions for the acid-base core.
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp value to the inclusive range [low, high].
    """
    if low > high:
        low, high = high, low
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    """
    Clamp value to the inclusive range [0.0, 1.0].
    """
    return clamp(value, 0.0, 1.0)


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation between start and end."""
    return start + (end - start) * t


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round to `digits` decimals with halves going toward +inf
    (-0.05 -> 0.0, 0.35 -> 0.4). Non-finite values pass through.
    """
    if not math.isfinite(value):
        return value
    scale = 10.0 ** digits
    return math.floor(value * scale + 0.5) / scale
