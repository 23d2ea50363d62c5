import math


def round_half_up(value: float, digits: int = 0):
    """
    Round halves away from negative infinity (2.5 -> 3, -2.5 -> -2), the
    convention dashboards expect, unlike Python's round-half-to-even.
    Returns an int when `digits` is 0.
    """
    if digits == 0:
        return int(math.floor(value + 0.5))
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
