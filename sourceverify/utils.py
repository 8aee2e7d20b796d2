"""Small numeric helpers shared across the package."""

import math


def round_half_up(value: float) -> int:
    """Round with .5 going towards +inf (-2.5 -> -2, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))
