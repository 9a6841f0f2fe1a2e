"""
Angle Helpers and Trigonometric Shorthands.

The projection formulas in the Ordnance Survey guide are written in terms of
sin², tan⁴, sec and so on. The shorthands below keep those formulas legible.
All functions accept floats or numpy arrays.
"""

from typing import Tuple

import numpy as np


def to_radians(degrees):
    """Convert degrees to radians."""
    return np.radians(degrees)


def to_degrees(radians):
    """Convert radians to degrees."""
    return np.degrees(radians)


def decimal_from_dms(degrees, minutes=0.0, seconds=0.0):
    """Combine degrees, minutes and seconds into decimal degrees.
    
    Computes ``degrees + minutes/60 + seconds/3600``. Minute and second
    ranges are not validated, and all three fields are added with their own
    sign, so a southern/western angle must carry its sign on every field.
    """
    return degrees + minutes / 60.0 + seconds / 3600.0


def dms_from_decimal(value: float) -> Tuple[float, float, float]:
    """Split decimal degrees into (degrees, minutes, seconds).
    
    Degrees and minutes are whole numbers. The sign is carried on the first
    non-zero field so that the result reads like a printed angle, e.g.
    -0.5 -> (0.0, -30.0, 0.0).
    """
    sign = -1.0 if value < 0 else 1.0
    total_seconds = abs(value) * 3600.0
    degrees, remainder = divmod(total_seconds, 3600.0)
    minutes, seconds = divmod(remainder, 60.0)
    
    if degrees:
        return sign * degrees, minutes, seconds
    if minutes:
        return 0.0, sign * minutes, seconds
    return 0.0, 0.0, sign * seconds


def sin(x):
    return np.sin(x)


def sin2(x):
    return np.sin(x) ** 2


def cos(x):
    return np.cos(x)


def tan(x):
    return np.tan(x)


def tan2(x):
    return np.tan(x) ** 2


def tan4(x):
    return np.tan(x) ** 4


def tan6(x):
    return np.tan(x) ** 6


def sec(x):
    return 1.0 / np.cos(x)


def arctan(x):
    return np.arctan(x)
