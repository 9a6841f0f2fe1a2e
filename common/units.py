"""
Unit Registry for Geodetic Quantities.

This module provides a centralized unit system using the `pint` library.
Internally every angle is a float in radians and every length a float in
metres; pint is used at the boundary, where callers may hand in quantities
such as ``Q_(52.65, 'degree')``, and for the Helmert parameter units
(arc-seconds and parts per million).

Example Usage
-------------
>>> from common.units import Q_, as_magnitude
>>> as_magnitude(Q_(180, 'degree'), 'radian')
3.141592653589793
>>> as_magnitude(24.7, 'meter')
24.7
"""

from typing import Any

import numpy as np
import pint
from pint import UnitRegistry as PintUnitRegistry

from common.exceptions import InvalidInput

# Create the global unit registry
ureg = PintUnitRegistry()

if "ppm" not in ureg:
    ureg.define("ppm = 1e-6 = parts_per_million")

# Convenience alias for creating quantities
Q_ = ureg.Quantity

# Standard unit definitions for the system
STANDARD_UNITS = {
    "latitude": "radian",
    "longitude": "radian",
    "height": "meter",
    "northings": "meter",
    "eastings": "meter",
    "cartesian": "meter",
    "helmert_translation": "meter",
    "helmert_rotation": "arcsecond",
    "helmert_scale": "ppm",
}


def as_magnitude(value: Any, unit: str) -> Any:
    """Return the magnitude of `value` expressed in `unit`.
    
    Parameters
    ----------
    value : float, ndarray or pint.Quantity
        A bare number (or array) is assumed to be in `unit` already.
    unit : str
        Target unit string (e.g. 'radian', 'meter').
        
    Returns
    -------
    float or ndarray
        The numeric magnitude.
        
    Raises
    ------
    InvalidInput
        If a quantity has units that cannot be converted to `unit`.
    """
    if isinstance(value, pint.Quantity):
        try:
            return value.to(unit).magnitude
        except pint.DimensionalityError as e:
            raise InvalidInput(
                f"Expected a quantity convertible to {unit}, got {value.units}"
            ) from e
    return value


def arcseconds_to_radians(value: Any) -> Any:
    """Convert arc-seconds (float or array) to radians."""
    return Q_(np.asarray(value, dtype=float), STANDARD_UNITS["helmert_rotation"]).to("radian").magnitude


def ppm_to_scale(value: Any) -> Any:
    """Convert a scale change in parts per million to a unitless factor."""
    return Q_(np.asarray(value, dtype=float), STANDARD_UNITS["helmert_scale"]).to("dimensionless").magnitude
