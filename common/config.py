"""
Conversion Configuration.

A single frozen :class:`ConversionConfig` carries the solver bounds and the
registry defaults. Every public conversion accepts an optional ``config``;
``None`` means :data:`DEFAULT_CONFIG`.
"""

from dataclasses import dataclass, replace as _replace
from typing import Optional

import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import InvalidInput


@dataclass(frozen=True)
class ConversionConfig:
    """Configuration for grid and datum conversions.
    
    Attributes
    ----------
    max_iterations : int
        Iteration bound shared by the meridional-arc solver and the
        cartesian-to-geodetic solver.
    arc_tolerance_m : float
        Meridional-arc stop criterion |N - N0 - M| in metres.
    latitude_tolerance_rad : float
        Cartesian inverse stop criterion on successive latitudes in radians.
    default_projection : str
        Projection key used when none is given.
    default_ellipsoid : str
        Ellipsoid key used when none is given.
    fallback_to_default : bool
        If True, an unknown ellipsoid or projection key resolves to the
        default above and a warning is logged. If False, the lookup raises
        UnknownParameterSet.
    """
    max_iterations: int = GeodeticConstants.MAX_SOLVER_ITERATIONS
    arc_tolerance_m: float = GeodeticConstants.MERIDIONAL_ARC_TOLERANCE.value
    latitude_tolerance_rad: float = GeodeticConstants.LATITUDE_TOLERANCE.value
    default_projection: str = "national_grid"
    default_ellipsoid: str = "airy1830"
    fallback_to_default: bool = False
    
    def __post_init__(self):
        self.validate()
    
    def validate(self) -> None:
        """Check solver bounds.
        
        Raises
        ------
        InvalidInput
            If the iteration bound or a tolerance is not positive.
        """
        if not isinstance(self.max_iterations, (int, np.integer)) or self.max_iterations < 1:
            raise InvalidInput(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}"
            )
        for name in ("arc_tolerance_m", "latitude_tolerance_rad"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise InvalidInput(f"{name} must be positive and finite, got {value!r}")
    
    def replace(self, **changes) -> 'ConversionConfig':
        """Return a copy with the given fields changed."""
        return _replace(self, **changes)


DEFAULT_CONFIG = ConversionConfig()


def resolve_config(config: Optional[ConversionConfig]) -> ConversionConfig:
    """Return `config`, or the default configuration when it is None."""
    return DEFAULT_CONFIG if config is None else config
