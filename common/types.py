"""
Type Definitions for Grid, Geodetic and Cartesian Coordinates.

This module defines the immutable value types passed between the projection
engine, the cartesian converter and the Helmert transformer. Units are fixed
per field and documented in each class; no type carries its datum, so the
ellipsoid or projection to use is always supplied by the caller.

Design Rationale
----------------
Using typed dataclasses instead of raw tuples/dicts provides:
1. Self-documenting code - field names describe the data
2. Construction-time rejection of NaN and infinities
3. Clear unit expectations in docstrings
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from common.angles import dms_from_decimal
from common.exceptions import InvalidInput


def require_finite(**values: float) -> None:
    """Raise InvalidInput naming the first argument that is not finite.
    
    Accepts scalars or arrays; an array fails if any element is not finite.
    """
    for name, value in values.items():
        try:
            finite = np.all(np.isfinite(value))
        except TypeError as e:
            raise InvalidInput(f"{name} must be numeric, got {value!r}") from e
        if not finite:
            raise InvalidInput(f"{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class GridPoint:
    """A position on a Transverse Mercator grid.
    
    Attributes
    ----------
    northings : float
        Grid northing in METRES.
    eastings : float
        Grid easting in METRES.
        
    Notes
    -----
    Field order follows the convention of the grid's worked examples
    (northings first). The point carries no projection tag.
    """
    northings: float
    eastings: float
    
    def __post_init__(self):
        require_finite(northings=self.northings, eastings=self.eastings)
        object.__setattr__(self, "northings", float(self.northings))
        object.__setattr__(self, "eastings", float(self.eastings))


@dataclass(frozen=True)
class GeodeticPoint:
    """A geodetic position on an (implicit) reference ellipsoid.
    
    Attributes
    ----------
    latitude : float
        Geodetic latitude in RADIANS. Range: [-π/2, π/2].
    longitude : float
        Geodetic longitude in RADIANS.
    height : float, optional
        Ellipsoidal height in METRES. Default 0 (on the ellipsoid surface).
        
    Examples
    --------
    >>> point = GeodeticPoint.from_degrees(52.6576, 1.7179)
    >>> round(point.to_degrees()[0], 4)
    52.6576
    """
    latitude: float  # radians
    longitude: float  # radians
    height: float = 0.0  # metres above ellipsoid
    
    def __post_init__(self):
        require_finite(latitude=self.latitude, longitude=self.longitude, height=self.height)
        if not -np.pi / 2 <= self.latitude <= np.pi / 2:
            raise InvalidInput(
                f"Latitude {self.latitude} rad out of range [-π/2, π/2]. "
                f"Did you pass degrees instead of radians?"
            )
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))
        object.__setattr__(self, "height", float(self.height))
    
    def to_degrees(self) -> Tuple[float, float]:
        """Return (latitude_degrees, longitude_degrees)."""
        return float(np.degrees(self.latitude)), float(np.degrees(self.longitude))
    
    def to_dms(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        """Return latitude and longitude as (degrees, minutes, seconds) triplets."""
        lat_deg, lon_deg = self.to_degrees()
        return dms_from_decimal(lat_deg), dms_from_decimal(lon_deg)
    
    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, height: float = 0.0) -> 'GeodeticPoint':
        """Create a point from degrees (convenience constructor)."""
        return cls(
            latitude=np.radians(lat_deg),
            longitude=np.radians(lon_deg),
            height=height
        )


@dataclass(frozen=True)
class CartesianPoint:
    """Earth-centred, earth-fixed coordinates tied to one ellipsoid's frame.
    
    Attributes
    ----------
    x, y, z : float
        Coordinates in METRES. X through the prime meridian at the equator,
        Y through 90°E, Z through the north pole.
    """
    x: float
    y: float
    z: float
    
    def __post_init__(self):
        require_finite(x=self.x, y=self.y, z=self.z)
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "z", float(self.z))
    
    def as_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)
    
    @classmethod
    def from_array(cls, xyz: NDArray[np.float64]) -> 'CartesianPoint':
        x, y, z = np.asarray(xyz, dtype=np.float64).reshape(3)
        return cls(x=x, y=y, z=z)
    
    def distance_to(self, other: 'CartesianPoint') -> float:
        """Straight-line distance to another point in metres."""
        return float(np.linalg.norm(self.as_array() - other.as_array()))


# Type aliases for array types
CoordinateArray = NDArray[np.float64]  # Shape: (N,) per coordinate component
CartesianArray = NDArray[np.float64]  # Shape: (N, 3) rows of x, y, z
