"""
Coordinate Models for Ellipsoidal Earth Geometry.

This module converts between geodetic coordinates (latitude, longitude,
ellipsoidal height) and Earth-Centred Earth-Fixed cartesian coordinates on a
named reference ellipsoid, and provides the radii of curvature shared with
the Transverse Mercator engine.

Scientific Context
------------------
Domain: Geodesy, datum transformation
Model: Rotational ellipsoid (Airy 1830, Airy 1830 modified, GRS80, WGS84)

The forward conversion is closed form. The inverse has no closed form for
latitude; it is solved by fixed-point iteration (Bowring-style), which for
points off the polar axis converges in a handful of iterations. The iteration
is bounded and reports ConvergenceFailure instead of looping forever.

References
----------
- Ordnance Survey (2010). A Guide to Coordinate Systems in Great Britain.
  Annex B, equations B1-B6.
- Bowring, B.R. (1976). Transformation from spatial to geographical
  coordinates. Survey Review, 23(181), 323-327.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from common.angles import sin2
from common.config import ConversionConfig, resolve_config
from common.constants import GeodeticConstants
from common.exceptions import ConvergenceFailure, DegenerateInput
from common.logging_config import get_logger
from common.types import CartesianPoint, CoordinateArray, GeodeticPoint, require_finite
from common.units import STANDARD_UNITS, as_magnitude
from geospatial.parameter_sets import Ellipsoid, get_ellipsoid

logger = get_logger(__name__)

EllipsoidRef = Union[str, Ellipsoid, None]


@dataclass
class SolverTrace:
    """Record of an iterative solve.
    
    Attributes
    ----------
    solver : str
        Name of the solver.
    residuals : list of float
        Residual after each iteration; for array input the maximum over all
        elements.
    converged : bool
        Whether the stop criterion was met.
    """
    solver: str
    residuals: List[float] = field(default_factory=list)
    converged: bool = False
    
    @property
    def iterations(self) -> int:
        return len(self.residuals)
    
    @property
    def final_residual(self) -> Optional[float]:
        return self.residuals[-1] if self.residuals else None
    
    def is_monotonic(self) -> bool:
        """True if every residual is strictly smaller than the one before."""
        return all(b < a for a, b in zip(self.residuals, self.residuals[1:]))


def radius_of_curvature_prime_vertical(
    latitude_rad,
    ellipsoid: Ellipsoid,
    scale: float = 1.0
):
    """Compute the radius of curvature in the prime vertical (ν).
    
    Parameters
    ----------
    latitude_rad : float or ndarray
        Geodetic latitude in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid.
    scale : float
        Multiplier applied to a; pass F0 to obtain the projection's ν.
        
    Returns
    -------
    float or ndarray
        ν in metres.
        
    Notes
    -----
    ν = a·F0 / (1 - e² sin²φ)^(1/2)
    """
    return ellipsoid.a * scale / np.sqrt(1 - ellipsoid.eccentricity_squared * sin2(latitude_rad))


def radius_of_curvature_meridian(
    latitude_rad,
    ellipsoid: Ellipsoid,
    scale: float = 1.0
):
    """Compute the radius of curvature in the meridian plane (ρ).
    
    Notes
    -----
    ρ = a·F0 (1 - e²) / (1 - e² sin²φ)^(3/2)
    """
    e2 = ellipsoid.eccentricity_squared
    return ellipsoid.a * scale * (1 - e2) / (1 - e2 * sin2(latitude_rad)) ** 1.5


def eta_squared(nu, rho):
    """η² = ν/ρ - 1."""
    return nu / rho - 1


def geodetic_to_cartesian(
    longitude,
    latitude,
    height=0.0,
    ellipsoid: EllipsoidRef = None,
    config: Optional[ConversionConfig] = None
) -> CartesianPoint:
    """Convert geodetic coordinates to earth-centred cartesian coordinates.
    
    Parameters
    ----------
    longitude, latitude : float or pint.Quantity
        Geodetic coordinates in radians (or angle quantities).
    height : float or pint.Quantity
        Ellipsoidal height in metres.
    ellipsoid : str or Ellipsoid, optional
        Reference ellipsoid; defaults to ``config.default_ellipsoid``.
    config : ConversionConfig, optional
        Registry defaults.
        
    Returns
    -------
    CartesianPoint
        (x, y, z) in metres in the ellipsoid's frame.
        
    Raises
    ------
    InvalidInput
        If any input is not finite.
    UnknownParameterSet
        If the ellipsoid key is not registered.
    """
    longitude = as_magnitude(longitude, STANDARD_UNITS["longitude"])
    latitude = as_magnitude(latitude, STANDARD_UNITS["latitude"])
    height = as_magnitude(height, STANDARD_UNITS["height"])
    require_finite(longitude=longitude, latitude=latitude, height=height)
    
    x, y, z = geodetic_to_cartesian_array(
        longitude, latitude, height, get_ellipsoid(ellipsoid, config)
    )
    return CartesianPoint(x=x, y=y, z=z)


def geodetic_to_cartesian_array(
    longitudes_rad,
    latitudes_rad,
    heights_m,
    ellipsoid: Ellipsoid
) -> Tuple[CoordinateArray, CoordinateArray, CoordinateArray]:
    """Vectorized geodetic to cartesian conversion (no validation)."""
    sin_lat = np.sin(latitudes_rad)
    cos_lat = np.cos(latitudes_rad)
    e2 = ellipsoid.eccentricity_squared
    
    nu = radius_of_curvature_prime_vertical(latitudes_rad, ellipsoid)
    
    x = (nu + heights_m) * cos_lat * np.cos(longitudes_rad)
    y = (nu + heights_m) * cos_lat * np.sin(longitudes_rad)
    z = ((1 - e2) * nu + heights_m) * sin_lat
    
    return x, y, z


def geodetic_latitude_iteration(
    z,
    p,
    ellipsoid: Ellipsoid,
    config: Optional[ConversionConfig] = None
):
    """Solve for geodetic latitude from z and the distance p from the polar axis.
    
    Starts from φ = atan(z / (p(1 - e²))) and repeats
    φ ← atan((z + e² ν(φ) sin φ) / p) until successive estimates differ by
    less than ``config.latitude_tolerance_rad``.
    
    Returns
    -------
    Tuple
        (latitude_rad, nu, trace) where nu is evaluated at the final latitude.
        
    Raises
    ------
    ConvergenceFailure
        If the bound ``config.max_iterations`` is reached.
    """
    config = resolve_config(config)
    e2 = ellipsoid.eccentricity_squared
    trace = SolverTrace(solver="cartesian_to_geodetic")
    
    # arctan2 with p >= 0 equals arctan(z / p) and is defined on the polar axis
    latitude = np.arctan2(z, p * (1 - e2))
    
    for _ in range(config.max_iterations):
        nu = radius_of_curvature_prime_vertical(latitude, ellipsoid)
        latitude_new = np.arctan2(z + e2 * nu * np.sin(latitude), p)
        delta = float(np.max(np.abs(latitude_new - latitude)))
        latitude = latitude_new
        trace.residuals.append(delta)
        
        if delta < config.latitude_tolerance_rad:
            trace.converged = True
            break
    
    if not trace.converged:
        logger.error(
            f"Latitude iteration stopped after {trace.iterations} iterations "
            f"(delta={trace.final_residual:.3e} rad)"
        )
        raise ConvergenceFailure(trace.solver, trace.iterations, trace.final_residual)
    
    logger.debug(
        f"Latitude converged in {trace.iterations} iterations "
        f"(delta={trace.final_residual:.3e} rad)"
    )
    return latitude, radius_of_curvature_prime_vertical(latitude, ellipsoid), trace


def cartesian_to_geodetic_array(
    x,
    y,
    z,
    ellipsoid: Ellipsoid,
    config: Optional[ConversionConfig] = None
):
    """Vectorized cartesian to geodetic conversion.
    
    Returns
    -------
    Tuple
        (latitude_rad, longitude_rad, height_m).
        
    Raises
    ------
    DegenerateInput
        If any point is the geocentre, where latitude is undefined.
    ConvergenceFailure
        If the latitude iteration does not converge.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    
    p = np.hypot(x, y)
    if np.any((p == 0) & (z == 0)):
        logger.error("Cartesian point at the geocentre has no geodetic position")
        raise DegenerateInput("The geocentre (0, 0, 0) has no geodetic latitude")
    
    # Full-quadrant longitude; on the polar axis arctan2(0, 0) gives 0
    longitude = np.arctan2(y, x)
    
    latitude, nu, _ = geodetic_latitude_iteration(z, p, ellipsoid, config)
    
    sin_lat = np.sin(latitude)
    cos_lat = np.cos(latitude)
    near_pole = np.abs(cos_lat) < GeodeticConstants.POLAR_COSINE_THRESHOLD
    
    with np.errstate(divide="ignore", invalid="ignore"):
        height = np.where(
            near_pole,
            np.abs(z) / np.abs(sin_lat) - nu * (1 - ellipsoid.eccentricity_squared),
            p / cos_lat - nu
        )
    
    return latitude, longitude, height


def cartesian_to_geodetic(
    x,
    y,
    z,
    ellipsoid: EllipsoidRef = None,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Convert earth-centred cartesian coordinates to geodetic coordinates.
    
    Parameters
    ----------
    x, y, z : float or pint.Quantity
        Cartesian coordinates in metres.
    ellipsoid : str or Ellipsoid, optional
        Reference ellipsoid; defaults to ``config.default_ellipsoid``.
    config : ConversionConfig, optional
        Solver bounds and registry defaults.
        
    Returns
    -------
    GeodeticPoint
        Latitude and longitude in radians, ellipsoidal height in metres.
        
    Notes
    -----
    Longitude uses the four-quadrant arctangent of (y, x), so points west of
    the prime meridian or in the eastern hemisphere beyond 90° are handled.
    On the polar axis the latitude is ±π/2 and the longitude is 0.
    
    Raises
    ------
    InvalidInput
        If any coordinate is not finite.
    DegenerateInput
        For the geocentre.
    ConvergenceFailure
        If the latitude iteration does not converge.
    """
    x = as_magnitude(x, STANDARD_UNITS["cartesian"])
    y = as_magnitude(y, STANDARD_UNITS["cartesian"])
    z = as_magnitude(z, STANDARD_UNITS["cartesian"])
    require_finite(x=x, y=y, z=z)
    config = resolve_config(config)
    
    latitude, longitude, height = cartesian_to_geodetic_array(
        x, y, z, get_ellipsoid(ellipsoid, config), config
    )
    return GeodeticPoint(latitude=latitude, longitude=longitude, height=height)
