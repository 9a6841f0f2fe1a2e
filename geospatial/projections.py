"""
Transverse Mercator Grid Projections.

This module converts between national grid coordinates (eastings, northings)
and geodetic latitude/longitude on the grid's own ellipsoid, using the series
formulas published by Ordnance Survey for the British and Irish grids.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Transverse Mercator (Gauss-Krüger) with a scaled central meridian

Inverse Projection
------------------
1. Estimate the footpoint latitude φ' from the northing alone and refine it
   by fixed-point iteration on the meridional arc M(φ', φ0) until
   |N - N0 - M| is below the configured tolerance.
2. Evaluate the radii ν, ρ and η² at φ' and the coefficients VII to XIII.
3. Latitude and longitude follow as power series in ΔE = E - E0.

The truncated series are sub-millimetre accurate within the grids' extents.
They diverge far from the central meridian, so results outside the national
extent should not be trusted.

References
----------
- Ordnance Survey (2010). A Guide to Coordinate Systems in Great Britain.
  Annex C, equations C1-C9.
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
"""

from typing import Optional, Tuple, Union

import numpy as np
from pyproj import CRS

from common.angles import cos, sec, sin, tan, tan2, tan4, tan6
from common.config import ConversionConfig, resolve_config
from common.constants import GeodeticConstants
from common.exceptions import ConvergenceFailure, DegenerateInput
from common.logging_config import get_logger
from common.types import CoordinateArray, GeodeticPoint, GridPoint, require_finite
from common.units import STANDARD_UNITS, as_magnitude
from geospatial.coordinate_models import (
    SolverTrace,
    eta_squared,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)
from geospatial.parameter_sets import (
    Ellipsoid,
    TransverseMercatorParameters,
    get_ellipsoid,
    get_projection,
)

logger = get_logger(__name__)

ProjectionRef = Union[str, TransverseMercatorParameters, None]


def meridional_arc(
    latitude_rad,
    ellipsoid: Ellipsoid,
    parameters: TransverseMercatorParameters
):
    """Compute the developed meridional arc M from φ0 to φ.
    
    Parameters
    ----------
    latitude_rad : float or ndarray
        Latitude φ in radians.
    ellipsoid : Ellipsoid
        Ellipsoid of the grid.
    parameters : TransverseMercatorParameters
        Supplies φ0 and F0.
        
    Returns
    -------
    float or ndarray
        M in metres (scaled by F0).
        
    Notes
    -----
    Fourth-order series in n = (a - b) / (a + b), OS guide equation C3.
    """
    n = ellipsoid.n
    n2 = n * n
    n3 = n2 * n
    
    phi0 = parameters.phi0
    dphi = latitude_rad - phi0
    sphi = latitude_rad + phi0
    
    ma = (1 + n + (5.0 / 4.0) * n2 + (5.0 / 4.0) * n3) * dphi
    mb = (3 * n + 3 * n2 + (21.0 / 8.0) * n3) * np.sin(dphi) * np.cos(sphi)
    mc = ((15.0 / 8.0) * n2 + (15.0 / 8.0) * n3) * np.sin(2 * dphi) * np.cos(2 * sphi)
    md = (35.0 / 24.0) * n3 * np.sin(3 * dphi) * np.cos(3 * sphi)
    
    return ellipsoid.b * parameters.scale_factor * (ma - mb + mc - md)


def footpoint_latitude(
    northings,
    ellipsoid: Ellipsoid,
    parameters: TransverseMercatorParameters,
    config: Optional[ConversionConfig] = None
):
    """Iterate for the latitude φ' whose meridional arc matches the northing.
    
    Parameters
    ----------
    northings : float or ndarray
        Grid northing(s) in metres.
    ellipsoid : Ellipsoid
        Ellipsoid of the grid.
    parameters : TransverseMercatorParameters
        Grid parameters.
    config : ConversionConfig, optional
        Tolerance and iteration bound.
        
    Returns
    -------
    Tuple
        (φ' in radians, SolverTrace of |N - N0 - M| per iteration). For array
        input the residual is the maximum over all elements.
        
    Raises
    ------
    ConvergenceFailure
        If the residual is still above tolerance after
        ``config.max_iterations`` evaluations of M.
    """
    config = resolve_config(config)
    a_f0 = ellipsoid.a * parameters.scale_factor
    offset_north = northings - parameters.false_northing
    trace = SolverTrace(solver="meridional_arc")
    
    latitude = offset_north / a_f0 + parameters.phi0
    
    for _ in range(config.max_iterations):
        arc = meridional_arc(latitude, ellipsoid, parameters)
        remainder = offset_north - arc
        residual = float(np.max(np.abs(remainder)))
        trace.residuals.append(residual)
        
        if residual < config.arc_tolerance_m:
            trace.converged = True
            break
        
        latitude = remainder / a_f0 + latitude
    
    if not trace.converged:
        logger.error(
            f"Footpoint latitude stopped after {trace.iterations} iterations "
            f"(|N - N0 - M|={trace.final_residual:.3e} m)"
        )
        raise ConvergenceFailure(trace.solver, trace.iterations, trace.final_residual)
    
    logger.debug(
        f"Footpoint latitude converged in {trace.iterations} iterations "
        f"(|N - N0 - M|={trace.final_residual:.3e} m)"
    )
    return latitude, trace


class TransverseMercator:
    """A registered Transverse Mercator grid bound to its ellipsoid.
    
    Parameters
    ----------
    projection : str or TransverseMercatorParameters, optional
        Registry key or parameters; defaults to ``config.default_projection``.
    config : ConversionConfig, optional
        Solver bounds and registry policy.
        
    Examples
    --------
    >>> grid = TransverseMercator("national_grid")
    >>> lat, lon = grid.to_geodetic(313177.270, 651409.903)
    """
    
    def __init__(
        self,
        projection: ProjectionRef = None,
        config: Optional[ConversionConfig] = None
    ):
        self._config = resolve_config(config)
        self._parameters = get_projection(projection, self._config)
        self._ellipsoid = get_ellipsoid(self._parameters.ellipsoid, self._config)
    
    @property
    def name(self) -> str:
        return self._parameters.name
    
    @property
    def parameters(self) -> TransverseMercatorParameters:
        return self._parameters
    
    @property
    def ellipsoid(self) -> Ellipsoid:
        return self._ellipsoid
    
    @property
    def proj4_string(self) -> str:
        """PROJ definition of the grid on its own ellipsoid (no datum shift)."""
        p = self._parameters
        return (
            f"+proj=tmerc +lat_0={p.true_origin_latitude} +lon_0={p.true_origin_longitude} "
            f"+k={p.scale_factor} +x_0={p.false_easting} +y_0={p.false_northing} "
            f"+a={self._ellipsoid.a} +b={self._ellipsoid.b} +units=m +no_defs"
        )
    
    @property
    def crs(self) -> CRS:
        """The grid as a pyproj CRS, for interoperability with PROJ."""
        return CRS.from_proj4(self.proj4_string)
    
    def meridional_arc(self, latitude_rad):
        return meridional_arc(latitude_rad, self._ellipsoid, self._parameters)
    
    def footpoint_latitude(self, northings) -> Tuple[float, SolverTrace]:
        return footpoint_latitude(northings, self._ellipsoid, self._parameters, self._config)
    
    def to_geodetic(self, northings, eastings):
        """Inverse projection: grid coordinates to (latitude, longitude) in radians.
        
        Parameters
        ----------
        northings, eastings : float or ndarray
            Grid coordinates in metres.
            
        Returns
        -------
        Tuple
            (latitude_rad, longitude_rad) on the grid's ellipsoid.
            
        Raises
        ------
        DegenerateInput
            If the northing places the footpoint at or beyond a pole, or the
            easting lies further than ``TM_MAX_EASTING_OFFSET`` from the
            central meridian, where the series diverge.
        ConvergenceFailure
            If the footpoint iteration does not converge.
            
        Notes
        -----
        Longitude is wrapped to [-π, π).
        """
        p = self._parameters
        
        de = eastings - p.false_easting
        if np.any(np.abs(de) > GeodeticConstants.TM_MAX_EASTING_OFFSET.value):
            logger.error(f"Easting {eastings} too far from the central meridian of {p.name}")
            raise DegenerateInput(
                f"Easting {eastings} is outside the range of grid {p.name!r}"
            )
        
        phi, _ = self.footpoint_latitude(northings)
        if np.any(np.abs(phi) >= np.pi / 2):
            logger.error(f"Footpoint latitude beyond a pole for northing {northings}")
            raise DegenerateInput(
                f"Northing {northings} is outside the range of grid {p.name!r}"
            )
        
        nu = radius_of_curvature_prime_vertical(phi, self._ellipsoid, p.scale_factor)
        rho = radius_of_curvature_meridian(phi, self._ellipsoid, p.scale_factor)
        eta2 = eta_squared(nu, rho)
        
        t = tan(phi)
        t2 = tan2(phi)
        t4 = tan4(phi)
        t6 = tan6(phi)
        sec_phi = sec(phi)
        
        VII = t / (2 * rho * nu)
        VIII = t / (24 * rho * nu**3) * (5 + 3 * t2 + eta2 - 9 * t2 * eta2)
        IX = t / (720 * rho * nu**5) * (61 + 90 * t2 + 45 * t4)
        X = sec_phi / nu
        XI = sec_phi / (6 * nu**3) * (nu / rho + 2 * t2)
        XII = sec_phi / (120 * nu**5) * (5 + 28 * t2 + 24 * t4)
        XIII = sec_phi / (5040 * nu**7) * (61 + 662 * t2 + 1320 * t4 + 720 * t6)
        
        latitude = phi - VII * de**2 + VIII * de**4 - IX * de**6
        longitude = p.lambda0 + X * de - XI * de**3 + XII * de**5 - XIII * de**7
        longitude = np.mod(longitude + np.pi, 2 * np.pi) - np.pi
        
        if np.any(np.abs(latitude) > np.pi / 2):
            logger.error(f"Inverse series left the valid latitude range at easting {eastings}")
            raise DegenerateInput(
                f"Grid position ({northings}, {eastings}) is outside the range of grid {p.name!r}"
            )
        
        return latitude, longitude
    
    def to_grid(self, latitude_rad, longitude_rad):
        """Forward projection: (latitude, longitude) in radians to grid metres.
        
        Returns
        -------
        Tuple
            (northings, eastings) in metres.
            
        Raises
        ------
        DegenerateInput
            At a pole, where the series are undefined.
        """
        p = self._parameters
        
        if np.any(np.abs(latitude_rad) >= np.pi / 2):
            logger.error("Forward projection requested at a pole")
            raise DegenerateInput("Transverse Mercator series are undefined at the poles")
        
        nu = radius_of_curvature_prime_vertical(latitude_rad, self._ellipsoid, p.scale_factor)
        rho = radius_of_curvature_meridian(latitude_rad, self._ellipsoid, p.scale_factor)
        eta2 = eta_squared(nu, rho)
        arc = self.meridional_arc(latitude_rad)
        
        s = sin(latitude_rad)
        c = cos(latitude_rad)
        t2 = tan2(latitude_rad)
        t4 = tan4(latitude_rad)
        
        I = arc + p.false_northing
        II = nu / 2 * s * c
        III = nu / 24 * s * c**3 * (5 - t2 + 9 * eta2)
        IIIA = nu / 720 * s * c**5 * (61 - 58 * t2 + t4)
        IV = nu * c
        V = nu / 6 * c**3 * (nu / rho - t2)
        VI = nu / 120 * c**5 * (5 - 18 * t2 + t4 + 14 * eta2 - 58 * t2 * eta2)
        
        dl = longitude_rad - p.lambda0
        
        northings = I + II * dl**2 + III * dl**4 + IIIA * dl**6
        eastings = p.false_easting + IV * dl + V * dl**3 + VI * dl**5
        
        return northings, eastings


def grid_to_geodetic(
    northings,
    eastings,
    projection: ProjectionRef = None,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Convert a grid position to latitude/longitude on the grid's ellipsoid.
    
    Parameters
    ----------
    northings, eastings : float or pint.Quantity
        Grid coordinates in metres.
    projection : str or TransverseMercatorParameters, optional
        Grid to use; defaults to ``config.default_projection``.
    config : ConversionConfig, optional
        Solver bounds and registry policy.
        
    Returns
    -------
    GeodeticPoint
        Latitude and longitude in radians, height 0.
        
    Raises
    ------
    InvalidInput
        If a coordinate is not finite.
    UnknownParameterSet
        If the projection key is not registered.
    ConvergenceFailure
        If the footpoint iteration does not converge.
    """
    northings = as_magnitude(northings, STANDARD_UNITS["northings"])
    eastings = as_magnitude(eastings, STANDARD_UNITS["eastings"])
    require_finite(northings=northings, eastings=eastings)
    
    latitude, longitude = TransverseMercator(projection, config).to_geodetic(
        float(northings), float(eastings)
    )
    return GeodeticPoint(latitude=latitude, longitude=longitude)


def geodetic_to_grid(
    point: GeodeticPoint,
    projection: ProjectionRef = None,
    config: Optional[ConversionConfig] = None
) -> GridPoint:
    """Project a geodetic position (on the grid's ellipsoid) to the grid.
    
    The point's height is ignored.
    """
    northings, eastings = TransverseMercator(projection, config).to_grid(
        point.latitude, point.longitude
    )
    return GridPoint(northings=northings, eastings=eastings)


def grid_to_geodetic_batch(
    northings: CoordinateArray,
    eastings: CoordinateArray,
    projection: ProjectionRef = None,
    config: Optional[ConversionConfig] = None
) -> Tuple[CoordinateArray, CoordinateArray]:
    """Vectorized inverse projection.
    
    Parameters
    ----------
    northings, eastings : ndarray
        Arrays of equal shape, in metres.
        
    Returns
    -------
    Tuple[ndarray, ndarray]
        (latitudes_rad, longitudes_rad).
    """
    northings = np.asarray(northings, dtype=np.float64)
    eastings = np.asarray(eastings, dtype=np.float64)
    require_finite(northings=northings, eastings=eastings)
    
    latitude, longitude = TransverseMercator(projection, config).to_geodetic(northings, eastings)
    return np.asarray(latitude), np.asarray(longitude)
