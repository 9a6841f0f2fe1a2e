"""
Geodetic Constants for National Grid Conversions.

This module provides the published ellipsoid, projection and datum
transformation constants with their sources. All linear values are in metres,
angles in degrees or arc-seconds as published, scale changes in ppm.

References
----------
- Ordnance Survey (2010). A Guide to Coordinate Systems in Great Britain,
  D00659 v2.1. Tables 1, 2 and 6; Annexes B and C.
- Ordnance Survey Ireland (1999). Making Maps Compatible with GPS.
- NIMA TR8350.2, Third Edition, 2000 (WGS84).
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A published constant with uncertainty and provenance.
    
    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


_OS_GUIDE = "OS Guide to Coordinate Systems in Great Britain, D00659 v2.1"


class GeodeticConstants:
    """Registry of geodetic constants used throughout the system.
    
    Ellipsoids
    ----------
    Airy 1830 (OSGB36), Airy 1830 modified (Ireland 1965) and GRS80
    (ETRS89). Axes are defined exactly by their datums.
    
    Projections
    -----------
    True origins, false origins and central meridian scale factors of the
    British National Grid and the Irish National Grid.
    
    Datum Transformations
    ---------------------
    Published one-directional Helmert parameters. The reverse directions are
    derived by negation in ``geospatial.parameter_sets``.
    """
    
    # =========================================================================
    # Ellipsoids
    # =========================================================================
    
    AIRY_1830_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_377_563.396,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-major axis of the Airy 1830 ellipsoid (OSGB36)"
    )
    
    AIRY_1830_SEMI_MINOR_AXIS: Final[Constant] = Constant(
        value=6_356_256.909,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-minor axis of the Airy 1830 ellipsoid (OSGB36)"
    )
    
    AIRY_1830_MODIFIED_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_377_340.189,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-major axis of the Airy 1830 modified ellipsoid (Ireland 1965)"
    )
    
    AIRY_1830_MODIFIED_SEMI_MINOR_AXIS: Final[Constant] = Constant(
        value=6_356_034.447,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-minor axis of the Airy 1830 modified ellipsoid (Ireland 1965)"
    )
    
    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.000,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-major axis of the GRS80 ellipsoid (ETRS89)"
    )
    
    GRS80_SEMI_MINOR_AXIS: Final[Constant] = Constant(
        value=6_356_752.3141,
        uncertainty=0.0001,  # Derived, rounded as published
        unit="m",
        source=_OS_GUIDE + ", Table 1",
        description="Semi-minor axis of the GRS80 ellipsoid (ETRS89)"
    )
    
    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )
    
    WGS84_SEMI_MINOR_AXIS: Final[Constant] = Constant(
        value=6_356_752.314245,
        uncertainty=0.0001,
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-minor axis (polar radius) of WGS84 ellipsoid"
    )
    
    # =========================================================================
    # British National Grid (OSGB36)
    # =========================================================================
    
    NATIONAL_GRID_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.9996012717,
        uncertainty=0.0,
        unit="dimensionless",
        source=_OS_GUIDE + ", Table 2",
        description="Scale factor on the central meridian (F0)"
    )
    
    NATIONAL_GRID_TRUE_ORIGIN_LATITUDE: Final[Constant] = Constant(
        value=49.0,
        uncertainty=0.0,
        unit="degree",
        source=_OS_GUIDE + ", Table 2",
        description="Latitude of true origin (phi0), 49°N"
    )
    
    NATIONAL_GRID_TRUE_ORIGIN_LONGITUDE: Final[Constant] = Constant(
        value=-2.0,
        uncertainty=0.0,
        unit="degree",
        source=_OS_GUIDE + ", Table 2",
        description="Longitude of true origin and central meridian (lambda0), 2°W"
    )
    
    NATIONAL_GRID_FALSE_EASTING: Final[Constant] = Constant(
        value=400_000.0,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 2",
        description="Easting of true origin (E0)"
    )
    
    NATIONAL_GRID_FALSE_NORTHING: Final[Constant] = Constant(
        value=-100_000.0,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 2",
        description="Northing of true origin (N0)"
    )
    
    # =========================================================================
    # Irish National Grid (Ireland 1965)
    # =========================================================================
    
    IRISH_GRID_SCALE_FACTOR: Final[Constant] = Constant(
        value=1.000035,
        uncertainty=0.0,
        unit="dimensionless",
        source=_OS_GUIDE + ", Table 2",
        description="Scale factor on the central meridian (F0)"
    )
    
    IRISH_GRID_TRUE_ORIGIN_LATITUDE: Final[Constant] = Constant(
        value=53.5,
        uncertainty=0.0,
        unit="degree",
        source=_OS_GUIDE + ", Table 2",
        description="Latitude of true origin (phi0), 53°30'N"
    )
    
    IRISH_GRID_TRUE_ORIGIN_LONGITUDE: Final[Constant] = Constant(
        value=-8.0,
        uncertainty=0.0,
        unit="degree",
        source=_OS_GUIDE + ", Table 2",
        description="Longitude of true origin and central meridian (lambda0), 8°W"
    )
    
    IRISH_GRID_FALSE_EASTING: Final[Constant] = Constant(
        value=200_000.0,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 2",
        description="Easting of true origin (E0)"
    )
    
    IRISH_GRID_FALSE_NORTHING: Final[Constant] = Constant(
        value=250_000.0,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Table 2",
        description="Northing of true origin (N0)"
    )
    
    # =========================================================================
    # Helmert transformations (position vector convention)
    # Tuple order: tx, ty, tz (m), rx, ry, rz (arc-seconds), s (ppm)
    # =========================================================================
    
    # OS guide, Table 6
    HELMERT_ETRS89_TO_OSGB36: Final[tuple] = (
        -446.448, 125.157, -542.060,
        -0.1502, -0.2470, -0.8421,
        20.4894,
    )
    
    # OSi, Making Maps Compatible with GPS
    HELMERT_IRE65_TO_ETRS89: Final[tuple] = (
        482.530, -130.596, 564.557,
        -1.042, -0.214, -0.631,
        8.150,
    )
    
    # =========================================================================
    # Solver bounds
    # =========================================================================
    
    MERIDIONAL_ARC_TOLERANCE: Final[Constant] = Constant(
        value=1e-4,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Annex C, equation C7",
        description="Stop when |N - N0 - M| falls below this value"
    )
    
    LATITUDE_TOLERANCE: Final[Constant] = Constant(
        value=1e-10,
        uncertainty=0.0,
        unit="radian",
        source=_OS_GUIDE + ", Annex B, equation B6",
        description="Stop when successive latitude estimates differ by less"
    )
    
    MAX_SOLVER_ITERATIONS: Final[int] = 100
    
    POLAR_COSINE_THRESHOLD: Final[float] = 1e-10
    
    TM_MAX_EASTING_OFFSET: Final[Constant] = Constant(
        value=1_000_000.0,
        uncertainty=0.0,
        unit="m",
        source=_OS_GUIDE + ", Annex C",
        description="Largest |E - E0| accepted by the inverse projection series"
    )
