"""
Datum Conversion Pipeline.

Moves positions between datums by composing the stages of this package:

    grid ──inverse TM──▶ geodetic (source ellipsoid)
         ──forward──────▶ cartesian (source frame)
         ──Helmert──────▶ cartesian (target frame)
         ──inverse──────▶ geodetic (target ellipsoid)

Each stage feeds the next directly; nothing is cached and every function is
a pure function of its arguments.

Accuracy
--------
The published Helmert parameters for OSGB36 and Ireland 1965 are national
best fits, good to a few metres. ETRS89 is used as the realisation of WGS84,
which agrees with it to better than a metre.
"""

from typing import Optional, Tuple

import numpy as np

from common.config import ConversionConfig, resolve_config
from common.logging_config import get_logger
from common.types import CoordinateArray, GeodeticPoint, GridPoint, require_finite
from common.units import STANDARD_UNITS, as_magnitude
from geospatial.coordinate_models import (
    EllipsoidRef,
    cartesian_to_geodetic,
    cartesian_to_geodetic_array,
    geodetic_to_cartesian,
    geodetic_to_cartesian_array,
)
from geospatial.helmert import TransformationRef, apply_helmert, apply_helmert_array
from geospatial.parameter_sets import (
    get_datum_ellipsoid,
    get_ellipsoid,
    get_projection,
    get_transformation,
    transformation_key,
)
from geospatial.projections import (
    ProjectionRef,
    geodetic_to_grid,
    grid_to_geodetic,
    grid_to_geodetic_batch,
)

logger = get_logger(__name__)

GLOBAL_DATUM = "etrs89"


def transform_geodetic(
    point: GeodeticPoint,
    source_ellipsoid: EllipsoidRef,
    target_ellipsoid: EllipsoidRef,
    transformation: TransformationRef,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Move a geodetic point from one datum to another.
    
    Parameters
    ----------
    point : GeodeticPoint
        Position on the source ellipsoid (radians, metres).
    source_ellipsoid, target_ellipsoid : str or Ellipsoid
        Ellipsoids of the source and target datums.
    transformation : str or HelmertParameters
        Helmert parameters from the source to the target frame.
    config : ConversionConfig, optional
        Solver bounds and registry policy.
        
    Returns
    -------
    GeodeticPoint
        Position on the target ellipsoid, including ellipsoidal height.
    """
    cartesian = geodetic_to_cartesian(
        point.longitude, point.latitude, point.height, source_ellipsoid, config
    )
    shifted = apply_helmert(cartesian, transformation, config)
    return cartesian_to_geodetic(shifted.x, shifted.y, shifted.z, target_ellipsoid, config)


def convert_datum(
    grid_point: GridPoint,
    source_projection: ProjectionRef,
    source_ellipsoid: EllipsoidRef,
    target_ellipsoid: EllipsoidRef,
    transformation: TransformationRef,
    height=0.0,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Convert a grid point on its native datum to geodetic coordinates on another.
    
    Parameters
    ----------
    grid_point : GridPoint
        Grid position in metres.
    source_projection : str or TransverseMercatorParameters
        Grid the point is expressed in.
    source_ellipsoid : str or Ellipsoid
        Ellipsoid of the grid's datum.
    target_ellipsoid : str or Ellipsoid
        Ellipsoid of the target datum.
    transformation : str or HelmertParameters
        Helmert parameters from the grid's datum to the target datum.
    height : float or pint.Quantity
        Ellipsoidal height on the source datum in metres. Default 0.
    config : ConversionConfig, optional
        Solver bounds and registry policy.
        
    Returns
    -------
    GeodeticPoint
        Latitude, longitude (radians) and height (metres) on the target datum.
    """
    height = as_magnitude(height, STANDARD_UNITS["height"])
    require_finite(height=height)
    
    local = grid_to_geodetic(
        grid_point.northings, grid_point.eastings, source_projection, config
    )
    local = GeodeticPoint(latitude=local.latitude, longitude=local.longitude, height=height)
    return transform_geodetic(local, source_ellipsoid, target_ellipsoid, transformation, config)


def convert_datum_batch(
    northings: CoordinateArray,
    eastings: CoordinateArray,
    source_projection: ProjectionRef,
    source_ellipsoid: EllipsoidRef,
    target_ellipsoid: EllipsoidRef,
    transformation: TransformationRef,
    heights=0.0,
    config: Optional[ConversionConfig] = None
) -> Tuple[CoordinateArray, CoordinateArray, CoordinateArray]:
    """Vectorized :func:`convert_datum`.
    
    Returns
    -------
    Tuple[ndarray, ndarray, ndarray]
        (latitudes_rad, longitudes_rad, heights_m) on the target datum.
    """
    config = resolve_config(config)
    heights = np.broadcast_to(np.asarray(heights, dtype=np.float64), np.shape(northings))
    require_finite(heights=heights)
    
    latitudes, longitudes = grid_to_geodetic_batch(northings, eastings, source_projection, config)
    x, y, z = geodetic_to_cartesian_array(
        longitudes, latitudes, heights, get_ellipsoid(source_ellipsoid, config)
    )
    shifted = apply_helmert_array(
        np.column_stack([np.ravel(x), np.ravel(y), np.ravel(z)]),
        get_transformation(transformation, config),
    )
    latitudes, longitudes, heights = cartesian_to_geodetic_array(
        shifted[:, 0], shifted[:, 1], shifted[:, 2], get_ellipsoid(target_ellipsoid, config), config
    )
    shape = np.shape(northings)
    return latitudes.reshape(shape), longitudes.reshape(shape), heights.reshape(shape)


def to_local_geodetic(
    grid_point: GridPoint,
    projection: ProjectionRef = None,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Latitude/longitude on the grid's own datum (OSGB36 for the national grid)."""
    return grid_to_geodetic(grid_point.northings, grid_point.eastings, projection, config)


def to_etrs89(
    grid_point: GridPoint,
    projection: ProjectionRef = None,
    height=0.0,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Convert a grid point to ETRS89 latitude/longitude on GRS80.
    
    The grid's datum and ellipsoid are taken from its registry entry and the
    transformation from the datum pair, e.g. 'osgb36→etrs89'.
    """
    parameters = get_projection(projection, config)
    key = transformation_key(parameters.datum, GLOBAL_DATUM)
    logger.debug(f"Converting {parameters.name} point via {key}")
    
    return convert_datum(
        grid_point,
        parameters,
        parameters.ellipsoid,
        get_datum_ellipsoid(GLOBAL_DATUM),
        key,
        height=height,
        config=config,
    )


def to_wgs84(
    grid_point: GridPoint,
    projection: ProjectionRef = None,
    height=0.0,
    config: Optional[ConversionConfig] = None
) -> GeodeticPoint:
    """Convert a grid point to WGS84, realised through ETRS89 (see module notes)."""
    return to_etrs89(grid_point, projection, height, config)


def etrs89_to_grid(
    point: GeodeticPoint,
    projection: ProjectionRef = None,
    config: Optional[ConversionConfig] = None
) -> Tuple[GridPoint, float]:
    """Convert an ETRS89 position to a grid point on the grid's own datum.
    
    Parameters
    ----------
    point : GeodeticPoint
        ETRS89 latitude/longitude (radians) and GRS80 height (metres).
    projection : str or TransverseMercatorParameters, optional
        Target grid.
        
    Returns
    -------
    Tuple[GridPoint, float]
        The grid point and the ellipsoidal height on the grid's datum.
    """
    parameters = get_projection(projection, config)
    local = transform_geodetic(
        point,
        get_datum_ellipsoid(GLOBAL_DATUM),
        parameters.ellipsoid,
        transformation_key(GLOBAL_DATUM, parameters.datum),
        config,
    )
    return geodetic_to_grid(local, parameters, config), local.height
