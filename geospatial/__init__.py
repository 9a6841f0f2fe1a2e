"""
Geospatial Module: National Grid and Datum Conversions.

All grid, geodetic, cartesian and datum conversions originate from this
module. Angles are radians and lengths metres throughout; degrees appear only
in the registry's published true origins and via ``GeodeticPoint.to_degrees``.

This module provides:
- Named ellipsoids, grids, datums and Helmert parameter sets
- Inverse and forward Transverse Mercator projection
- Geodetic <-> earth-centred cartesian conversion
- Seven-parameter Helmert transformation
- The composed datum conversion pipeline
"""

from geospatial.parameter_sets import (
    DATUMS,
    ELLIPSOIDS,
    HELMERT_TRANSFORMATIONS,
    PROJECTIONS,
    Ellipsoid,
    HelmertParameters,
    TransverseMercatorParameters,
    get_datum_ellipsoid,
    get_ellipsoid,
    get_projection,
    get_transformation,
    transformation_key,
)

from geospatial.coordinate_models import (
    SolverTrace,
    cartesian_to_geodetic,
    geodetic_to_cartesian,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

from geospatial.projections import (
    TransverseMercator,
    geodetic_to_grid,
    grid_to_geodetic,
    grid_to_geodetic_batch,
    meridional_arc,
)

from geospatial.helmert import (
    apply_helmert,
    apply_helmert_array,
    apply_inverse_helmert,
)

from geospatial.datum_conversion import (
    convert_datum,
    convert_datum_batch,
    etrs89_to_grid,
    to_etrs89,
    to_local_geodetic,
    to_wgs84,
    transform_geodetic,
)

__all__ = [
    # Parameter sets
    "DATUMS",
    "ELLIPSOIDS",
    "HELMERT_TRANSFORMATIONS",
    "PROJECTIONS",
    "Ellipsoid",
    "HelmertParameters",
    "TransverseMercatorParameters",
    "get_datum_ellipsoid",
    "get_ellipsoid",
    "get_projection",
    "get_transformation",
    "transformation_key",
    # Coordinate models
    "SolverTrace",
    "cartesian_to_geodetic",
    "geodetic_to_cartesian",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    # Projections
    "TransverseMercator",
    "geodetic_to_grid",
    "grid_to_geodetic",
    "grid_to_geodetic_batch",
    "meridional_arc",
    # Helmert
    "apply_helmert",
    "apply_helmert_array",
    "apply_inverse_helmert",
    # Datum conversion
    "convert_datum",
    "convert_datum_batch",
    "etrs89_to_grid",
    "to_etrs89",
    "to_local_geodetic",
    "to_wgs84",
    "transform_geodetic",
]
