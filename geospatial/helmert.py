"""
Seven-Parameter Helmert Datum Transformation.

Applies the linearised (small-angle) similarity transformation

    [xb]   [tx]   [1+s  -rz   ry ] [xa]
    [yb] = [ty] + [ rz  1+s  -rx ] [ya]
    [zb]   [tz]   [-ry   rx  1+s ] [za]

with rotations converted from arc-seconds to radians and the scale change
from ppm to a unitless factor. The linearisation is valid for the
sub-arc-second rotations of national datum shifts; it is not a general
rotation and must not be used for large angles.

References
----------
- Ordnance Survey (2010). A Guide to Coordinate Systems in Great Britain,
  section 6.2, equation (3).
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from common.config import ConversionConfig
from common.logging_config import get_logger
from common.types import CartesianArray, CartesianPoint
from common.units import arcseconds_to_radians, ppm_to_scale
from geospatial.parameter_sets import HelmertParameters, get_transformation

logger = get_logger(__name__)

TransformationRef = Union[str, HelmertParameters]


def translation_vector(parameters: HelmertParameters) -> NDArray[np.float64]:
    """(tx, ty, tz) in metres."""
    return np.array([parameters.tx, parameters.ty, parameters.tz], dtype=np.float64)


def rotation_scale_matrix(parameters: HelmertParameters) -> NDArray[np.float64]:
    """Small-angle rotation-plus-scale matrix of a parameter set."""
    rx, ry, rz = arcseconds_to_radians([parameters.rx, parameters.ry, parameters.rz])
    k = 1.0 + float(ppm_to_scale(parameters.s))
    
    return np.array([
        [k, -rz, ry],
        [rz, k, -rx],
        [-ry, rx, k],
    ], dtype=np.float64)


def apply_helmert_array(
    xyz: CartesianArray,
    parameters: HelmertParameters
) -> CartesianArray:
    """Transform a (3,) point or an (N, 3) array of points.
    
    Parameters
    ----------
    xyz : ndarray
        Cartesian coordinates in metres, one point per row.
    parameters : HelmertParameters
        Transformation to apply.
        
    Returns
    -------
    ndarray
        Transformed coordinates with the same shape as `xyz`.
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    matrix = rotation_scale_matrix(parameters)
    return xyz @ matrix.T + translation_vector(parameters)


def apply_helmert(
    point: CartesianPoint,
    transformation: Optional[TransformationRef] = None,
    config: Optional[ConversionConfig] = None
) -> CartesianPoint:
    """Apply a Helmert transformation to a cartesian point.
    
    Parameters
    ----------
    point : CartesianPoint
        Point in the source datum's frame.
    transformation : str or HelmertParameters
        Registry key such as 'etrs89→osgb36', or explicit parameters.
    config : ConversionConfig, optional
        Accepted for signature symmetry with the other conversions.
        
    Returns
    -------
    CartesianPoint
        Point in the target datum's frame.
        
    Raises
    ------
    UnknownParameterSet
        If `transformation` is None or not a registered key.
    """
    parameters = get_transformation(transformation, config)
    transformed = apply_helmert_array(point.as_array(), parameters)
    
    logger.debug(
        f"Helmert {parameters.name or 'custom'}: shift "
        f"{np.linalg.norm(transformed - point.as_array()):.3f} m"
    )
    return CartesianPoint.from_array(transformed)


def invert_helmert_array(
    xyz: CartesianArray,
    parameters: HelmertParameters
) -> CartesianArray:
    """Exactly undo :func:`apply_helmert_array` for the same parameters.
    
    Solves (I + A) x = xb - t instead of applying the negated parameters.
    The negated set differs from the exact inverse by second-order terms
    (A·t and A²·x), about 2 cm for the OSGB36 shift.
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    matrix = rotation_scale_matrix(parameters)
    shifted = xyz - translation_vector(parameters)
    return np.linalg.solve(matrix, shifted.T).T


def apply_inverse_helmert(
    point: CartesianPoint,
    transformation: Optional[TransformationRef] = None,
    config: Optional[ConversionConfig] = None
) -> CartesianPoint:
    """Map a point from a transformation's target frame back to its source frame.
    
    Unlike applying the registered reverse parameter set, this inverts the
    small-angle matrix exactly, so ``apply_inverse_helmert(apply_helmert(p, t), t)``
    returns `p` to floating-point precision.
    """
    parameters = get_transformation(transformation, config)
    return CartesianPoint.from_array(invert_helmert_array(point.as_array(), parameters))
