"""
Consistency Checks for Grid and Datum Conversions.

This module verifies at runtime that conversions obey the properties the
conversion chain is expected to satisfy, so that a misconfigured parameter
set (a custom ellipsoid, a hand-entered Helmert shift) is caught before its
output is used.

Check Categories
----------------
1. Geodetic round trip: geodetic -> cartesian -> geodetic is the identity
2. Projection round trip: inverse then forward projection is the identity
3. Helmert inverse law: a transformation then its inverse returns the point
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from common.config import ConversionConfig, resolve_config
from common.exceptions import GeodesyError
from common.logging_config import get_logger
from common.types import CartesianPoint, GridPoint
from geospatial.coordinate_models import cartesian_to_geodetic, geodetic_to_cartesian
from geospatial.helmert import TransformationRef, apply_helmert, apply_inverse_helmert
from geospatial.parameter_sets import get_transformation
from geospatial.projections import ProjectionRef, TransverseMercator

logger = get_logger(__name__)


class ConsistencyError(GeodesyError):
    """A consistency check failed in strict mode."""


@dataclass
class ValidationResult:
    """Result of a validation check.
    
    Attributes
    ----------
    test_name : str
        Name of the test.
    passed : bool
        Whether the test passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


class ConsistencyChecker:
    """Checker for round-trip consistency of conversions.
    
    Parameters
    ----------
    strict_mode : bool
        If True, raise ConsistencyError on a failed check.
    angle_tolerance_rad : float
        Largest acceptable angular round-trip error.
    length_tolerance_m : float
        Largest acceptable linear round-trip error.
    helmert_tolerance_m : float
        Largest acceptable residual when a transformation is undone with its
        negated parameter set, which is only a first-order inverse.
    config : ConversionConfig, optional
        Solver bounds and registry policy used by the checked conversions.
    """
    
    def __init__(
        self,
        strict_mode: bool = False,
        angle_tolerance_rad: float = 1e-9,
        length_tolerance_m: float = 1e-3,
        helmert_tolerance_m: float = 0.05,
        config: Optional[ConversionConfig] = None
    ):
        self.strict_mode = strict_mode
        self.angle_tolerance_rad = angle_tolerance_rad
        self.length_tolerance_m = length_tolerance_m
        self.helmert_tolerance_m = helmert_tolerance_m
        self._config = resolve_config(config)
        self._logger = get_logger("ConsistencyChecker")
    
    def check_all(
        self,
        grid_point: GridPoint,
        projection: ProjectionRef = None,
        transformation: Optional[TransformationRef] = None
    ) -> List[ValidationResult]:
        """Run all checks for one grid point.
        
        The Helmert check is run when `transformation` is given; the point is
        first converted to cartesian on the grid's ellipsoid.
        """
        results = [
            self.check_round_trip(grid_point, projection),
            self.check_projection_round_trip(grid_point, projection),
        ]
        
        if transformation is not None:
            grid = TransverseMercator(projection, self._config)
            lat, lon = grid.to_geodetic(grid_point.northings, grid_point.eastings)
            cartesian = geodetic_to_cartesian(lon, lat, 0.0, grid.ellipsoid, self._config)
            results.append(self.check_helmert_inverse(cartesian, transformation))
        
        return results
    
    def check_round_trip(
        self,
        grid_point: GridPoint,
        projection: ProjectionRef = None
    ) -> ValidationResult:
        """Check geodetic -> cartesian -> geodetic at a grid point.
        
        Parameters
        ----------
        grid_point : GridPoint
            Point to check.
        projection : str or TransverseMercatorParameters, optional
            Grid the point is expressed in.
        """
        grid = TransverseMercator(projection, self._config)
        lat, lon = grid.to_geodetic(grid_point.northings, grid_point.eastings)
        
        cartesian = geodetic_to_cartesian(lon, lat, 0.0, grid.ellipsoid, self._config)
        recovered = cartesian_to_geodetic(
            cartesian.x, cartesian.y, cartesian.z, grid.ellipsoid, self._config
        )
        
        angle_error = max(abs(recovered.latitude - lat), abs(recovered.longitude - lon))
        height_error = abs(recovered.height)
        passed = angle_error <= self.angle_tolerance_rad and height_error <= self.length_tolerance_m
        
        return self._report(
            "geodetic_round_trip",
            passed,
            f"angle error {angle_error:.3e} rad, height error {height_error:.3e} m",
            {"angle_error_rad": angle_error, "height_error_m": height_error,
             "projection": grid.name},
        )
    
    def check_projection_round_trip(
        self,
        grid_point: GridPoint,
        projection: ProjectionRef = None
    ) -> ValidationResult:
        """Check that forward(inverse(E, N)) returns the grid point."""
        grid = TransverseMercator(projection, self._config)
        lat, lon = grid.to_geodetic(grid_point.northings, grid_point.eastings)
        northings, eastings = grid.to_grid(lat, lon)
        
        error = float(np.hypot(northings - grid_point.northings, eastings - grid_point.eastings))
        passed = error <= self.length_tolerance_m
        
        return self._report(
            "projection_round_trip",
            passed,
            f"grid error {error:.3e} m",
            {"error_m": error, "projection": grid.name},
        )
    
    def check_helmert_inverse(
        self,
        point: CartesianPoint,
        transformation: TransformationRef
    ) -> ValidationResult:
        """Check that a transformation can be undone.
        
        The exact inverse must return the point within ``length_tolerance_m``;
        the negated parameter set within ``helmert_tolerance_m``.
        """
        parameters = get_transformation(transformation, self._config)
        shifted = apply_helmert(point, parameters, self._config)
        
        exact_error = apply_inverse_helmert(shifted, parameters, self._config).distance_to(point)
        negated_error = apply_helmert(shifted, parameters.inverse(), self._config).distance_to(point)
        passed = (
            exact_error <= self.length_tolerance_m
            and negated_error <= self.helmert_tolerance_m
        )
        
        return self._report(
            "helmert_inverse",
            passed,
            f"exact residual {exact_error:.3e} m, negated residual {negated_error:.3e} m",
            {"exact_error_m": exact_error, "negated_error_m": negated_error,
             "transformation": parameters.name or "custom"},
        )
    
    def _report(
        self,
        test_name: str,
        passed: bool,
        message: str,
        details: Dict[str, Any]
    ) -> ValidationResult:
        result = ValidationResult(test_name=test_name, passed=passed,
                                  message=message, details=details)
        if not passed:
            self._logger.warning(f"Consistency check failed: {test_name}: {message}")
            if self.strict_mode:
                raise ConsistencyError(f"{test_name}: {message}")
        return result
