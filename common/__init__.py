"""
Common utilities and infrastructure for the national grid conversion core.

This package provides foundational components used across all modules:
- Published geodetic constants with provenance
- Conversion configuration (solver bounds, registry defaults)
- Unit registry and angle helpers
- Coordinate value types and the error taxonomy
- Logging infrastructure
"""

from common.constants import Constant, GeodeticConstants
from common.config import ConversionConfig, DEFAULT_CONFIG
from common.units import ureg, Q_, as_magnitude
from common.angles import decimal_from_dms, dms_from_decimal, to_degrees, to_radians
from common.types import CartesianPoint, GeodeticPoint, GridPoint
from common.exceptions import (
    ConvergenceFailure,
    DegenerateInput,
    GeodesyError,
    InvalidInput,
    UnknownParameterSet,
)
from common.logging_config import get_logger

__all__ = [
    "Constant",
    "GeodeticConstants",
    "ConversionConfig",
    "DEFAULT_CONFIG",
    "ureg",
    "Q_",
    "as_magnitude",
    "decimal_from_dms",
    "dms_from_decimal",
    "to_degrees",
    "to_radians",
    "CartesianPoint",
    "GeodeticPoint",
    "GridPoint",
    "ConvergenceFailure",
    "DegenerateInput",
    "GeodesyError",
    "InvalidInput",
    "UnknownParameterSet",
    "get_logger",
]
