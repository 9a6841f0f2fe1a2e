"""
Validation Framework for grid and datum conversions.

This module provides runtime consistency checks.
"""

from validation.consistency import (
    ConsistencyChecker,
    ConsistencyError,
    ValidationResult,
)

__all__ = [
    "ConsistencyChecker",
    "ConsistencyError",
    "ValidationResult",
]
