"""
Exception Taxonomy for Coordinate Conversions.

Every failure of a conversion call is reported as one of the typed
exceptions below. They also derive from the closest builtin exception so that
callers which only catch ``ValueError`` or ``LookupError`` keep working.

Hierarchy
---------
GeodesyError
├── InvalidInput        (ValueError)      non-finite or out-of-range numbers
├── UnknownParameterSet (LookupError)     unrecognised registry key
├── ConvergenceFailure  (ArithmeticError) iterative solver hit its bound
└── DegenerateInput     (ValueError)      result undefined for the geometry
"""

from typing import Iterable, Optional


class GeodesyError(Exception):
    """Base class for all conversion errors."""


class InvalidInput(GeodesyError, ValueError):
    """A numeric input is not finite or lies outside its valid range."""


class UnknownParameterSet(GeodesyError, LookupError):
    """A registry lookup used a key that is not registered.
    
    Attributes
    ----------
    kind : str
        Registry name ('ellipsoid', 'projection', 'datum', 'transformation').
    key : str
        The key that was requested.
    available : tuple of str
        Keys registered for that kind.
    """
    
    def __init__(self, kind: str, key: object, available: Iterable[str] = ()):
        self.kind = kind
        self.key = key
        self.available = tuple(sorted(available))
        super().__init__(
            f"Unknown {kind} {key!r}. Available: {', '.join(self.available) or 'none'}"
        )


class ConvergenceFailure(GeodesyError, ArithmeticError):
    """An iterative solver did not converge within its iteration bound.
    
    Attributes
    ----------
    solver : str
        Name of the solver that failed.
    iterations : int
        Number of iterations performed.
    residual : float
        Last residual (same unit as the solver's tolerance).
    """
    
    def __init__(self, solver: str, iterations: int, residual: Optional[float]):
        self.solver = solver
        self.iterations = iterations
        self.residual = residual
        super().__init__(
            f"{solver} did not converge after {iterations} iterations "
            f"(last residual {residual})"
        )


class DegenerateInput(GeodesyError, ValueError):
    """The requested conversion is undefined for this geometry."""
