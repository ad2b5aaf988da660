"""Error types raised by the frontier solver and its helpers."""

from typing import Optional


class FrontierError(Exception):
    """Base class for all frontier_sweep errors."""


class InvalidConfiguration(FrontierError, ValueError):
    """Constraint or sweep parameters that can never produce a valid frontier."""


class InvalidReturnData(FrontierError, ValueError):
    """Return matrix with missing values, bad shape or non-numeric entries."""


class NumericalFailure(FrontierError, ArithmeticError):
    """
    Raised when the covariance estimate is not positive definite or a
    quadratic program step cannot be solved.

    Attributes:
        step: Index of the failing sweep step (None if not step-specific)
        aversion: Aversion coefficient of the failing step
    """

    def __init__(
        self,
        message: str,
        step: Optional[int] = None,
        aversion: Optional[float] = None
    ):
        super().__init__(message)
        self.step = step
        self.aversion = aversion


class EmptyTable(FrontierError, LookupError):
    """A query was run against a frontier table with no rows."""
