"""
Frontier Configuration
======================

Holds the constraint and sweep settings for one frontier computation.

Defaults mirror the classic risk-premium sweep: short selling prohibited,
no concentration cap, aversion coefficients from 0 to 0.5 in steps of 0.005.
"""

import math
from typing import Optional

import numpy as np

from frontier_sweep.core.exceptions import InvalidConfiguration


class FrontierConfig:
    """
    Stores all configurable assumptions for a frontier sweep.

    Attributes:
        allow_short: If True, allow negative weights
        max_allocation: Maximum fraction in any single asset (None = no cap)
        aversion_max: Upper bound of the aversion sweep (inclusive)
        aversion_step: Increment between consecutive aversion coefficients
        use_population_cov: If True, divide by N; if False, by N-1 (sample)
    """

    DEFAULT_AVERSION_MAX = 0.5
    DEFAULT_AVERSION_STEP = 0.005

    # Relative fuzz when counting sweep steps, so 1/0.001 gives 1001 values
    GRID_FUZZ = 1e-9

    # Slack on cap * N >= 1, so a cap of exactly 1/N survives rounding
    CAP_TOL = 1e-12

    def __init__(
        self,
        allow_short: bool = False,
        max_allocation: Optional[float] = None,
        aversion_max: float = DEFAULT_AVERSION_MAX,
        aversion_step: float = DEFAULT_AVERSION_STEP,
        use_population_cov: bool = False
    ):
        self.allow_short = bool(allow_short)
        self.max_allocation = max_allocation
        self.aversion_max = aversion_max
        self.aversion_step = aversion_step
        self.use_population_cov = use_population_cov

    @property
    def ddof(self) -> int:
        """Delta degrees of freedom for the covariance estimator."""
        return 0 if self.use_population_cov else 1

    def validate(self, n_assets: int):
        """
        Check the configuration against the number of assets.

        Args:
            n_assets: Number of assets in the return matrix

        Raises:
            InvalidConfiguration: If any parameter is out of range
        """
        if n_assets < 1:
            raise InvalidConfiguration("At least one asset is required")

        if self.max_allocation is not None:
            cap = self.max_allocation
            if not np.isfinite(cap) or cap <= 0 or cap > 1:
                raise InvalidConfiguration(
                    f"max_allocation must be in (0, 1], got {cap}"
                )
            if cap * n_assets < 1 - self.CAP_TOL:
                raise InvalidConfiguration(
                    f"Insufficient assets to reach full allocation under the cap: "
                    f"{n_assets} assets x {cap} = {cap * n_assets:.4f} < 1"
                )

        for name in ('aversion_max', 'aversion_step'):
            value = getattr(self, name)
            if value is None or not np.isfinite(value) or value <= 0:
                raise InvalidConfiguration(f"{name} must be positive, got {value}")

        if self.aversion_step > self.aversion_max:
            raise InvalidConfiguration(
                f"aversion_step ({self.aversion_step}) must not exceed "
                f"aversion_max ({self.aversion_max})"
            )

    def n_steps(self) -> int:
        """Number of sweep steps: floor(aversion_max / aversion_step) + 1."""
        ratio = self.aversion_max / self.aversion_step
        return int(math.floor(ratio * (1 + self.GRID_FUZZ))) + 1

    def aversion_grid(self) -> np.ndarray:
        """
        Aversion coefficients 0, step, 2*step, ... up to aversion_max.

        Returns:
            1-D array in increasing order
        """
        return np.arange(self.n_steps()) * self.aversion_step

    def describe(self) -> str:
        """One-line human readable summary."""
        cap = "none" if self.max_allocation is None else f"{self.max_allocation:.2%}"
        return (
            f"short selling: {'allowed' if self.allow_short else 'not allowed'}, "
            f"max allocation: {cap}, "
            f"aversion sweep: 0 to {self.aversion_max} by {self.aversion_step} "
            f"({self.n_steps()} steps), "
            f"covariance: {'population' if self.use_population_cov else 'sample'}"
        )

    def __repr__(self) -> str:
        return (
            f"FrontierConfig(allow_short={self.allow_short}, "
            f"max_allocation={self.max_allocation}, "
            f"aversion_max={self.aversion_max}, "
            f"aversion_step={self.aversion_step}, "
            f"use_population_cov={self.use_population_cov})"
        )
