"""
Frontier Optimizer - Risk-Aversion Sweep Implementation
========================================================

This module traces the Markowitz efficient frontier by sweeping a
risk-aversion coefficient and solving one quadratic program per step:

    minimize:   1/2 * w^T * Sigma * w - lambda * mu^T * w
    subject to: sum(w) = 1
                w >= 0                (if short selling is not allowed)
                w <= max_allocation   (if a concentration cap is set)

At lambda = 0 the program returns the minimum variance portfolio. As lambda
grows, expected return is rewarded more heavily relative to risk and the
solution moves up the frontier towards higher-return, higher-risk portfolios.

The same mean vector and covariance matrix are used to evaluate arbitrary
(reference) portfolios, so a user's actual holdings can be compared
like-for-like with frontier points.
"""

import logging
import warnings
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.optimize import minimize

from frontier_sweep.core.config import FrontierConfig
from frontier_sweep.core.exceptions import (
    InvalidConfiguration,
    InvalidReturnData,
    NumericalFailure,
)
from frontier_sweep.core.table import FrontierPoint, FrontierTable

logger = logging.getLogger(__name__)

ReturnMatrix = Union[pd.DataFrame, np.ndarray, List[List[float]]]

# Tolerance for budget and bound checks on solver output
FEASIBILITY_TOL = 1e-6

# Smallest eigenvalue allowed, relative to the largest
PD_TOL = 1e-12

# Largest gain from shifting weight between assets, relative to the gradient,
# for a point the solver did not certify to still count as optimal
STATIONARITY_TOL = 1e-5


def as_return_frame(returns: ReturnMatrix) -> pd.DataFrame:
    """
    Coerce a return matrix into a float DataFrame (rows = periods, cols = assets).

    Arrays get default column names Asset_1, Asset_2, ...

    Raises:
        InvalidReturnData: If the matrix is empty, not 2-D, non-numeric,
            has duplicate asset names, or contains missing/infinite values
    """
    if isinstance(returns, pd.DataFrame):
        df = returns.copy()
    else:
        try:
            data = np.asarray(returns, dtype=float)
        except (ValueError, TypeError) as e:
            raise InvalidReturnData(f"Return matrix is not numeric: {e}") from e
        if data.ndim == 1:
            data = data.reshape(-1, 1)
        if data.ndim != 2:
            raise InvalidReturnData(
                f"Return matrix must be 2-D (periods x assets), got {data.ndim}-D"
            )
        df = pd.DataFrame(
            data, columns=[f"Asset_{i+1}" for i in range(data.shape[1])]
        )

    if df.shape[0] == 0 or df.shape[1] == 0:
        raise InvalidReturnData(f"Return matrix is empty: shape {df.shape}")

    df.columns = [str(c) for c in df.columns]
    if df.columns.duplicated().any():
        dupes = sorted(set(df.columns[df.columns.duplicated()]))
        raise InvalidReturnData(f"Duplicate asset names: {dupes}")

    try:
        df = df.astype(float)
    except (ValueError, TypeError) as e:
        raise InvalidReturnData(f"Return matrix is not numeric: {e}") from e

    bad = df.columns[~np.isfinite(df.values).all(axis=0)]
    if len(bad) > 0:
        raise InvalidReturnData(
            f"Missing or infinite values for assets: {list(bad)}"
        )

    return df


def compute_stats_from_returns(
    returns: ReturnMatrix,
    ddof: int = 1
) -> Tuple[pd.Series, pd.DataFrame]:
    """
    Compute the mean vector and covariance matrix of a return matrix.

    Args:
        returns: Return matrix (rows = time periods, cols = assets)
        ddof: 1 for sample covariance (N-1), 0 for population covariance (N)

    Returns:
        Tuple of (expected_returns, cov_matrix) labelled by asset name

    Example:
        >>> returns = np.random.randn(60, 4) * 0.05  # 60 months, 4 assets
        >>> means, cov = compute_stats_from_returns(returns)
    """
    df = as_return_frame(returns)
    expected_returns = df.mean(axis=0)
    cov_matrix = df.cov(ddof=ddof)
    return expected_returns, cov_matrix


class FrontierOptimizer:
    """
    Solves the aversion sweep and evaluates portfolios for one return matrix.

    Attributes:
        returns (pd.DataFrame): Return matrix, one column per asset
        asset_names (List[str]): Asset identifiers (column order)
        n_assets (int): Number of assets
        expected_returns (np.ndarray): Column means of the return matrix
        cov_matrix (np.ndarray): Covariance matrix of asset returns

    Example:
        >>> optimizer = FrontierOptimizer(returns)
        >>> table = optimizer.solve(FrontierConfig(max_allocation=0.5))
        >>> variance, ret = optimizer.evaluate({'AAPL': 0.6, 'GOOG': 0.4})
    """

    def __init__(self, returns: ReturnMatrix, use_population_cov: bool = False):
        self.returns = as_return_frame(returns)
        self.asset_names = list(self.returns.columns)
        self.n_assets = len(self.asset_names)
        self.use_population_cov = use_population_cov

        means, cov = compute_stats_from_returns(
            self.returns, ddof=FrontierConfig(use_population_cov=use_population_cov).ddof
        )
        self.expected_returns = means.values
        self.cov_matrix = cov.values

    # ------------------------------------------------------------------
    # Portfolio statistics
    # ------------------------------------------------------------------

    def portfolio_return(self, weights: np.ndarray) -> float:
        """Expected portfolio return: w^T * mu."""
        return float(np.dot(weights, self.expected_returns))

    def portfolio_variance(self, weights: np.ndarray) -> float:
        """Portfolio variance using the quadratic form w^T * Sigma * w."""
        return float(np.dot(weights, np.dot(self.cov_matrix, weights)))

    def portfolio_std(self, weights: np.ndarray) -> float:
        """Portfolio standard deviation sqrt(w^T * Sigma * w)."""
        # Rounding can push a zero variance slightly negative
        return float(np.sqrt(max(self.portfolio_variance(weights), 0.0)))

    def portfolio_stats(
        self,
        weights: Union[Mapping[str, float], np.ndarray]
    ) -> Dict[str, float]:
        """
        Calculate all portfolio statistics.

        Args:
            weights: Mapping asset -> fraction, or an array in column order

        Returns:
            Dictionary with variance, std_dev, exp_return and sharpe
        """
        if isinstance(weights, Mapping):
            w = self.weights_vector(weights)
        else:
            w = np.asarray(weights, dtype=float)

        var = self.portfolio_variance(w)
        std = self.portfolio_std(w)
        ret = self.portfolio_return(w)

        return {
            'variance': var,
            'std_dev': std,
            'exp_return': ret,
            'sharpe': sharpe_ratio(ret, std),
        }

    def weights_vector(self, weights: Mapping[str, float]) -> np.ndarray:
        """
        Align a weight mapping with the asset columns.

        Assets not mentioned get weight 0. A warning is issued when the
        weights do not sum to 1.

        Raises:
            InvalidConfiguration: If a weight refers to an unknown asset
        """
        unknown = [name for name in weights if str(name) not in self.asset_names]
        if unknown:
            raise InvalidConfiguration(
                f"Weights refer to assets missing from the return matrix: {unknown}"
            )

        lookup = {str(name): float(value) for name, value in weights.items()}
        w = np.array([lookup.get(name, 0.0) for name in self.asset_names])

        total = w.sum()
        if abs(total - 1.0) > FEASIBILITY_TOL:
            warnings.warn(
                f"Portfolio weights sum to {total:.6f}, not 1; "
                f"statistics describe the unnormalized portfolio"
            )

        return w

    def evaluate(self, weights: Mapping[str, float]) -> Tuple[float, float]:
        """
        Evaluate a fixed portfolio under the solver's covariance model.

        Args:
            weights: Mapping asset -> fraction

        Returns:
            Tuple of (variance, expected_return)
        """
        w = self.weights_vector(weights)
        return self.portfolio_variance(w), self.portfolio_return(w)

    def get_asset_stats(self) -> pd.DataFrame:
        """Per-asset mean, std dev and variance, indexed by asset name."""
        variances = np.diag(self.cov_matrix)
        return pd.DataFrame(
            {
                'mean': self.expected_returns,
                'std_dev': np.sqrt(variances),
                'variance': variances,
            },
            index=self.asset_names,
        )

    # ------------------------------------------------------------------
    # Frontier sweep
    # ------------------------------------------------------------------

    def check_positive_definite(self):
        """
        Raises:
            NumericalFailure: If the covariance estimate is not positive definite
        """
        if not np.all(np.isfinite(self.cov_matrix)):
            raise NumericalFailure(
                "Covariance estimate is undefined; need more periods than "
                f"assets (have {len(self.returns)} periods, {self.n_assets} assets)"
            )
        eigenvalues = np.linalg.eigvalsh(self.cov_matrix)
        # Relative threshold so rank deficiency is caught despite rounding
        if eigenvalues.min() <= PD_TOL * max(eigenvalues.max(), 0.0):
            raise NumericalFailure(
                "Covariance matrix is not positive definite "
                f"(min eigenvalue = {eigenvalues.min():.3e}); the return history "
                f"is degenerate or too short ({len(self.returns)} periods, "
                f"{self.n_assets} assets)"
            )

    def _bounds(self, config: FrontierConfig) -> Optional[List[Tuple[Optional[float], Optional[float]]]]:
        lower = None if config.allow_short else 0.0
        upper = config.max_allocation
        if lower is None and upper is None:
            return None
        return [(lower, upper) for _ in range(self.n_assets)]

    def solve_step(
        self,
        aversion: float,
        config: FrontierConfig,
        step: int = 0
    ) -> FrontierPoint:
        """
        Solve the quadratic program for a single aversion coefficient.

        Args:
            aversion: Aversion coefficient lambda
            config: Validated frontier configuration
            step: Position of this step in the sweep (for error reporting)

        Returns:
            FrontierPoint for this step

        Raises:
            NumericalFailure: If the program is infeasible or does not converge
        """
        cov = self.cov_matrix
        mu = self.expected_returns
        n = self.n_assets

        if config.max_allocation is not None and \
                config.max_allocation * n <= 1 + config.CAP_TOL:
            # A cap of exactly 1/N leaves equal weights as the only feasible point
            return self._make_point(np.ones(n) / n, aversion, step)

        # SLSQP's ftol is absolute, so the objective is brought to order one
        # whichever term dominates. The minimizer is unchanged.
        scale = max(np.trace(cov) / n, aversion * np.abs(mu).max())

        def objective(w):
            return (0.5 * np.dot(w, np.dot(cov, w)) - aversion * np.dot(mu, w)) / scale

        def gradient(w):
            return (np.dot(cov, w) - aversion * mu) / scale

        constraints = [{
            'type': 'eq',
            'fun': lambda w: np.sum(w) - 1.0,
            'jac': lambda w: np.ones(n),
        }]
        bounds = self._bounds(config)

        # Equal weights are feasible under every validated configuration
        w0 = np.ones(n) / n

        result = minimize(
            objective,
            w0,
            jac=gradient,
            method='SLSQP',
            bounds=bounds,
            constraints=constraints,
            options={'ftol': 1e-12, 'maxiter': 1000}
        )

        weights = result.x
        if not result.success:
            # SLSQP can stop short of its tolerance at an optimum that sits on
            # the bounds ("Positive directional derivative for linesearch")
            if not self._is_stationary(weights, gradient(weights), bounds):
                raise NumericalFailure(
                    f"Quadratic program failed at step {step} "
                    f"(aversion={aversion:g}): {result.message}",
                    step=step,
                    aversion=aversion,
                )
            logger.debug(
                f"step {step}: accepted optimal point despite solver status "
                f"{result.get('status')} ({result.message})"
            )

        self._check_feasible(weights, config, step, aversion)
        return self._make_point(weights, aversion, step)

    def _make_point(self, weights: np.ndarray, aversion: float, step: int) -> FrontierPoint:
        std = self.portfolio_std(weights)
        ret = self.portfolio_return(weights)

        return FrontierPoint(
            step=step,
            aversion=float(aversion),
            weights=pd.Series(weights, index=self.asset_names, name=step),
            std_dev=std,
            exp_return=ret,
            sharpe=sharpe_ratio(ret, std),
        )

    @staticmethod
    def _is_stationary(
        weights: np.ndarray,
        grad: np.ndarray,
        bounds: Optional[List[Tuple[Optional[float], Optional[float]]]]
    ) -> bool:
        """
        First-order optimality test for the budget-constrained box program.

        The point is optimal when no transfer of weight from an asset that
        can shrink to an asset that can grow lowers the objective. The
        program is convex, so this is sufficient.
        """
        if not (np.all(np.isfinite(weights)) and np.all(np.isfinite(grad))):
            return False

        if bounds is None:
            bounds = [(None, None)] * len(weights)
        lower = np.array([-np.inf if lo is None else lo for lo, _ in bounds])
        upper = np.array([np.inf if hi is None else hi for _, hi in bounds])

        can_grow = weights < upper - FEASIBILITY_TOL
        can_shrink = weights > lower + FEASIBILITY_TOL
        if not can_grow.any() or not can_shrink.any():
            return True

        violation = grad[can_shrink].max() - grad[can_grow].min()
        return violation <= STATIONARITY_TOL * max(1.0, np.abs(grad).max())

    def _check_feasible(
        self,
        weights: np.ndarray,
        config: FrontierConfig,
        step: int,
        aversion: float
    ):
        problems = []
        if not np.all(np.isfinite(weights)):
            raise NumericalFailure(
                f"Solver returned non-finite weights at step {step} "
                f"(aversion={aversion:g})",
                step=step,
                aversion=aversion,
            )
        if abs(weights.sum() - 1.0) > FEASIBILITY_TOL:
            problems.append(f"weights sum to {weights.sum():.8f}")
        if not config.allow_short and weights.min() < -FEASIBILITY_TOL:
            problems.append(f"negative weight {weights.min():.8f}")
        if config.max_allocation is not None and \
                weights.max() > config.max_allocation + FEASIBILITY_TOL:
            problems.append(f"weight {weights.max():.8f} above cap")

        if problems:
            raise NumericalFailure(
                f"Infeasible solution at step {step} (aversion={aversion:g}): "
                + "; ".join(problems),
                step=step,
                aversion=aversion,
            )

    def solve(self, config: Optional[FrontierConfig] = None) -> FrontierTable:
        """
        Trace the efficient frontier over the configured aversion sweep.

        Args:
            config: Constraint and sweep settings (defaults if None)

        Returns:
            FrontierTable with one point per sweep step, in sweep order

        Raises:
            InvalidConfiguration: If the configuration is invalid
            NumericalFailure: If the covariance is not positive definite or
                any step fails; no partial table is returned
        """
        if config is None:
            config = FrontierConfig(use_population_cov=self.use_population_cov)
        elif bool(config.use_population_cov) != bool(self.use_population_cov):
            # Moments must come from the estimator the configuration names
            return FrontierOptimizer(
                self.returns, use_population_cov=config.use_population_cov
            ).solve(config)

        config.validate(self.n_assets)
        self.check_positive_definite()

        cov_frame = pd.DataFrame(self.cov_matrix, index=self.asset_names,
                                 columns=self.asset_names)
        logger.debug(f"Covariance matrix:\n{cov_frame}")

        grid = config.aversion_grid()
        logger.info(
            f"Solving {len(grid)} frontier steps for {self.n_assets} assets "
            f"({config.describe()})"
        )

        points = []
        for step, aversion in enumerate(grid):
            point = self.solve_step(aversion, config, step)
            logger.debug(
                f"step {step}: aversion={aversion:.6f} std={point.std_dev:.6f} "
                f"return={point.exp_return:.6f}"
            )
            points.append(point)

        return FrontierTable(points, self.asset_names)


def sharpe_ratio(exp_return: float, std_dev: float) -> float:
    """Return / risk with a zero risk-free rate; NaN when risk is exactly zero."""
    if std_dev == 0:
        return float('nan')
    return exp_return / std_dev


def solve_frontier(
    returns: ReturnMatrix,
    allow_short: bool = False,
    max_allocation: Optional[float] = None,
    aversion_max: float = FrontierConfig.DEFAULT_AVERSION_MAX,
    aversion_step: float = FrontierConfig.DEFAULT_AVERSION_STEP,
    use_population_cov: bool = False
) -> FrontierTable:
    """
    Compute the efficient frontier of a return matrix.

    Args:
        returns: Return matrix (rows = periods, cols = assets)
        allow_short: If True, allow negative weights
        max_allocation: Maximum fraction per asset, in (0, 1]
        aversion_max: Upper bound of the aversion sweep (inclusive)
        aversion_step: Sweep increment
        use_population_cov: Use population (N) instead of sample (N-1) covariance

    Returns:
        FrontierTable in increasing aversion order
    """
    config = FrontierConfig(
        allow_short=allow_short,
        max_allocation=max_allocation,
        aversion_max=aversion_max,
        aversion_step=aversion_step,
        use_population_cov=use_population_cov,
    )
    optimizer = FrontierOptimizer(returns, use_population_cov=use_population_cov)
    # Fail on bad parameters before touching the covariance estimate
    config.validate(optimizer.n_assets)
    return optimizer.solve(config)


def evaluate(
    returns: ReturnMatrix,
    weights: Mapping[str, float],
    use_population_cov: bool = False
) -> Tuple[float, float]:
    """
    Evaluate a fixed portfolio against a return matrix.

    Args:
        returns: Return matrix used for the frontier
        weights: Mapping asset -> fraction (need not sum to 1)
        use_population_cov: Must match the setting used for the frontier

    Returns:
        Tuple of (variance, expected_return)
    """
    return FrontierOptimizer(returns, use_population_cov=use_population_cov).evaluate(weights)
