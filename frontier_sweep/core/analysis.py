"""
Frontier Analysis
=================

Queries over a solved FrontierTable:
- the maximum Sharpe ratio portfolio
- the frontier portfolio whose risk is closest to a target
- comparison of a reference (actual) portfolio with the same-risk
  frontier portfolio

Ties are always broken in favour of the earliest point in sweep order,
i.e. the lowest aversion coefficient.
"""

import math
from dataclasses import dataclass
from typing import Mapping, Optional

import pandas as pd

from frontier_sweep.core.exceptions import (
    EmptyTable,
    InvalidConfiguration,
    NumericalFailure
)
from frontier_sweep.core.optimizer import FrontierOptimizer, ReturnMatrix
from frontier_sweep.core.table import FrontierPoint, FrontierTable


def _require_rows(table: FrontierTable):
    if len(table) == 0:
        raise EmptyTable("Frontier table has no rows")


def argmax_sharpe(table: FrontierTable) -> FrontierPoint:
    """
    Find the point with the highest Sharpe ratio.

    Points with an undefined (NaN) Sharpe ratio are never selected.

    Raises:
        EmptyTable: If the table has no rows
        NumericalFailure: If no point has a defined Sharpe ratio
    """
    _require_rows(table)

    best = None
    for point in table:
        if not point.has_sharpe:
            continue
        # Strict comparison keeps the first of equal maxima
        if best is None or point.sharpe > best.sharpe:
            best = point

    if best is None:
        raise NumericalFailure("No frontier point has a defined Sharpe ratio")
    return best


def nearest_by_risk(table: FrontierTable, target_std_dev: float) -> FrontierPoint:
    """
    Find the point whose standard deviation is closest to target_std_dev.

    Raises:
        EmptyTable: If the table has no rows
        InvalidConfiguration: If the target is not a finite number
    """
    _require_rows(table)
    if not math.isfinite(target_std_dev):
        raise InvalidConfiguration(
            f"Target standard deviation must be finite, got {target_std_dev}"
        )

    best = None
    best_gap = math.inf
    for point in table:
        gap = abs(point.std_dev - target_std_dev)
        if gap < best_gap:
            best, best_gap = point, gap
    return best


@dataclass(frozen=True, eq=False)
class ReferenceComparison:
    """
    A reference portfolio set against the frontier portfolio of equal risk.

    Attributes:
        weights: Reference weights aligned with the table's assets
        variance: Reference portfolio variance
        std_dev: Reference portfolio standard deviation
        exp_return: Reference portfolio expected return
        sharpe: Reference Sharpe ratio (NaN when std_dev is zero)
        same_risk: Frontier point with the closest standard deviation
    """

    weights: pd.Series
    variance: float
    std_dev: float
    exp_return: float
    sharpe: float
    same_risk: FrontierPoint

    @property
    def return_gap(self) -> float:
        """Extra expected return available at the same risk on the frontier."""
        return self.same_risk.exp_return - self.exp_return

    @property
    def weight_shift(self) -> pd.Series:
        """Frontier weights minus reference weights, per asset."""
        return self.same_risk.weights - self.weights


def compare_to_reference(
    returns: ReturnMatrix,
    table: FrontierTable,
    weights: Mapping[str, float],
    use_population_cov: bool = False
) -> ReferenceComparison:
    """
    Evaluate a reference portfolio and locate its same-risk frontier point.

    Args:
        returns: Return matrix the table was solved from
        table: Solved frontier table
        weights: Reference portfolio, asset -> fraction
        use_population_cov: Must match the setting used for the table

    Returns:
        ReferenceComparison
    """
    optimizer = FrontierOptimizer(returns, use_population_cov=use_population_cov)
    w = optimizer.weights_vector(weights)
    stats = optimizer.portfolio_stats(w)
    same_risk = nearest_by_risk(table, stats['std_dev'])

    return ReferenceComparison(
        weights=pd.Series(w, index=optimizer.asset_names),
        variance=stats['variance'],
        std_dev=stats['std_dev'],
        exp_return=stats['exp_return'],
        sharpe=stats['sharpe'],
        same_risk=same_risk,
    )


def _format_weights(weights: pd.Series) -> list:
    return [f"  {name}: {w:.6f} ({w*100:.2f}%)" for name, w in weights.items()]


def _format_point(point: FrontierPoint) -> list:
    lines = [f"Aversion coefficient: {point.aversion:g} (step {point.step})"]
    lines.append("Weights:")
    lines.extend(_format_weights(point.weights))
    lines.append(f"Expected Return: {point.exp_return:.6f} ({point.exp_return*100:.4f}%)")
    lines.append(f"Standard Deviation: {point.std_dev:.6f} ({point.std_dev*100:.4f}%)")
    lines.append(f"Sharpe Ratio: {point.sharpe:.6f}")
    return lines


def summary_report(
    table: FrontierTable,
    comparison: Optional[ReferenceComparison] = None,
    asset_stats: Optional[pd.DataFrame] = None
) -> str:
    """
    Generate a text report of the frontier analysis.

    Args:
        table: Solved frontier table
        comparison: Optional reference portfolio comparison
        asset_stats: Optional per-asset statistics (FrontierOptimizer.get_asset_stats)

    Returns:
        Formatted string report
    """
    lines = []
    lines.append("=" * 70)
    lines.append("EFFICIENT FRONTIER SUMMARY REPORT")
    lines.append("=" * 70)

    if asset_stats is not None:
        lines.append("\n--- Individual Asset Statistics ---")
        lines.append(f"{'Asset':<12} {'Mean':>12} {'Std Dev':>12}")
        lines.append("-" * 38)
        for name, row in asset_stats.iterrows():
            lines.append(f"{name:<12} {row['mean']:>12.6f} {row['std_dev']:>12.6f}")

    lines.append(f"\nFrontier points: {len(table)}")
    if len(table) > 0:
        lines.append(
            f"Aversion range: {table[0].aversion:g} to {table[-1].aversion:g}"
        )

        lines.append("\n--- Minimum Variance Portfolio (aversion = 0) ---")
        lines.extend(_format_point(table[0]))

        lines.append("\n--- Optimal Portfolio (Maximum Sharpe Ratio) ---")
        lines.extend(_format_point(argmax_sharpe(table)))

    if comparison is not None:
        lines.append("\n--- Current Portfolio ---")
        lines.append("Weights:")
        lines.extend(_format_weights(comparison.weights))
        lines.append(f"Expected Return: {comparison.exp_return:.6f} ({comparison.exp_return*100:.4f}%)")
        lines.append(f"Standard Deviation: {comparison.std_dev:.6f} ({comparison.std_dev*100:.4f}%)")
        lines.append(f"Sharpe Ratio: {comparison.sharpe:.6f}")

        lines.append("\n--- Frontier Portfolio With The Same Risk ---")
        lines.extend(_format_point(comparison.same_risk))
        lines.append(
            f"Return gained at equal risk: {comparison.return_gap:.6f} "
            f"({comparison.return_gap*100:.4f}%)"
        )
        lines.append("Reallocation (frontier minus current):")
        lines.extend(_format_weights(comparison.weight_shift))

    lines.append("\n" + "=" * 70)

    return "\n".join(lines)
