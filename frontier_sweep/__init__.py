"""
Frontier Sweep - Efficient Frontier by Risk-Aversion Sweep
==========================================================

Traces the Markowitz efficient frontier of a return matrix by solving one
constrained quadratic program per risk-aversion coefficient, then compares
an actual portfolio with the frontier.

Usage:
    from frontier_sweep import solve_frontier, argmax_sharpe, nearest_by_risk
    from frontier_sweep.visualization import plot_frontier

Functions:
    solve_frontier - Trace the frontier over an aversion sweep
    evaluate - Variance and expected return of a fixed portfolio
    argmax_sharpe - Maximum Sharpe ratio frontier point
    nearest_by_risk - Frontier point closest to a target risk
    compare_to_reference - Current portfolio vs same-risk frontier point

Classes:
    FrontierOptimizer - Moment estimates, sweep solver and evaluator
    FrontierConfig - Constraint and sweep settings
    ReturnsLoader - Return matrices from CSV/Excel/prices
"""

from frontier_sweep.core import (
    FrontierConfig,
    FrontierError,
    InvalidConfiguration,
    InvalidReturnData,
    NumericalFailure,
    EmptyTable,
    FrontierPoint,
    FrontierTable,
    FrontierOptimizer,
    compute_stats_from_returns,
    evaluate,
    solve_frontier,
    ReferenceComparison,
    argmax_sharpe,
    compare_to_reference,
    nearest_by_risk,
    summary_report,
    ReturnsLoader,
    generate_sample_returns,
    parse_weights
)

__version__ = "1.0.0"

__all__ = [
    "FrontierConfig",
    "FrontierError",
    "InvalidConfiguration",
    "InvalidReturnData",
    "NumericalFailure",
    "EmptyTable",
    "FrontierPoint",
    "FrontierTable",
    "FrontierOptimizer",
    "compute_stats_from_returns",
    "evaluate",
    "solve_frontier",
    "ReferenceComparison",
    "argmax_sharpe",
    "compare_to_reference",
    "nearest_by_risk",
    "summary_report",
    "ReturnsLoader",
    "generate_sample_returns",
    "parse_weights",
]
