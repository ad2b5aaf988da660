"""Core computational modules for the frontier sweep."""

from frontier_sweep.core.config import FrontierConfig
from frontier_sweep.core.exceptions import (
    FrontierError,
    InvalidConfiguration,
    InvalidReturnData,
    NumericalFailure,
    EmptyTable
)
from frontier_sweep.core.table import FrontierPoint, FrontierTable
from frontier_sweep.core.optimizer import (
    FrontierOptimizer,
    compute_stats_from_returns,
    evaluate,
    solve_frontier
)
from frontier_sweep.core.analysis import (
    ReferenceComparison,
    argmax_sharpe,
    compare_to_reference,
    nearest_by_risk,
    summary_report
)
from frontier_sweep.core.loader import ReturnsLoader, generate_sample_returns, parse_weights

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
