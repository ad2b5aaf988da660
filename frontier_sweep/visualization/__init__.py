"""Visualization modules for frontier analysis."""

from frontier_sweep.visualization.plots import (
    plot_frontier,
    plot_portfolio_weights,
    plot_weight_comparison,
    plot_weights_along_frontier
)

__all__ = [
    "plot_frontier",
    "plot_portfolio_weights",
    "plot_weight_comparison",
    "plot_weights_along_frontier",
]
