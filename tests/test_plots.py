"""
Smoke tests for the plotting module (Agg backend)
"""

import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from frontier_sweep.core.analysis import argmax_sharpe, compare_to_reference
from frontier_sweep.core.optimizer import FrontierOptimizer, solve_frontier
from frontier_sweep.visualization import (
    plot_frontier,
    plot_portfolio_weights,
    plot_weight_comparison,
    plot_weights_along_frontier
)


@pytest.fixture
def frontier(sample_returns):
    return solve_frontier(sample_returns, aversion_max=0.5, aversion_step=0.05)


@pytest.fixture
def comparison(sample_returns, frontier, reference_weights):
    return compare_to_reference(sample_returns, frontier, reference_weights)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestPlots:

    def test_frontier_only(self, frontier):
        fig = plot_frontier(frontier)
        assert isinstance(fig, Figure)

    def test_frontier_full(self, sample_returns, frontier, comparison, tmp_path):
        path = tmp_path / "frontier.png"
        fig = plot_frontier(
            frontier,
            max_sharpe=argmax_sharpe(frontier),
            comparison=comparison,
            asset_stats=FrontierOptimizer(sample_returns).get_asset_stats(),
            save_path=str(path)
        )
        assert isinstance(fig, Figure)
        assert path.exists()

    def test_annotation_shows_ratio(self, frontier):
        best = argmax_sharpe(frontier)
        fig = plot_frontier(frontier, max_sharpe=best)
        texts = [t.get_text() for t in fig.axes[0].texts]
        assert any(f"Sharpe: {best.sharpe:.4f}" in t for t in texts)

    def test_reference_line(self, frontier, comparison):
        fig = plot_frontier(frontier, comparison=comparison)
        xs = [line.get_xdata()[0] for line in fig.axes[0].get_lines()]
        assert comparison.std_dev * 100 in xs

    def test_portfolio_weights(self, frontier, tmp_path):
        path = tmp_path / "weights.png"
        fig = plot_portfolio_weights(frontier[0].weights, save_path=str(path))
        assert len(fig.axes[0].patches) == len(frontier.asset_names)
        assert path.exists()

    def test_weight_comparison(self, comparison):
        fig = plot_weight_comparison(comparison)
        assert len(fig.axes[0].patches) == 2 * len(comparison.weights)

    def test_weights_along_frontier(self, frontier):
        fig = plot_weights_along_frontier(frontier)
        assert isinstance(fig, Figure)

    def test_weights_along_frontier_with_shorts(self, sample_returns):
        table = solve_frontier(sample_returns, allow_short=True,
                               aversion_max=0.5, aversion_step=0.1)
        fig = plot_weights_along_frontier(table)
        assert len(fig.axes[0].get_lines()) >= 1
