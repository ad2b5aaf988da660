"""
Plotting Module for Frontier Analysis
=====================================

Renders a solved FrontierTable with matplotlib:
- the efficient frontier as a cloud of sweep points
- the maximum Sharpe ratio portfolio, annotated with risk/return/Sharpe
- an optional reference (current) portfolio with a vertical line through
  its risk and the same-risk frontier portfolio
- bar charts of portfolio weights

Risk and return are shown in percent; the Sharpe ratio is shown as the
plain ratio.
"""

from typing import Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from frontier_sweep.core.analysis import ReferenceComparison
from frontier_sweep.core.table import FrontierPoint, FrontierTable

# Colour scheme
FRONTIER_RED = "#7D110C"
FRONTIER_TAN = "#CDC4B6"
FRONTIER_LIGHT_TAN = "#F7F6F0"
FRONTIER_DARK = "#423C30"


def _annotation(point: FrontierPoint) -> str:
    return (
        f"Risk: {point.std_dev*100:.3f}%\n"
        f"Return: {point.exp_return*100:.4f}%\n"
        f"Sharpe: {point.sharpe:.4f}"
    )


def _finish(fig: Figure, save_path: Optional[str]):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')


def plot_frontier(
    table: FrontierTable,
    max_sharpe: Optional[FrontierPoint] = None,
    comparison: Optional[ReferenceComparison] = None,
    asset_stats: Optional[pd.DataFrame] = None,
    figsize: Tuple[int, int] = (12, 8),
    save_path: Optional[str] = None,
    title: str = "Efficient Frontier\nand Optimal Portfolio"
) -> Figure:
    """
    Plot the frontier with the optimal portfolio and, optionally, the current one.

    Args:
        table: Solved frontier table
        max_sharpe: Point to highlight as the optimal portfolio
        comparison: Reference portfolio comparison (adds the current
            portfolio, a vertical line at its risk and the same-risk point)
        asset_stats: Optional per-asset statistics to plot individual assets
        figsize: Figure size (width, height)
        save_path: If provided, save the figure to this path
        title: Plot title

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.set_facecolor(FRONTIER_LIGHT_TAN)

    stds = np.array([p.std_dev for p in table])
    rets = np.array([p.exp_return for p in table])
    ax.scatter(stds * 100, rets * 100, color=FRONTIER_DARK, alpha=0.1,
               label='Efficient Frontier', zorder=2)

    if asset_stats is not None:
        ax.scatter(asset_stats['std_dev'] * 100, asset_stats['mean'] * 100,
                   color=FRONTIER_TAN, s=80, marker='o', edgecolors=FRONTIER_DARK,
                   label='Individual Assets', zorder=3)
        for name, row in asset_stats.iterrows():
            ax.annotate(name, (row['std_dev'] * 100, row['mean'] * 100),
                        xytext=(5, 5), textcoords='offset points', fontsize=9)

    if max_sharpe is not None:
        ax.scatter([max_sharpe.std_dev * 100], [max_sharpe.exp_return * 100],
                   color=FRONTIER_RED, s=120, label='Optimal Portfolio', zorder=5)
        ax.annotate(_annotation(max_sharpe),
                    (max_sharpe.std_dev * 100, max_sharpe.exp_return * 100),
                    xytext=(8, -8), textcoords='offset points',
                    ha='left', va='top', fontsize=10, color=FRONTIER_DARK)

    if comparison is not None:
        ax.scatter([comparison.std_dev * 100], [comparison.exp_return * 100],
                   color='red', s=120, marker='s', edgecolors='black',
                   label='Current', zorder=6)
        ax.annotate('current', (comparison.std_dev * 100, comparison.exp_return * 100),
                    xytext=(6, 6), textcoords='offset points', fontsize=10)
        ax.axvline(x=comparison.std_dev * 100, color=FRONTIER_DARK,
                   linestyle='-', linewidth=1, zorder=1)

        same = comparison.same_risk
        ax.scatter([same.std_dev * 100], [same.exp_return * 100],
                   color='gold', s=120, marker='D', edgecolors='black',
                   label='Same-Risk Frontier Portfolio', zorder=6)

    ax.set_xlabel('Risk (standard deviation of portfolio) %', fontsize=12)
    ax.set_ylabel('Return %', fontsize=12)
    ax.set_title(title, fontsize=16, color=FRONTIER_RED)
    ax.legend(loc='lower right', fontsize=10)
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path)
    return fig


def plot_portfolio_weights(
    weights: pd.Series,
    title: str = "Portfolio Weights",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None
) -> Figure:
    """
    Create a bar chart of portfolio weights.

    Args:
        weights: Weights indexed by asset name
        title: Plot title
        figsize: Figure size
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    values = weights.values.astype(float)
    colors = [FRONTIER_DARK if w >= 0 else FRONTIER_RED for w in values]
    bars = ax.bar(list(weights.index), values * 100, color=colors, edgecolor='black')

    for bar, w in zip(bars, values):
        height = bar.get_height()
        ax.annotate(f'{w*100:.1f}%',
                    xy=(bar.get_x() + bar.get_width() / 2, height),
                    xytext=(0, 3 if height >= 0 else -15),
                    textcoords='offset points',
                    ha='center', va='bottom' if height >= 0 else 'top',
                    fontsize=10)

    ax.axhline(y=0, color='black', linestyle='-', linewidth=0.5)
    ax.set_xlabel('Assets', fontsize=12)
    ax.set_ylabel('Weight %', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, axis='y', alpha=0.3)

    _finish(fig, save_path)
    return fig


def plot_weight_comparison(
    comparison: ReferenceComparison,
    figsize: Tuple[int, int] = (12, 6),
    save_path: Optional[str] = None,
    title: str = "Current vs Same-Risk Frontier Allocation"
) -> Figure:
    """
    Side-by-side bars of the current weights and the same-risk frontier weights.

    Args:
        comparison: Reference portfolio comparison
        figsize: Figure size
        save_path: Optional save path
        title: Plot title

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    names = list(comparison.weights.index)
    x = np.arange(len(names))
    width = 0.4

    ax.bar(x - width / 2, comparison.weights.values * 100, width,
           label='Current', color=FRONTIER_TAN, edgecolor='black')
    ax.bar(x + width / 2, comparison.same_risk.weights[names].values * 100, width,
           label='Frontier (same risk)', color=FRONTIER_RED, edgecolor='black')

    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=45)
    ax.set_xlabel('Assets', fontsize=12)
    ax.set_ylabel('Weight %', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.axhline(y=0, color='black', linestyle='-', linewidth=0.5)
    ax.legend(fontsize=10)
    ax.grid(True, axis='y', alpha=0.3)

    _finish(fig, save_path)
    return fig


def plot_weights_along_frontier(
    table: FrontierTable,
    figsize: Tuple[int, int] = (12, 6),
    save_path: Optional[str] = None,
    title: str = "Allocation Along the Frontier"
) -> Figure:
    """
    Stacked area of each asset's weight as the aversion coefficient grows.

    Args:
        table: Solved frontier table
        figsize: Figure size
        save_path: Optional save path
        title: Plot title

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    frame = table.to_frame()
    aversions = frame['aversion'].values
    weights = frame[table.asset_names].values.T * 100

    if np.all(weights >= -1e-9):
        ax.stackplot(aversions, weights, labels=table.asset_names, alpha=0.8)
    else:
        # Stacking is meaningless with short positions
        for name, series in zip(table.asset_names, weights):
            ax.plot(aversions, series, linewidth=2, label=name)

    ax.set_xlabel('Aversion coefficient', fontsize=12)
    ax.set_ylabel('Weight %', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper left', fontsize=9)
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path)
    return fig
