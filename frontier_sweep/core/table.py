"""Frontier points and the ordered table that collects them."""

import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence

import pandas as pd


@dataclass(frozen=True, eq=False)
class FrontierPoint:
    """
    One solved portfolio of the aversion sweep.

    Attributes:
        step: 0-based position in the sweep
        aversion: Aversion coefficient used for this step
        weights: Portfolio weights indexed by asset name
        std_dev: Portfolio standard deviation sqrt(w^T * Sigma * w)
        exp_return: Portfolio expected return w^T * mu
        sharpe: exp_return / std_dev (NaN when std_dev is zero)
    """

    step: int
    aversion: float
    weights: pd.Series
    std_dev: float
    exp_return: float
    sharpe: float

    @property
    def variance(self) -> float:
        return self.std_dev ** 2

    @property
    def has_sharpe(self) -> bool:
        return not math.isnan(self.sharpe)


class FrontierTable:
    """
    Frontier points in increasing aversion order.

    Behaves like a read-only sequence. Use to_frame() for the tabular
    layout (one column per asset followed by the statistics).
    """

    STAT_COLUMNS = ['aversion', 'std_dev', 'exp_return', 'sharpe']

    def __init__(self, points: Sequence[FrontierPoint], asset_names: Sequence[str]):
        self._points = tuple(points)
        self.asset_names = list(asset_names)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[FrontierPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> FrontierPoint:
        return self._points[index]

    @property
    def points(self) -> List[FrontierPoint]:
        return list(self._points)

    @property
    def is_empty(self) -> bool:
        return len(self._points) == 0

    def to_frame(self) -> pd.DataFrame:
        """
        Convert to a DataFrame with one row per sweep step.

        Returns:
            DataFrame with asset weight columns then aversion, std_dev,
            exp_return and sharpe
        """
        columns = self.asset_names + self.STAT_COLUMNS
        rows = []
        for point in self._points:
            row = [point.weights[name] for name in self.asset_names]
            row += [point.aversion, point.std_dev, point.exp_return, point.sharpe]
            rows.append(row)
        return pd.DataFrame(rows, columns=columns)

    def __repr__(self) -> str:
        return f"FrontierTable({len(self)} points, assets={self.asset_names})"
