"""
Unit tests for frontier analysis

Tests cover:
- Maximum Sharpe ratio lookup and tie-breaking
- Nearest-risk lookup and tie-breaking
- Empty and undefined tables
- Reference portfolio comparison
- Report formatting
"""

import math

import numpy as np
import pandas as pd
import pytest

from frontier_sweep.core.analysis import (
    ReferenceComparison,
    argmax_sharpe,
    compare_to_reference,
    nearest_by_risk,
    summary_report
)
from frontier_sweep.core.exceptions import (
    EmptyTable,
    InvalidConfiguration,
    NumericalFailure
)
from frontier_sweep.core.optimizer import solve_frontier
from frontier_sweep.core.table import FrontierPoint, FrontierTable


def make_point(step, std_dev, exp_return, sharpe=None):
    if sharpe is None:
        sharpe = exp_return / std_dev if std_dev != 0 else float('nan')
    return FrontierPoint(
        step=step,
        aversion=step * 0.1,
        weights=pd.Series([1.0], index=['X']),
        std_dev=std_dev,
        exp_return=exp_return,
        sharpe=sharpe,
    )


def make_table(points):
    return FrontierTable(points, ['X'])


@pytest.fixture
def frontier(sample_returns):
    return solve_frontier(sample_returns, aversion_max=0.5, aversion_step=0.01)


class TestArgmaxSharpe:
    """Tests for the maximum Sharpe ratio query"""

    def test_returns_point_from_table(self, frontier):
        best = argmax_sharpe(frontier)
        assert any(point is best for point in frontier)

    def test_no_point_is_better(self, frontier):
        best = argmax_sharpe(frontier)
        for point in frontier:
            assert not point.sharpe > best.sharpe

    def test_tie_goes_to_first(self):
        points = [make_point(0, 0.1, 0.05, sharpe=0.5), make_point(1, 0.2, 0.10, sharpe=0.5),
                  make_point(2, 0.3, 0.09, sharpe=0.3)]
        best = argmax_sharpe(make_table(points))
        assert best is points[0]

    def test_skips_undefined_sharpe(self):
        points = [make_point(0, 0.0, 0.01), make_point(1, 0.2, 0.01),
                  make_point(2, 0.1, 0.01)]
        best = argmax_sharpe(make_table(points))
        assert best is points[2]

    def test_negative_ratios(self):
        points = [make_point(0, 0.1, -0.02), make_point(1, 0.1, -0.01)]
        assert argmax_sharpe(make_table(points)) is points[1]

    def test_all_undefined(self):
        points = [make_point(0, 0.0, 0.01), make_point(1, 0.0, 0.02)]
        with pytest.raises(NumericalFailure):
            argmax_sharpe(make_table(points))

    def test_empty_table(self):
        with pytest.raises(EmptyTable):
            argmax_sharpe(make_table([]))


class TestNearestByRisk:
    """Tests for the nearest-risk query"""

    def test_minimizes_distance(self, frontier):
        target = 0.05
        found = nearest_by_risk(frontier, target)
        gap = abs(found.std_dev - target)
        for point in frontier:
            assert gap <= abs(point.std_dev - target)

    def test_returns_point_from_table(self, frontier):
        found = nearest_by_risk(frontier, frontier[10].std_dev)
        assert any(point is found for point in frontier)
        assert found.std_dev == frontier[10].std_dev

    def test_tie_goes_to_first(self):
        points = [make_point(0, 0.5, 0.01), make_point(1, 1.0, 0.02),
                  make_point(2, 1.5, 0.03)]
        assert nearest_by_risk(make_table(points), 1.25) is points[1]

    def test_repeated_risk_goes_to_first(self):
        points = [make_point(0, 0.1, 0.01), make_point(1, 0.2, 0.02),
                  make_point(2, 0.2, 0.03)]
        assert nearest_by_risk(make_table(points), 0.2) is points[1]

    def test_target_below_frontier(self, frontier):
        assert nearest_by_risk(frontier, 0.0) is frontier[0]

    def test_empty_table(self):
        with pytest.raises(EmptyTable):
            nearest_by_risk(make_table([]), 0.1)

    def test_empty_table_is_lookup_error(self):
        with pytest.raises(LookupError):
            nearest_by_risk(make_table([]), 0.1)

    @pytest.mark.parametrize("target", [float('nan'), float('inf')])
    def test_target_must_be_finite(self, target):
        points = [make_point(0, 0.1, 0.01), make_point(1, 0.2, 0.02)]
        with pytest.raises(InvalidConfiguration, match="finite"):
            nearest_by_risk(make_table(points), target)


class TestReferenceComparison:
    """Tests for comparing a current portfolio with the frontier"""

    @pytest.fixture
    def comparison(self, sample_returns, frontier, reference_weights):
        return compare_to_reference(sample_returns, frontier, reference_weights)

    def test_type(self, comparison):
        assert isinstance(comparison, ReferenceComparison)

    def test_same_risk_point(self, comparison, frontier):
        assert comparison.same_risk is nearest_by_risk(frontier, comparison.std_dev)

    def test_reference_statistics(self, comparison, sample_returns, reference_weights):
        w = np.array([reference_weights[c] for c in sample_returns.columns])
        cov = sample_returns.cov().values
        assert comparison.variance == pytest.approx(w @ cov @ w)
        assert comparison.std_dev == pytest.approx(math.sqrt(w @ cov @ w))
        assert comparison.exp_return == pytest.approx(w @ sample_returns.mean().values)

    def test_return_gap(self, comparison):
        expected = comparison.same_risk.exp_return - comparison.exp_return
        assert comparison.return_gap == pytest.approx(expected)

    def test_weight_shift(self, comparison, sample_returns):
        shift = comparison.weight_shift
        assert list(shift.index) == list(sample_returns.columns)
        assert shift.sum() == pytest.approx(0.0, abs=1e-6)

    def test_partial_weights_aligned(self, sample_returns, frontier):
        with pytest.warns(UserWarning):
            comparison = compare_to_reference(sample_returns, frontier, {'GOOG': 0.5})
        assert comparison.weights['GOOG'] == 0.5
        assert comparison.weights['VIIIX'] == 0.0


class TestSummaryReport:

    def test_sections(self, sample_returns, frontier, reference_weights):
        comparison = compare_to_reference(sample_returns, frontier, reference_weights)
        report = summary_report(frontier, comparison)
        assert "EFFICIENT FRONTIER SUMMARY REPORT" in report
        assert "Minimum Variance Portfolio" in report
        assert "Maximum Sharpe Ratio" in report
        assert "Current Portfolio" in report
        assert "Same Risk" in report
        assert f"Frontier points: {len(frontier)}" in report

    def test_without_reference(self, frontier):
        report = summary_report(frontier)
        assert "Current Portfolio" not in report

    def test_sharpe_shown_as_ratio(self, frontier):
        best = argmax_sharpe(frontier)
        report = summary_report(frontier)
        assert f"Sharpe Ratio: {best.sharpe:.6f}" in report
