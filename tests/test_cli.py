"""
Tests for the frontier-analyze command line entry point
"""

import matplotlib.pyplot as plt
import pytest

from frontier_sweep.cli.main import build_parser, main, run_analysis
from frontier_sweep.core.config import FrontierConfig


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.allow_short is False
        assert args.max_allocation is None
        assert args.aversion_max == FrontierConfig.DEFAULT_AVERSION_MAX
        assert args.aversion_step == FrontierConfig.DEFAULT_AVERSION_STEP

    def test_options(self):
        args = build_parser().parse_args([
            '--allow-short', '--max-allocation', '0.5',
            '--aversion-max', '1', '--aversion-step', '0.001',
            '--weights', 'A=1'
        ])
        assert args.allow_short is True
        assert args.max_allocation == 0.5
        assert args.aversion_max == 1.0
        assert args.weights == 'A=1'


class TestMain:

    def test_sample_data(self, tmp_path):
        code = main(['--no-plots', '--aversion-step', '0.05',
                     '--log-dir', str(tmp_path / 'logs')])
        assert code == 0
        assert list((tmp_path / 'logs').glob('log_frontier_analysis_*.txt'))

    def test_invalid_cap(self, tmp_path):
        code = main(['--no-plots', '--max-allocation', '1.5',
                     '--log-dir', str(tmp_path)])
        assert code == 2

    def test_unknown_reference_asset(self, tmp_path):
        code = main(['--no-plots', '--weights', 'MSFT=1.0',
                     '--log-dir', str(tmp_path)])
        assert code == 2

    def test_file_with_plots(self, sample_returns, reference_weights, tmp_path):
        path = tmp_path / "returns.csv"
        sample_returns.to_csv(path)
        weights = ",".join(f"{k}={v}" for k, v in reference_weights.items())
        out = tmp_path / "output"

        code = main(['--file', str(path), '--weights', weights,
                     '--max-allocation', '0.5', '--aversion-step', '0.05',
                     '--output-dir', str(out), '--log-dir', str(tmp_path)])

        assert code == 0
        for name in ['efficient_frontier.png', 'optimal_weights.png',
                     'frontier_allocation.png', 'current_vs_frontier.png']:
            assert (out / name).exists()

    def test_degenerate_file(self, sample_returns, tmp_path):
        path = tmp_path / "returns.csv"
        sample_returns.iloc[:3].to_csv(path)
        code = main(['--file', str(path), '--no-plots', '--log-dir', str(tmp_path)])
        assert code == 2


class TestRunAnalysis:

    def test_results(self, sample_returns, reference_weights, tmp_path):
        from frontier_sweep.cli.main import setup_logger
        logger = setup_logger("test_run", tmp_path)
        config = FrontierConfig(max_allocation=0.5, aversion_max=0.5, aversion_step=0.05)

        results = run_analysis(sample_returns, config, reference_weights,
                               save_plots=False, logger=logger)

        assert len(results['table']) == 11
        assert any(p is results['max_sharpe'] for p in results['table'])
        assert results['comparison'].same_risk in results['table'].points
        assert "EFFICIENT FRONTIER SUMMARY REPORT" in results['report']
