"""
Main Runner Script for Frontier Analysis
========================================

This script runs the full workflow:
1. Loading a return matrix (CSV/Excel, or synthetic sample data)
2. Sweeping the aversion coefficient to trace the efficient frontier
3. Finding the optimal (maximum Sharpe ratio) portfolio
4. Comparing the current portfolio with the same-risk frontier portfolio
5. Saving plots

Usage:
    frontier-analyze                                  # Run with sample data
    frontier-analyze --file returns.csv               # Returns file
    frontier-analyze --file prices.xlsx --prices      # Price file
    frontier-analyze --weights "VIIIX=0.6,GOOG=0.4"   # Current portfolio
    frontier-analyze --max-allocation 0.5 --aversion-max 1 --aversion-step 0.001
"""

import sys
import argparse
import logging
import traceback
import warnings
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from frontier_sweep.core.analysis import (
    argmax_sharpe,
    compare_to_reference,
    summary_report
)
from frontier_sweep.core.config import FrontierConfig
from frontier_sweep.core.exceptions import (
    FrontierError,
    InvalidConfiguration,
    InvalidReturnData
)
from frontier_sweep.core.loader import (
    ReturnsLoader,
    generate_sample_returns,
    normalize_weights,
    parse_weights,
    subset_assets
)
from frontier_sweep.core.optimizer import FrontierOptimizer
from frontier_sweep.visualization import (
    plot_frontier,
    plot_portfolio_weights,
    plot_weight_comparison,
    plot_weights_along_frontier
)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logger(
    script_name: str = "frontier_sweep",
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Sets up a logger that writes to both file and console.

    Library modules log under the "frontier_sweep" namespace; those records
    are routed to the same handlers.

    Args:
        script_name: Name of the script (used in log filename)
        log_dir: Directory for log files (default: ./logs)

    Returns:
        Configured logger instance
    """
    if log_dir is None:
        log_dir = Path.cwd() / "logs"
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y_%m_%d_%H%M")
    log_filename = log_dir / f"log_{script_name}_{timestamp}.txt"

    logger = logging.getLogger(script_name)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Clear existing handlers (prevent duplicates)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Library loggers share the handlers
    if script_name != "frontier_sweep":
        library_logger = logging.getLogger("frontier_sweep")
        library_logger.setLevel(logging.INFO)
        library_logger.propagate = False
        library_logger.handlers = list(logger.handlers)

    return logger


# =============================================================================
# MAIN ANALYSIS FUNCTIONS
# =============================================================================

def run_analysis(
    returns: pd.DataFrame,
    config: FrontierConfig,
    reference_weights: Optional[Dict[str, float]] = None,
    save_plots: bool = True,
    output_dir: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> dict:
    """
    Run the complete frontier analysis.

    Args:
        returns: Return matrix (rows = periods, cols = assets)
        config: Constraint and sweep settings
        reference_weights: Current portfolio, asset -> fraction
        save_plots: If True, save plots to output_dir
        output_dir: Directory for plot files (default: ./output)
        logger: Logger instance

    Returns:
        Dictionary with optimizer, table, max_sharpe, comparison and report
    """
    if logger is None:
        logger = setup_logger()

    results = {}

    logger.info("=" * 70)
    logger.info("  EFFICIENT FRONTIER ANALYSIS")
    logger.info("=" * 70)
    logger.info(f"  Assets: {', '.join(str(c) for c in returns.columns)}")
    logger.info(f"  Periods: {len(returns)}")
    logger.info(f"  Settings: {config.describe()}")
    logger.info("=" * 70)

    optimizer = FrontierOptimizer(returns, use_population_cov=config.use_population_cov)
    results['optimizer'] = optimizer

    table = optimizer.solve(config)
    results['table'] = table
    logger.info(f"Efficient frontier calculated with {len(table)} points")

    max_sharpe = argmax_sharpe(table)
    results['max_sharpe'] = max_sharpe
    logger.info(
        f"Optimal portfolio at aversion {max_sharpe.aversion:g}: "
        f"return {max_sharpe.exp_return*100:.4f}%, "
        f"risk {max_sharpe.std_dev*100:.4f}%, Sharpe {max_sharpe.sharpe:.4f}"
    )

    comparison = None
    if reference_weights:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            comparison = compare_to_reference(
                optimizer.returns, table, reference_weights,
                use_population_cov=config.use_population_cov
            )
        for w in caught:
            logger.warning(str(w.message))
        logger.info(
            f"Current portfolio: return {comparison.exp_return*100:.4f}%, "
            f"risk {comparison.std_dev*100:.4f}%"
        )
        logger.info(
            f"Same-risk frontier portfolio (aversion {comparison.same_risk.aversion:g}) "
            f"adds {comparison.return_gap*100:.4f}% expected return"
        )
    results['comparison'] = comparison

    report = summary_report(table, comparison, optimizer.get_asset_stats())
    results['report'] = report
    for line in report.splitlines():
        logger.info(line)

    if save_plots:
        output_dir = Path(output_dir) if output_dir else Path.cwd() / "output"
        output_dir.mkdir(parents=True, exist_ok=True)

        plot_frontier(
            table, max_sharpe, comparison, optimizer.get_asset_stats(),
            save_path=str(output_dir / "efficient_frontier.png")
        )
        logger.info("Saved: efficient_frontier.png")

        plot_portfolio_weights(
            max_sharpe.weights,
            title="Optimal Portfolio Weights",
            save_path=str(output_dir / "optimal_weights.png")
        )
        logger.info("Saved: optimal_weights.png")

        plot_weights_along_frontier(
            table, save_path=str(output_dir / "frontier_allocation.png")
        )
        logger.info("Saved: frontier_allocation.png")

        if comparison is not None:
            plot_weight_comparison(
                comparison, save_path=str(output_dir / "current_vs_frontier.png")
            )
            logger.info("Saved: current_vs_frontier.png")

        plt.close('all')

    return results


def load_returns(
    args: argparse.Namespace,
    logger: logging.Logger,
    ddof: int = 1
) -> pd.DataFrame:
    """Load the return matrix described by the command line arguments."""
    if not args.file:
        logger.info("No file specified. Using sample data...")
        return generate_sample_returns(4)

    logger.info(f"Loading data from: {args.file}")
    loader = ReturnsLoader(return_method=args.return_method)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        returns = loader.load(
            args.file,
            sheet_name=args.sheet,
            date_column=not args.no_date_column,
            prices=args.prices
        )
        if args.start or args.end:
            returns = loader.select_window(returns, args.start, args.end)
        if args.assets:
            returns = subset_assets(returns, [a.strip() for a in args.assets.split(',')])
    for w in caught:
        logger.warning(str(w.message))

    validation = loader.validate(returns, ddof=ddof)
    for warning in validation['warnings']:
        logger.warning(warning)
    if not validation['is_valid']:
        for error in validation['errors']:
            logger.error(error)
        raise InvalidReturnData("Data validation failed")

    return returns


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Efficient Frontier by Risk-Aversion Sweep',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  frontier-analyze                                  # Run with sample data
  frontier-analyze --file returns.csv --max-allocation 0.5
  frontier-analyze --file prices.xlsx --prices --weights "VIIIX=0.6,GOOG=0.4"
        """
    )

    parser.add_argument('--file', '-f', type=str,
                        help='CSV or Excel file with returns (or prices)')
    parser.add_argument('--sheet', '-s', type=str, default=0,
                        help='Excel sheet name (default: first sheet)')
    parser.add_argument('--prices', action='store_true',
                        help='Input holds prices; convert to returns')
    parser.add_argument('--return-method', choices=['simple', 'log'], default='simple',
                        help='Return formula for price input (default: simple)')
    parser.add_argument('--no-date-column', action='store_true',
                        help='First column is an asset, not a date')
    parser.add_argument('--start', type=str, help='First date of the analysis window')
    parser.add_argument('--end', type=str, help='Last date of the analysis window')
    parser.add_argument('--assets', type=str,
                        help='Comma separated subset of assets to analyze')
    parser.add_argument('--weights', '-w', type=str,
                        help='Current portfolio, e.g. "VIIIX=0.6,GOOG=0.4"')
    parser.add_argument('--normalize-weights', action='store_true',
                        help='Rescale current portfolio weights to sum to 1')
    parser.add_argument('--allow-short', action='store_true',
                        help='Allow short selling (default: not allowed)')
    parser.add_argument('--max-allocation', type=float, default=None,
                        help='Maximum fraction in any single asset, in (0, 1]')
    parser.add_argument('--aversion-max', type=float,
                        default=FrontierConfig.DEFAULT_AVERSION_MAX,
                        help='Upper bound of the aversion sweep (default: 0.5)')
    parser.add_argument('--aversion-step', type=float,
                        default=FrontierConfig.DEFAULT_AVERSION_STEP,
                        help='Aversion sweep increment (default: 0.005)')
    parser.add_argument('--population-cov', action='store_true',
                        help='Use population covariance (N) instead of sample (N-1)')
    parser.add_argument('--no-plots', action='store_true',
                        help='Disable plot generation')
    parser.add_argument('--output-dir', '-o', type=str,
                        help='Directory for plots (default: ./output)')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for log files (default: ./logs)')

    return parser


def main(argv=None) -> int:
    """Main entry point for the frontier analysis script."""
    args = build_parser().parse_args(argv)

    logger = setup_logger(
        "frontier_analysis",
        Path(args.log_dir) if args.log_dir else None
    )

    try:
        config = FrontierConfig(
            allow_short=args.allow_short,
            max_allocation=args.max_allocation,
            aversion_max=args.aversion_max,
            aversion_step=args.aversion_step,
            use_population_cov=args.population_cov
        )

        returns = load_returns(args, logger, ddof=config.ddof)

        reference = None
        if args.weights:
            reference = parse_weights(args.weights)
            if args.normalize_weights:
                reference = normalize_weights(reference)

        run_analysis(
            returns,
            config,
            reference_weights=reference,
            save_plots=not args.no_plots,
            output_dir=args.output_dir,
            logger=logger
        )

        logger.info("Analysis completed successfully!")
        return 0

    except (InvalidConfiguration, InvalidReturnData) as e:
        logger.error(f"Invalid input: {e}")
        return 2
    except FrontierError as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        logger.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
