"""
Return Matrix Loader
====================

This module supplies the return matrix consumed by the frontier solver:
- CSV files of periodic returns (or prices)
- Excel workbooks (read through openpyxl)
- Synthetic sample data for demos and tests

Files are expected in the usual "wide" layout: an optional date column
followed by one column per asset, one row per period. Price data can be
converted to simple or log returns.

Rows with missing values are dropped so the analyzed window is complete
for every asset.
"""

import warnings
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from frontier_sweep.core.exceptions import InvalidConfiguration, InvalidReturnData
from frontier_sweep.core.optimizer import PD_TOL, as_return_frame


class ReturnsLoader:
    """
    Loads return matrices from files or price tables.

    Example:
        >>> loader = ReturnsLoader()
        >>> returns = loader.load_csv("monthly_returns.csv")
        >>> returns = loader.load_csv("prices.csv", prices=True)
    """

    def __init__(self, return_method: str = 'simple'):
        """
        Args:
            return_method: 'simple' (P2/P1 - 1) or 'log' (ln(P2/P1)) for price input
        """
        if return_method not in ('simple', 'log'):
            raise InvalidConfiguration(
                f"Unknown return method: {return_method}. Use 'simple' or 'log'"
            )
        self.return_method = return_method

    def load_csv(
        self,
        file_path: str,
        date_column: bool = True,
        prices: bool = False
    ) -> pd.DataFrame:
        """
        Load a return (or price) matrix from a CSV file.

        Args:
            file_path: Path to CSV file with a header row of asset names
            date_column: If True, the first column holds dates and becomes the index
            prices: If True, the file holds prices to be converted to returns

        Returns:
            Return matrix DataFrame
        """
        df = pd.read_csv(file_path)
        return self._prepare(df, date_column, prices)

    def load_excel(
        self,
        file_path: str,
        sheet_name: Any = 0,
        date_column: bool = True,
        prices: bool = False
    ) -> pd.DataFrame:
        """
        Load a return (or price) matrix from an Excel sheet.

        Args:
            file_path: Path to .xlsx workbook
            sheet_name: Sheet name or 0-based index
            date_column: If True, the first column holds dates
            prices: If True, the sheet holds prices to be converted to returns

        Returns:
            Return matrix DataFrame
        """
        df = pd.read_excel(file_path, sheet_name=sheet_name, engine='openpyxl')
        return self._prepare(df, date_column, prices)

    def load(
        self,
        file_path: str,
        sheet_name: Any = 0,
        date_column: bool = True,
        prices: bool = False
    ) -> pd.DataFrame:
        """Dispatch on file extension (.csv, .xlsx/.xlsm)."""
        suffix = str(file_path).lower().rsplit('.', 1)[-1]
        if suffix == 'csv':
            return self.load_csv(file_path, date_column, prices)
        elif suffix in ('xlsx', 'xlsm'):
            return self.load_excel(file_path, sheet_name, date_column, prices)
        else:
            raise InvalidReturnData(
                f"Unsupported file type: {file_path}. Use .csv or .xlsx"
            )

    def _prepare(self, df: pd.DataFrame, date_column: bool, prices: bool) -> pd.DataFrame:
        if date_column:
            dates = pd.to_datetime(df.iloc[:, 0], errors='coerce')
            df = df.iloc[:, 1:]
            if dates.notna().all():
                df.index = pd.DatetimeIndex(dates, name='Date')

        # Drop columns that are not numeric at all (labels, notes)
        non_numeric = [
            col for col in df.columns
            if pd.to_numeric(df[col], errors='coerce').isna().all()
        ]
        if non_numeric:
            warnings.warn(f"Dropping non-numeric columns: {non_numeric}")
            df = df.drop(columns=non_numeric)

        df = df.apply(pd.to_numeric, errors='coerce')

        if prices:
            df = self.from_prices(df)

        return self.drop_incomplete_rows(df)

    def from_prices(self, prices: pd.DataFrame) -> pd.DataFrame:
        """
        Convert a price table to periodic returns.

        Simple returns: r_t = P_t / P_{t-1} - 1
        Log returns:    r_t = ln(P_t / P_{t-1})

        The first row (no prior price) is dropped.
        """
        prices = prices.astype(float)
        if (prices <= 0).any().any():
            raise InvalidReturnData("Prices must be strictly positive")

        ratio = prices / prices.shift(1)
        if self.return_method == 'log':
            returns = np.log(ratio)
        else:
            returns = ratio - 1
        return returns.iloc[1:]

    @staticmethod
    def drop_incomplete_rows(returns: pd.DataFrame) -> pd.DataFrame:
        """Drop periods where any asset is missing, warning about how many."""
        mask = returns.notna().all(axis=1)
        n_dropped = int((~mask).sum())
        if n_dropped:
            warnings.warn(
                f"Dropped {n_dropped} of {len(returns)} periods with missing values"
            )
        return returns[mask]

    @staticmethod
    def select_window(
        returns: pd.DataFrame,
        start: Optional[str] = None,
        end: Optional[str] = None
    ) -> pd.DataFrame:
        """
        Restrict a date-indexed return matrix to [start, end].

        Args:
            returns: Return matrix with a DatetimeIndex
            start: First date to keep (inclusive), None for open-ended
            end: Last date to keep (inclusive), None for open-ended
        """
        if not isinstance(returns.index, pd.DatetimeIndex):
            raise InvalidReturnData("Date window requires a date-indexed return matrix")
        return returns.loc[start:end]

    @staticmethod
    def validate(returns: pd.DataFrame, ddof: int = 1) -> Dict[str, Any]:
        """
        Diagnose a return matrix before solving.

        Checks:
        - No missing or non-numeric values
        - More periods than assets
        - Covariance matrix is positive definite

        Args:
            returns: Return matrix to check
            ddof: Covariance estimator used for the eigenvalue checks

        Returns:
            Dictionary with is_valid, errors, warnings, n_periods and n_assets,
            plus min_eigenvalue once the covariance can be estimated
        """
        results = {
            'is_valid': True,
            'warnings': [],
            'errors': [],
            'n_periods': int(returns.shape[0]),
            'n_assets': int(returns.shape[1]),
        }

        try:
            df = as_return_frame(returns)
        except InvalidReturnData as e:
            results['errors'].append(str(e))
            results['is_valid'] = False
            return results

        n_periods, n_assets = df.shape
        if n_periods <= n_assets:
            results['errors'].append(
                f"Need more periods than assets: {n_periods} periods, {n_assets} assets"
            )
            results['is_valid'] = False
            return results

        eigenvalues = np.linalg.eigvalsh(df.cov(ddof=ddof).values)
        results['min_eigenvalue'] = float(eigenvalues.min())
        if eigenvalues.min() <= PD_TOL * max(eigenvalues.max(), 0.0):
            results['errors'].append(
                f"Covariance matrix is not positive definite: "
                f"min eigenvalue = {eigenvalues.min():.6e}"
            )
            results['is_valid'] = False
        elif eigenvalues.max() / eigenvalues.min() > 1e10:
            results['warnings'].append(
                f"Covariance matrix is ill-conditioned: "
                f"condition number = {eigenvalues.max() / eigenvalues.min():.3e}"
            )

        constant = list(df.columns[df.std() == 0])
        if constant:
            results['warnings'].append(f"Assets with constant returns: {constant}")

        return results


def generate_sample_returns(
    n_assets: int = 4,
    n_periods: int = 60,
    seed: int = 42
) -> pd.DataFrame:
    """
    Generate a synthetic monthly return matrix for testing.

    Returns are drawn from a multivariate normal with increasing means
    and a random positive definite covariance.

    Args:
        n_assets: Number of assets (default: 4)
        n_periods: Number of monthly periods (default: 60)
        seed: Random seed for reproducibility

    Returns:
        DataFrame indexed by month-start dates, one column per asset
    """
    rng = np.random.default_rng(seed)

    # Realistic monthly means
    means = np.linspace(0.005, 0.02, n_assets)

    A = rng.normal(size=(n_assets, n_assets)) * 0.03
    cov = np.dot(A, A.T) + np.eye(n_assets) * 0.002
    cov = cov / np.max(cov) * 0.004

    data = rng.multivariate_normal(means, cov, size=n_periods)

    if n_assets == 4:
        asset_names = ['VIIIX', 'VBMPX', 'GOOG', 'AAPL']
    else:
        asset_names = [f'Stock_{i+1}' for i in range(n_assets)]

    dates = pd.date_range('2013-01-01', periods=n_periods, freq='MS', name='Date')
    return pd.DataFrame(data, index=dates, columns=asset_names)


def parse_weights(text: str) -> Dict[str, float]:
    """
    Parse "ASSET=fraction" pairs separated by commas.

    Example:
        >>> parse_weights("VIIIX=0.6, GOOG=0.4")
        {'VIIIX': 0.6, 'GOOG': 0.4}

    Raises:
        InvalidConfiguration: On malformed pairs or repeated assets
    """
    weights = {}
    for item in text.split(','):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition('=')
        name = name.strip()
        if not sep or not name:
            raise InvalidConfiguration(f"Expected ASSET=fraction, got '{item}'")
        try:
            fraction = float(value)
        except ValueError:
            raise InvalidConfiguration(f"Invalid weight for {name}: '{value.strip()}'")
        if name in weights:
            raise InvalidConfiguration(f"Asset listed twice: {name}")
        weights[name] = fraction

    if not weights:
        raise InvalidConfiguration("No weights given")
    return weights


def normalize_weights(weights: Mapping[str, float]) -> Dict[str, float]:
    """Scale weights so they sum to 1."""
    total = sum(weights.values())
    if total == 0:
        raise InvalidConfiguration("Weights sum to zero and cannot be normalized")
    return {name: w / total for name, w in weights.items()}


def subset_assets(returns: pd.DataFrame, selected: List[str]) -> pd.DataFrame:
    """
    Keep only the selected asset columns, warning about unknown names.
    """
    found = []
    for name in selected:
        if name in returns.columns:
            found.append(name)
        else:
            warnings.warn(f"Asset '{name}' not found in data")
    if not found:
        raise InvalidReturnData("None of the selected assets are in the data")
    return returns[found]
