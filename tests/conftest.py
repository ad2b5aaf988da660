"""
Pytest configuration and fixtures for frontier_sweep tests
"""

import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from frontier_sweep.core.loader import generate_sample_returns


# Known moments of the diagonal fixture
DIAGONAL_MEANS = np.array([0.01, 0.02, 0.015])
DIAGONAL_SCALES = np.array([0.1, 0.2, 0.15])


@pytest.fixture
def diagonal_returns():
    """
    Four periods of three assets with exact means [0.01, 0.02, 0.015]
    and a diagonal sample covariance.

    The deviation columns are mutually orthogonal and sum to zero, so the
    sample variance of asset i is scale_i^2 * 4 / 3 and all covariances
    are exactly zero.
    """
    deviations = np.array([
        [1, 1, 1],
        [1, -1, -1],
        [-1, 1, -1],
        [-1, -1, 1],
    ], dtype=float)
    data = DIAGONAL_MEANS + deviations * DIAGONAL_SCALES
    return pd.DataFrame(data, columns=['A', 'B', 'C'])


@pytest.fixture
def diagonal_variances():
    """Sample variances of the diagonal_returns fixture."""
    return DIAGONAL_SCALES ** 2 * 4 / 3


@pytest.fixture
def sample_returns():
    """Sixty months of four correlated assets."""
    return generate_sample_returns(n_assets=4, n_periods=60, seed=42)


@pytest.fixture
def six_asset_returns():
    """Ninety-six months of six correlated assets."""
    return generate_sample_returns(n_assets=6, n_periods=96, seed=7)


@pytest.fixture
def reference_weights():
    """A non-efficient current portfolio over the sample_returns assets."""
    return {'VIIIX': 0.4, 'VBMPX': 0.3, 'GOOG': 0.2, 'AAPL': 0.1}
