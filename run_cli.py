"""
CLI entry point for frontier analysis.

Usage:
    python run_cli.py                         # Run with sample data
    python run_cli.py --file returns.csv      # Run with a returns file
    python run_cli.py --max-allocation 0.5    # Cap any single asset at 50%
    python run_cli.py --allow-short           # Allow short selling

For installed package, use: frontier-analyze
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from frontier_sweep.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
