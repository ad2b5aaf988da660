"""Setup file for editable install compatibility."""
from setuptools import setup, find_packages

setup(
    name="frontier-sweep",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20",
        "pandas>=1.3",
        "scipy>=1.7",
        "matplotlib>=3.4",
        "openpyxl>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "frontier-analyze=frontier_sweep.cli.main:main",
        ],
    },
    python_requires=">=3.8",
)
