"""Command line interface for frontier analysis."""
