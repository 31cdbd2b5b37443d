"""Profitability and historical-balance tooling for Augur fee windows."""

__version__ = "0.1.0"
