"""Consolidation of ANS quarterly financial statements into one expense report."""

__version__ = "0.1.0"
