"""Upcoming programming contest aggregation with a two-tier cache."""

__version__ = "0.1.0"
