"""Playstats - aggregate statistics dashboard for the custom entries app."""

__version__ = "0.1.0"
