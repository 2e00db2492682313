"""Fuel outlet finder backed by a geospatial distance cache."""

__version__ = "0.1.0"

__all__ = ["__version__"]
