"""Laid dating API: Flask backend and Python client."""

__version__ = "0.1.0"
