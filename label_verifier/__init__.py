"""Alcohol label verification against COLA application data."""

__version__ = "1.0.0"
