"""Bizdir - business contact directory with spreadsheet import and export."""

__version__ = "0.3.0"
