"""Manage CloudHealth perspectives as YAML definitions."""

__version__ = "0.1.0"
