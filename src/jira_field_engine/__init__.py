"""Jira field engine: field metadata normalization, value extraction and reconciliation."""

__version__ = "0.1.0"
