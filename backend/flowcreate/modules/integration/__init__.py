"""Integration execution and data transformation module."""
