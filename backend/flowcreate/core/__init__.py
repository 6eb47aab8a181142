"""Shared kernel: errors, logging, configuration and base abstractions."""
