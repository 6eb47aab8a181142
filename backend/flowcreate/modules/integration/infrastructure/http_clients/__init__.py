"""Outbound HTTP clients."""

from .transport import HttpTransport

__all__ = ["HttpTransport"]
