"""Integration domain aggregates."""

from .data_mapping import DataMapping
from .integration import Integration
from .sync_job import SyncJob

__all__ = ["DataMapping", "Integration", "SyncJob"]
