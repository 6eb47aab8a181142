"""Integration domain layer: aggregates, value objects and domain services."""
