"""Integration application layer: commands, queries and DTOs."""
