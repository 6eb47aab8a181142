"""Integration infrastructure: storage, transport and wiring."""
