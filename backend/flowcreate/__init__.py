"""FlowCreate integration execution and data transformation engine."""

__version__ = "0.1.0"
