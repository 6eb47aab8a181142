"""FlowCreate bounded contexts."""
