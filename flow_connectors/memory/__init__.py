"""
Flow connectors memory package.

This package provides the conversation-state interface connectors write their
results into, together with an in-memory implementation.
"""

from flow_connectors.memory.flow_context import FlowContext, InMemoryFlowContext

__all__ = ["FlowContext", "InMemoryFlowContext"]
