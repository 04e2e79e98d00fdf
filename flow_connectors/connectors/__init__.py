"""
Flow Connectors Package

This package provides the connectors a conversational flow can call to reach
external services: Jira, ServiceNow, Yext and Azure Cognitive Services.
It includes the shared REST adapter every connector is built on and one
subpackage per service.

Each connector is responsible for:
1. Validating its arguments and the secret it was given
2. Sending a single request to its service
3. Writing the result, or an error object, back into the conversation
"""

from typing import Dict, List

from flow_connectors.connectors.rest_adapter import (
    ArgumentSpec,
    ArgumentType,
    ArgumentValidationError,
    ConnectorCallError,
    ConnectorError,
    ConnectorSpec,
    StoreTarget,
    get_connector,
    list_connectors,
    perform_rest_call,
    register_connector,
)

# Import connector modules to trigger registration via @register_connector
from flow_connectors.connectors import jira_connector  # noqa: F401
from flow_connectors.connectors import servicenow_connector  # noqa: F401
from flow_connectors.connectors import yext_connector  # noqa: F401
from flow_connectors.connectors import cognitive_connector  # noqa: F401


def available_modules() -> Dict[str, List[str]]:
    """Map each connector module to the names of its connectors."""
    modules: Dict[str, List[str]] = {}
    for spec in list_connectors():
        modules.setdefault(spec.module, []).append(spec.name)
    return modules


__all__ = [
    "ArgumentSpec",
    "ArgumentType",
    "ArgumentValidationError",
    "ConnectorCallError",
    "ConnectorError",
    "ConnectorSpec",
    "StoreTarget",
    "available_modules",
    "get_connector",
    "list_connectors",
    "perform_rest_call",
    "register_connector",
]
