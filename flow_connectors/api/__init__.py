"""
Flow connectors API package.

This package contains the REST endpoints of the connectors service: health
checks and the connector catalogue with its invocation endpoint.
"""

from flow_connectors.api.connectors import router as connectors_router
from flow_connectors.api.health_check import router as health_check_router

# List of all routers to be included in the application
routers = [
    connectors_router,
    health_check_router,
]

__all__ = [
    "connectors_router",
    "health_check_router",
    "routers"
]
