"""
Health Check API Module

This module provides health check endpoints to verify that the connectors
service is running and that connectors have been registered.
"""

import time
from typing import Dict, Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

from flow_connectors import __version__
from flow_connectors.connectors import available_modules
from flow_connectors.utils.logger import setup_logger

# Initialize logger
logger = setup_logger(__name__)

# Create router
router = APIRouter(tags=["health"])

# Models
class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str
    version: str
    uptime: float
    components: Dict[str, Dict[str, Any]]

start_time = time.time()

@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check endpoint to verify the service is running correctly.

    Returns:
        JSON response with health status information
    """
    uptime = time.time() - start_time

    modules = available_modules()
    components = {
        "connectors": {
            "status": "healthy" if modules else "unhealthy",
            "modules": {module: len(names) for module, names in modules.items()},
        }
    }

    logger.debug(f"Health check requested from {request.client.host if request.client else 'unknown'}")

    return {
        "status": "healthy" if modules else "degraded",
        "version": __version__,
        "uptime": uptime,
        "components": components
    }

@router.get("/ping")
async def ping() -> Dict[str, str]:
    """Simple ping endpoint for basic connectivity checks."""
    return {"ping": "pong"}
