"""
Flow Connectors: Main Application Entry Point

This module initializes the FastAPI application that publishes the connector
catalogue and lets connectors be invoked over HTTP.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flow_connectors import __version__
from flow_connectors.api import routers
from flow_connectors.connectors import list_connectors
from flow_connectors.utils.config import load_config
from flow_connectors.utils.logger import set_log_level, setup_logger

# Initialize logger
logger = setup_logger(__name__)

config = load_config()
set_log_level(config.log_level)

# Initialize the FastAPI app
app = FastAPI(
    title=config.app_name,
    description="Integration connectors for conversational flows",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in routers:
    app.include_router(router)

logger.info(f"{config.app_name} started with {len(list_connectors())} connectors ({config.environment})")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("flow_connectors.main:app", host=config.host, port=config.port, reload=config.debug_mode)
