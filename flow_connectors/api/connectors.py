"""
Connectors API Module

This module exposes the connector catalogue over HTTP and lets a caller invoke
a connector against an in-memory flow context. It serves flow authors who need
the argument schema of each connector, and lets operators try a connector
with real credentials outside a running flow.
"""

from typing import Dict, List, Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from flow_connectors.connectors import (
    ArgumentValidationError,
    ConnectorCallError,
    ConnectorSpec,
    get_connector,
    list_connectors,
)
from flow_connectors.memory.flow_context import InMemoryFlowContext
from flow_connectors.utils.config import Config, load_config
from flow_connectors.utils.logger import setup_logger

# Initialize logger
logger = setup_logger(__name__)

# Create router
router = APIRouter(tags=["connectors"])

# Models
class InvokeRequest(BaseModel):
    """Request model for invoking a connector."""
    args: Dict[str, Any] = Field(..., description="Connector arguments, including secret, store and stopOnError")
    input: Dict[str, Any] = Field(default_factory=dict, description="Initial input map of the flow")
    context: Dict[str, Any] = Field(default_factory=dict, description="Initial context map of the flow")

class LogLine(BaseModel):
    """A line written to the flow's logging sink."""
    level: str
    message: str

class InvokeResponse(BaseModel):
    """Response model for a connector invocation."""
    connector: str
    input: Dict[str, Any]
    context: Dict[str, Any]
    logs: List[LogLine] = []

# Dependencies
def get_config() -> Config:
    """Dependency to get configuration."""
    return load_config()

async def verify_api_key(
    x_api_key: Optional[str] = Header(None),
    config: Config = Depends(get_config),
) -> None:
    """Reject requests without a known API key when the service requires one."""
    if config.api_key_required and x_api_key not in config.api_keys:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

def _get_connector_or_404(module: str, name: str):
    connector = get_connector(module, name)
    if connector is None:
        raise HTTPException(status_code=404, detail=f"Connector {module}.{name} not found")
    return connector

@router.get("/connectors", response_model=List[ConnectorSpec])
async def list_all_connectors(module: Optional[str] = None) -> List[ConnectorSpec]:
    """
    List all registered connectors with their argument schema.

    Args:
        module: Optional module name to filter on
    """
    specs = list_connectors()
    if module:
        specs = [spec for spec in specs if spec.module == module]
    return specs

@router.get("/connectors/{module}/{name}", response_model=ConnectorSpec)
async def describe_connector(module: str, name: str) -> ConnectorSpec:
    """Return the argument schema of one connector."""
    return _get_connector_or_404(module, name).spec

@router.post(
    "/connectors/{module}/{name}/invoke",
    response_model=InvokeResponse,
    dependencies=[Depends(verify_api_key)],
)
async def invoke_connector(module: str, name: str, request: InvokeRequest) -> InvokeResponse:
    """
    Run a connector against a fresh in-memory flow context.

    Validation errors return 400, calls aborted under stopOnError return 502.
    """
    connector = _get_connector_or_404(module, name)
    flow = InMemoryFlowContext(input=request.input, context=request.context)

    try:
        await connector(flow, request.args)
    except ArgumentValidationError as e:
        logger.info(f"Invalid arguments for {module}.{name}: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except ConnectorCallError as e:
        logger.warning(f"Connector {module}.{name} aborted: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)

    state = flow.to_dict()
    return InvokeResponse(
        connector=f"{module}.{name}",
        input=state["input"],
        context=state["context"],
        logs=state["logs"],
    )
