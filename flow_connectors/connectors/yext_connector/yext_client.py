"""
Yext Connector Module

Fetches one of the fixed entity collections of the authenticated Yext account.
The raw response is written directly into the conversation's full context.
"""

from typing import Any, Dict, Optional

import httpx

from flow_connectors.connectors.rest_adapter import (
    ArgumentSpec,
    ArgumentType,
    RestRequest,
    StoreTarget,
    perform_rest_call,
    register_connector,
    stop_on_error_argument,
    store_argument,
)
from flow_connectors.memory.flow_context import FlowContext

MODULE = "yext"
API_BASE = "https://api.yext.com/v2/accounts/me"

ENTITIES = ["Locations", "Events", "Products", "Assets", "Entities", "Folders", "Menus", "Bios"]


@register_connector(MODULE, "GetEntity", "Gets an entity collection from Yext", [
    ArgumentSpec(name="secret", type=ArgumentType.SECRET, required=True,
                 description="The configured secret to use, providing 'api_key'"),
    ArgumentSpec(name="entity", type=ArgumentType.SELECT, required=True, choices=ENTITIES,
                 description="The entity you want to get from Yext"),
    ArgumentSpec(name="api_version", type=ArgumentType.STRING, required=True,
                 description="The version you want to use, e.g. 20190424 (a date)"),
    stop_on_error_argument(),
    store_argument(),
])
async def get_entity(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args: Dict[str, Any], secret: Dict[str, Any]) -> RestRequest:
        return RestRequest(
            method="GET",
            url=f"{API_BASE}/{call_args['entity'].lower()}",
            params={"api_key": secret["api_key"], "v": call_args["api_version"]},
            headers={"Allow": "application/json"},
        )

    return await perform_rest_call(
        flow,
        args,
        connector="GetEntity",
        required={"entity": "No entity defined.", "api_version": "No version defined."},
        secret_fields=("api_key",),
        build_request=build,
        target=StoreTarget.FULL_CONTEXT,
        transport=transport,
    )
