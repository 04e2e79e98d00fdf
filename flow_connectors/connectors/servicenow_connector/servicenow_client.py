"""
ServiceNow Connector Module

This module provides connectors for the ServiceNow Table API and Attachment API.
Rows can be listed, inserted, patched and deleted; attachments can be listed,
fetched, uploaded from a remote file location, and deleted.

The secret carries ``username``, ``password`` and ``instance``, where instance
is the full base URL of the ServiceNow instance (e.g. https://dev1234.service-now.com).
Results are written through add_to_context into the slot named by ``store``.
"""

from typing import Any, Dict, Optional

import httpx

from flow_connectors.connectors.rest_adapter import (
    ArgumentSpec,
    ArgumentType,
    ConnectorCallError,
    RestRequest,
    perform_rest_call,
    register_connector,
    secret_argument,
    stop_on_error_argument,
    store_argument,
)
from flow_connectors.memory.flow_context import FlowContext
from flow_connectors.utils.logger import setup_logger

# Initialize logger
logger = setup_logger(__name__)

MODULE = "service-now"
SECRET_FIELDS = ("username", "password", "instance")

TABLE_ORDER = "ORDERBYDESCnumber"
NO_RESULT_FOUND = "No result found in the ServiceNow response"

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

# Earlier connector versions spelled these confirmations "succefully"
ENTRY_DELETED = "successfully deleted entry with id: {sys_id}"
ATTACHMENT_DELETED = "successfully deleted attachment with id: {sys_id}"

TABLE_NAME_REQUIRED ={"tableName": "Table name not defined."}
SYS_ID_REQUIRED = {"sysId": "Sys Id not defined."}


def _url(secret: Dict[str, Any], path: str) -> str:
    return f"{secret['instance'].rstrip('/')}/api/now/{path}"

def _auth(secret: Dict[str, Any]):
    return (secret["username"], secret["password"])

def parse_result(response: httpx.Response, args: Dict[str, Any]) -> Any:
    """Return the ``result`` member of a ServiceNow response."""
    payload = response.json()
    if not isinstance(payload, dict) or "result" not in payload:
        raise ConnectorCallError(NO_RESULT_FOUND, MODULE)
    return payload["result"]

def _table_argument(description: str) -> ArgumentSpec:
    return ArgumentSpec(name="tableName", type=ArgumentType.STRING, required=True, description=description)

def _sys_id_argument(description: str) -> ArgumentSpec:
    return ArgumentSpec(name="sysId", type=ArgumentType.STRING, required=True, description=description)

def _data_argument(description: str) -> ArgumentSpec:
    return ArgumentSpec(name="data", type=ArgumentType.JSON, required=True, description=description)

async def _call(flow, args, transport, **kwargs) -> FlowContext:
    return await perform_rest_call(
        flow, args, secret_fields=SECRET_FIELDS, transport=transport, **kwargs
    )


# Table API

@register_connector(MODULE, "GETFromTable", "Gets the rows of a chosen table", [
    secret_argument(),
    _table_argument("The name of the table you want to query"),
    ArgumentSpec(name="limit", type=ArgumentType.NUMBER, description="The limit of the shown results"),
    ArgumentSpec(name="caller_id", type=ArgumentType.STRING,
                 description="The username of the person that created the ticket"),
    ArgumentSpec(name="assigned_to", type=ArgumentType.STRING,
                 description="The username of the person that the ticket is currently assigned to"),
    stop_on_error_argument(),
    store_argument(),
])
async def get_from_table(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    """List rows of a table, newest number first."""

    def build(call_args: Dict[str, Any], secret: Dict[str, Any]) -> RestRequest:
        params = {
            "sysparm_limit": call_args.get("limit"),
            "caller_id": call_args.get("caller_id"),
            "sysparm_query": TABLE_ORDER,
            "sysparm_display_value": "true",
        }
        if call_args.get("assigned_to"):
            params["assigned_to"] = call_args["assigned_to"]

        return RestRequest(
            method="GET",
            url=_url(secret, f"table/{call_args['tableName']}"),
            params=params,
            headers={"Accept": "application/json"},
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="GETFromTable",
                       required=TABLE_NAME_REQUIRED, build_request=build, parse_response=parse_result)


@register_connector(MODULE, "POSTToTable", "Inserts a new row into the chosen ServiceNow table", [
    secret_argument(),
    _table_argument("The name of the table you want to edit"),
    _data_argument("The data of the row you want to add"),
    stop_on_error_argument(),
    store_argument(),
])
async def post_to_table(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="POST",
            url=_url(secret, f"table/{call_args['tableName']}"),
            headers=JSON_HEADERS,
            auth=_auth(secret),
            body=call_args["data"],
        )

    return await _call(flow, args, transport, connector="POSTToTable",
                       required={**TABLE_NAME_REQUIRED, "data": "Data to post not defined."},
                       build_request=build, parse_response=parse_result)


@register_connector(MODULE, "PatchRecordInTable", "Updates a row of the chosen ServiceNow table", [
    secret_argument(),
    _table_argument("The name of the table you want to query"),
    _data_argument("The updated data for the chosen entry"),
    _sys_id_argument("The id of the entry you want to update"),
    stop_on_error_argument(),
    store_argument(),
])
async def patch_record_in_table(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="PATCH",
            url=_url(secret, f"table/{call_args['tableName']}/{call_args['sysId']}"),
            headers=JSON_HEADERS,
            auth=_auth(secret),
            body=call_args["data"],
        )

    return await _call(flow, args, transport, connector="PatchRecordInTable",
                       required={**TABLE_NAME_REQUIRED, "data": "Data to post not defined.", **SYS_ID_REQUIRED},
                       build_request=build, parse_response=parse_result)


@register_connector(MODULE, "DeleteFromTable",
    "Deletes a row from the chosen ServiceNow table and stores 'successfully deleted entry with id: <sysId>'. "
    "Earlier versions stored 'succefully deleted ...'; flows matching that text must be updated", [
    secret_argument(),
    _table_argument("The name of the table you want to query"),
    _sys_id_argument("The id of the entry you want to delete"),
    stop_on_error_argument(),
    store_argument(),
])
async def delete_from_table(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="DELETE",
            url=_url(secret, f"table/{call_args['tableName']}/{call_args['sysId']}"),
            headers=JSON_HEADERS,
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="DeleteFromTable",
                       required={**TABLE_NAME_REQUIRED, **SYS_ID_REQUIRED}, build_request=build,
                       parse_response=lambda response, call_args: ENTRY_DELETED.format(sys_id=call_args["sysId"]))


# Attachment API

@register_connector(MODULE, "GETAttachments", "Gets attachments from ServiceNow", [
    secret_argument(),
    ArgumentSpec(name="limit", type=ArgumentType.STRING, description="How many results you want to show"),
    ArgumentSpec(name="query", type=ArgumentType.STRING,
                 description="A search query, e.g. 'file_name=attachment.doc'"),
    stop_on_error_argument(),
    store_argument(),
])
async def get_attachments(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="GET",
            url=_url(secret, "attachment"),
            params={
                "sysparm_limit": call_args.get("limit"),
                "sysparm_query": call_args.get("query"),
            },
            headers=JSON_HEADERS,
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="GETAttachments",
                       required={}, build_request=build, parse_response=parse_result)


@register_connector(MODULE, "GETAttachmentById", "Gets an attachment by id", [
    secret_argument(),
    _sys_id_argument("The id of the attachment you want to reach"),
    stop_on_error_argument(),
    store_argument(),
])
async def get_attachment_by_id(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="GET",
            url=_url(secret, f"attachment/{call_args['sysId']}"),
            headers=JSON_HEADERS,
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="GETAttachmentById",
                       required=SYS_ID_REQUIRED, build_request=build, parse_response=parse_result)


async def fetch_attachment_file(
    client: httpx.AsyncClient, request: RestRequest, args: Dict[str, Any]
) -> RestRequest:
    """Download the file at ``fileLocation`` and attach it to the upload request."""
    response = await client.get(args["fileLocation"], follow_redirects=True)
    if not response.is_success:
        raise ConnectorCallError(
            f"Could not fetch file from {args['fileLocation']} (status code {response.status_code})",
            "POSTAttachment",
        )

    content_type = response.headers.get("Content-Type", "application/octet-stream")
    logger.debug(f"Fetched {len(response.content)} bytes for attachment {args['fileName']}")
    return request.model_copy(update={
        "files": {"file": (args["fileName"], response.content, content_type)},
    })


@register_connector(MODULE, "POSTAttachment", "Posts an attachment to a specific entry in a specific table", [
    secret_argument(),
    _table_argument("The name of the table the entry belongs to"),
    ArgumentSpec(name="tableSysId", type=ArgumentType.STRING, required=True,
                 description="The id of the entry in the given table where the attachment will be stored"),
    ArgumentSpec(name="fileName", type=ArgumentType.STRING, required=True,
                 description="The full filename, e.g. attachment.docx"),
    ArgumentSpec(name="fileLocation", type=ArgumentType.STRING, required=True,
                 description="Where the file is stored now, e.g. an S3 bucket URL"),
    stop_on_error_argument(),
    store_argument(),
])
async def post_attachment(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    """Forward a remote file to ServiceNow as a multipart upload."""

    def build(call_args, secret):
        return RestRequest(
            method="POST",
            url=_url(secret, "attachment/file"),
            params={
                "table_name": call_args["tableName"],
                "table_sys_id": call_args["tableSysId"],
                "file_name": call_args["fileName"],
            },
            headers={"Accept": "application/json"},
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="POSTAttachment",
                       required={
                           **TABLE_NAME_REQUIRED,
                           "tableSysId": "Table sys Id not defined.",
                           "fileName": "File name not defined.",
                           "fileLocation": "File location not defined.",
                       },
                       build_request=build, parse_response=parse_result,
                       prepare_request=fetch_attachment_file)


@register_connector(MODULE, "DeleteAttachment",
    "Deletes an attachment with a specific id and stores 'successfully deleted attachment with id: <sysId>'. "
    "Earlier versions stored 'succefully deleted ...'; flows matching that text must be updated", [
    secret_argument(),
    _sys_id_argument("The id of the attachment you want to delete"),
    stop_on_error_argument(),
    store_argument(),
])
async def delete_attachment(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="DELETE",
            url=_url(secret, f"attachment/{call_args['sysId']}"),
            headers=JSON_HEADERS,
            auth=_auth(secret),
        )

    return await _call(flow, args, transport, connector="DeleteAttachment",
                       required=SYS_ID_REQUIRED, build_request=build,
                       parse_response=lambda response, call_args: ATTACHMENT_DELETED.format(sys_id=call_args["sysId"]))
