"""
Jira Connector Module

This module provides connectors for the Jira REST API (version 2). They create
issues, read single fields of an issue, build a short issue summary, or return
the full issue document. Ticket numbers can also be extracted from the user's
text without calling Jira at all.

All Jira connectors write through add_to_context into the slot named by the
``contextStore`` argument.
"""

import re
from typing import Any, Dict, Optional

import httpx

from flow_connectors.connectors.rest_adapter import (
    ArgumentSpec,
    ArgumentType,
    ConnectorCallError,
    RestRequest,
    StoreTarget,
    handle_error,
    perform_rest_call,
    register_connector,
    secret_argument,
    stop_on_error_argument,
    store_argument,
    validate_arguments,
    write_result,
)
from flow_connectors.memory.flow_context import FlowContext
from flow_connectors.utils.logger import setup_logger

# Initialize logger
logger = setup_logger(__name__)

MODULE = "jira"
STORE_KEY = "contextStore"
SECRET_FIELDS = ("username", "password", "domain")

# Jira's default "Epic" issue type and epic-name field on cloud instances
EPIC_ISSUE_TYPE_ID = "10000"
EPIC_NAME_FIELD = "customfield_10011"
DEFAULT_ASSIGNEE = "admin"

TICKET_PATTERN = re.compile(r"[A-Z]+-\d+")
NO_TICKET_FOUND = "No ticket found"

ISSUE_FETCH_ERROR = "Error while getting Jira issue."
ISSUE_NOT_FOUND = "Error while getting Jira issue. No issue was found"

TICKET_REQUIRED = {"ticket": "No ticket defined. Please define a ticket like AB-1234."}

TICKET_ARGUMENTS = [
    secret_argument(),
    ArgumentSpec(name="ticket", type=ArgumentType.STRING, required=True,
                 description="The ticket number e.g. ABC-1234"),
    store_argument(STORE_KEY),
    stop_on_error_argument(),
]


def _api_url(domain: str, path: str) -> str:
    return f"https://{domain.rstrip('/')}/rest/api/2/{path}"

def _auth(secret: Dict[str, Any]):
    return (secret["username"], secret["password"])

def _issue_request(args: Dict[str, Any], secret: Dict[str, Any]) -> RestRequest:
    return RestRequest(
        method="GET",
        url=_api_url(secret["domain"], f"issue/{args['ticket']}"),
        headers={"Accept": "application/json"},
        auth=_auth(secret),
    )

def _dig(document: Any, *keys: str) -> Any:
    """Follow nested keys, returning None for anything missing or falsy."""
    for key in keys:
        if not isinstance(document, dict):
            return None
        document = document.get(key)
    return document or None

def parse_issue(response: httpx.Response, args: Dict[str, Any]) -> Dict[str, Any]:
    """Decode an issue, rejecting empty bodies."""
    if not response.content:
        raise ConnectorCallError(ISSUE_NOT_FOUND, MODULE)
    issue = response.json()
    if not isinstance(issue, dict) or not issue:
        raise ConnectorCallError(ISSUE_NOT_FOUND, MODULE)
    return issue

def project_field(issue: Dict[str, Any], field_name: str) -> Dict[str, Any]:
    """
    Project one field of an issue.

    The value is always stored under ``status``, whatever field was requested,
    so flows written against one field getter work with the others.
    """
    return {
        "ticket": issue.get("key") or None,
        "status": _dig(issue, "fields", field_name),
    }

def project_summary(issue: Dict[str, Any]) -> Dict[str, Any]:
    """Project the curated summary of an issue; absent fields map to None."""
    return {
        "ticket": issue.get("key") or None,
        "type": _dig(issue, "fields", "issuetype", "name"),
        "project": _dig(issue, "fields", "project", "name"),
        "status": _dig(issue, "fields", "status", "name"),
        "assignedTo": _dig(issue, "fields", "assignee", "emailAddress"),
        "reportedBy": _dig(issue, "fields", "reporter", "emailAddress"),
        "resolution": _dig(issue, "fields", "resolution", "name"),
        "comments": _dig(issue, "fields", "comment", "comments"),
    }

async def _fetch_issue(
    flow: FlowContext,
    args: Dict[str, Any],
    connector: str,
    project=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FlowContext:
    def parse(response: httpx.Response, call_args: Dict[str, Any]) -> Any:
        issue = parse_issue(response, call_args)
        return project(issue) if project else issue

    return await perform_rest_call(
        flow,
        args,
        connector=connector,
        required=TICKET_REQUIRED,
        secret_fields=SECRET_FIELDS,
        build_request=_issue_request,
        parse_response=parse,
        store_key=STORE_KEY,
        fallback_error=ISSUE_FETCH_ERROR,
        transport=transport,
    )

async def _fetch_field(
    flow: FlowContext,
    args: Dict[str, Any],
    connector: str,
    field_name: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FlowContext:
    return await _fetch_issue(
        flow, args, connector, lambda issue: project_field(issue, field_name), transport
    )


# Connectors

@register_connector(MODULE, "createJiraTicket", "Creates a Ticket in Jira", [
    secret_argument(),
    ArgumentSpec(name="summary", type=ArgumentType.STRING, required=True,
                 description="The summary of the new ticket"),
    ArgumentSpec(name="projectId", type=ArgumentType.STRING, required=True,
                 description="The projectId of the new ticket"),
    ArgumentSpec(name="epicname", type=ArgumentType.STRING, required=True,
                 description="The epicname of the new ticket"),
    ArgumentSpec(name="description", type=ArgumentType.STRING, required=True,
                 description="The description of the new ticket"),
    ArgumentSpec(name="assignee", type=ArgumentType.STRING,
                 description="The assignee of the new ticket"),
    store_argument(STORE_KEY),
    stop_on_error_argument(),
])
async def create_jira_ticket(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    """Create an epic in the given project and store the created issue reference."""

    def build(call_args: Dict[str, Any], secret: Dict[str, Any]) -> RestRequest:
        return RestRequest(
            method="POST",
            url=_api_url(secret["domain"], "issue"),
            headers={"Accept": "application/json"},
            auth=_auth(secret),
            body={
                "fields": {
                    "summary": call_args["summary"],
                    "issuetype": {"id": EPIC_ISSUE_TYPE_ID},
                    "project": {"key": call_args["projectId"]},
                    EPIC_NAME_FIELD: call_args["epicname"],
                    "description": call_args["description"],
                    "assignee": {"name": call_args.get("assignee") or DEFAULT_ASSIGNEE},
                }
            },
        )

    return await perform_rest_call(
        flow,
        args,
        connector="createJiraTicket",
        required={
            "summary": "Summary not defined.",
            "projectId": "Project Id not defined.",
            "epicname": "Epicname not defined.",
            "description": "Description not defined.",
        },
        secret_fields=SECRET_FIELDS,
        build_request=build,
        store_key=STORE_KEY,
        abort_template="Error: {message}. Please check your secret, too.",
        transport=transport,
    )


@register_connector(MODULE, "extractTicket",
    "Extracts a ticket number (e.g. SB-2 or TIF-1234) from the input text", [
    store_argument(STORE_KEY),
    stop_on_error_argument(),
])
async def extract_ticket(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    """Store the first ticket-like token of the input text, or a not-found marker."""
    validate_arguments("extractTicket", args, {}, store_key=STORE_KEY)

    text = flow.input.get("text")
    if text is not None and not isinstance(text, str):
        error = ConnectorCallError(f"Input text is not a string: {type(text).__name__}", "extractTicket")
        return handle_error(flow, args, error, STORE_KEY)

    match = TICKET_PATTERN.search(text or "")
    logger.debug(f"extractTicket: {'found ' + match.group(0) if match else 'no ticket'} in input text")
    write_result(flow, StoreTarget.CONTEXT, args[STORE_KEY], match.group(0) if match else NO_TICKET_FOUND)
    return flow


@register_connector(MODULE, "getTicketStatus", "Returns the status of a given ticket (e.g. 'In progress')", TICKET_ARGUMENTS)
async def get_ticket_status(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketStatus", "status", transport)


@register_connector(MODULE, "getTicketAssignee", "Returns the assignee of a given ticket (e.g. bob@bob.com)", TICKET_ARGUMENTS)
async def get_ticket_assignee(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketAssignee", "assignee", transport)


@register_connector(MODULE, "getTicketPriority", "Returns the priority of a given ticket (e.g. 'normal')", TICKET_ARGUMENTS)
async def get_ticket_priority(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketPriority", "priority", transport)


@register_connector(MODULE, "getTicketResolution", "Returns the resolution if the ticket has one", TICKET_ARGUMENTS)
async def get_ticket_resolution(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketResolution", "resolution", transport)


@register_connector(MODULE, "getTicketReporter", "Returns the reporter of the ticket (e.g. bob@bob.com)", TICKET_ARGUMENTS)
async def get_ticket_reporter(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketReporter", "reporter", transport)


@register_connector(MODULE, "getTicketComments", "Returns comments on this ticket, if it has any", TICKET_ARGUMENTS)
async def get_ticket_comments(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketComments", "comment", transport)


@register_connector(MODULE, "getTicketWatchers", "Returns the people watching the ticket", TICKET_ARGUMENTS)
async def get_ticket_watchers(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_field(flow, args, "getTicketWatchers", "watches", transport)


@register_connector(MODULE, "getTicketSummary",
    "Returns a basic summary of the ticket: type, project, status, assignedTo, reportedBy, resolution and comments",
    TICKET_ARGUMENTS)
async def get_ticket_summary(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_issue(flow, args, "getTicketSummary", project_summary, transport)


@register_connector(MODULE, "getAllTicketInfo",
    "Returns the full Jira response, including all meta data", TICKET_ARGUMENTS)
async def get_all_ticket_info(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _fetch_issue(flow, args, "getAllTicketInfo", transport=transport)
