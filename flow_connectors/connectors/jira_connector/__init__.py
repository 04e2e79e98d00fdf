"""
Jira Connector Package

Connectors for creating Jira issues and reading issue fields, plus a local
ticket-number extractor for user text.
"""

from flow_connectors.connectors.jira_connector.jira_client import (
    create_jira_ticket,
    extract_ticket,
    get_all_ticket_info,
    get_ticket_assignee,
    get_ticket_comments,
    get_ticket_priority,
    get_ticket_reporter,
    get_ticket_resolution,
    get_ticket_status,
    get_ticket_summary,
    get_ticket_watchers,
)

__all__ = [
    "create_jira_ticket",
    "extract_ticket",
    "get_all_ticket_info",
    "get_ticket_assignee",
    "get_ticket_comments",
    "get_ticket_priority",
    "get_ticket_reporter",
    "get_ticket_resolution",
    "get_ticket_status",
    "get_ticket_summary",
    "get_ticket_watchers",
]
