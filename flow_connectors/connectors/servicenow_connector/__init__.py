"""
ServiceNow Connector Package

Connectors for the ServiceNow Table API and Attachment API.
"""

from flow_connectors.connectors.servicenow_connector.servicenow_client import (
    delete_attachment,
    delete_from_table,
    get_attachment_by_id,
    get_attachments,
    get_from_table,
    patch_record_in_table,
    post_attachment,
    post_to_table,
)

__all__ = [
    "delete_attachment",
    "delete_from_table",
    "get_attachment_by_id",
    "get_attachments",
    "get_from_table",
    "patch_record_in_table",
    "post_attachment",
    "post_to_table",
]
