"""Yext Connector Package"""

from flow_connectors.connectors.yext_connector.yext_client import get_entity

__all__ = ["get_entity"]
