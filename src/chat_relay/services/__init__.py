"""
Services métier de Chat Relay.
"""

from .websocket_manager import ConnectionManager, WebSocketChannel, get_connection_manager
from .dispatcher import RelayDispatcher, format_error_message
from .credit import query_credit, parse_credit_body

__all__ = [
    "ConnectionManager",
    "WebSocketChannel",
    "get_connection_manager",
    "RelayDispatcher",
    "format_error_message",
    "query_credit",
    "parse_credit_body",
]
