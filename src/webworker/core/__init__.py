"""
=============================================================================
CORE NETWORKING MODULE
=============================================================================

Socket plumbing with no HTTP knowledge:

    socket_server.py  - Listen, accept, hand each Connection to a callback
    connection.py     - Client socket + buffered byte streams + clean close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP acceptor
    "Connection",       # Wrapper for client socket
    "ConnectionState",  # Enum for connection lifecycle states
]
