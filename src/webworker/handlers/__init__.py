"""
Request handlers.

    static.py              - ResourceLocator: path → open file or not found
    connection_handler.py  - ConnectionHandler: parse → locate → respond → close
"""

from .static import ResourceLocator, ResolvedResource
from .connection_handler import ConnectionHandler

__all__ = [
    "ResourceLocator",
    "ResolvedResource",
    "ConnectionHandler",
]
