"""
=============================================================================
WEBWORKER - One Request, One Thread, One Response
=============================================================================

A deliberately small HTTP responder built on raw sockets. Each accepted
connection is handled by its own thread, which reads one request, serves
one file (or a 404), and closes the connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        REQUEST/RESPONSE CYCLE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /index.html HTTP/1.1                                           │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser     "./index.html"                                   │
    │        │                                                             │
    │        ▼                                                             │
    │   ResourceLocator   open() + content type ("text/html")              │
    │        │                                                             │
    │        ▼                                                             │
    │   ResponseWriter    HTTP/1.1 200 OK                                  │
    │                     Content-Type: text/html                          │
    │                                                                      │
    │                     <html><head><title>...</title>...</head>         │
    │                     file contents, <cs371date> and <cs371server>     │
    │                     replaced                                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Images are streamed byte for byte. Everything else is treated as a
template.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── server.py            # WebServer: acceptor + thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # TCP listen/accept loop
    │   └── connection.py    # Client socket wrapper with byte streams
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Header + streamed body
    │   ├── templating.py    # Tag substitution across chunks
    │   ├── mime_types.py    # Content type + body mode
    │   └── status_codes.py  # 200 / 404
    └── handlers/
        ├── static.py             # ResourceLocator
        └── connection_handler.py # One full cycle per connection

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, document_root="./public"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import WebServer
from .handlers import ConnectionHandler, ResourceLocator, ResolvedResource

__all__ = [
    "WebServer",
    "ServerConfig",
    "ConnectionHandler",
    "ResourceLocator",
    "ResolvedResource",
    "__version__",
]
