"""
=============================================================================
WEB SERVER
=============================================================================

Glues the acceptor to the connection handler: every accepted connection
gets its own thread, which runs one request/response cycle and exits.

=============================================================================
THREAD PER CONNECTION
=============================================================================

    ┌──────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   main thread                                                        │
    │   ───────────                                                        │
    │   SocketServer.start()                                               │
    │       │                                                              │
    │       ├── accept() ──► Connection A ──► Thread A: handler.handle(A)  │
    │       ├── accept() ──► Connection B ──► Thread B: handler.handle(B)  │
    │       └── accept() ──► Connection C ──► Thread C: handler.handle(C)  │
    │                                                                      │
    └──────────────────────────────────────────────────────────────────────┘

Each thread owns its connection, its request and its open file outright.
Nothing is shared between threads, so there are no locks. There is also
no pool and no limit: a burst of N clients means N threads.

Blocking is fine here. A thread stuck reading a slow client only stalls
that client; the socket timeout in ServerConfig bounds how long.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core.connection import Connection
from .core.socket_server import SocketServer
from .handlers.connection_handler import ConnectionHandler


logger = logging.getLogger(__name__)


class WebServer:
    """
    Thread-per-connection static web server.

    Usage:
        server = WebServer(ServerConfig(port=8080, document_root="./public"))
        server.run()  # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.handler = ConnectionHandler(self.config)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self) -> Tuple[str, int]:
        """Address the server is (or will be) listening on."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            configure_logging: Install a basic log handler from config.
                               Pass False when embedding in an app that
                               configures logging itself.
        """
        if configure_logging:
            self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on "
            f"{self.config.host}:{self.config.port}, root={self.config.document_root!r}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._socket_server.shutdown()
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the accept loop to stop. In-flight connections finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is closed after shutdown()."""
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for one connection (called by the acceptor)."""
        worker = threading.Thread(
            target=self.handler.handle,
            args=(conn,),
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        worker.start()
