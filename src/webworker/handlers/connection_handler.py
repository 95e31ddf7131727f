"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs exactly one request/response cycle on one connection, then closes it.
Think of handle() as the main() of a single client interaction.

=============================================================================
THE CYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ConnectionHandler.handle(conn)                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   with conn:                                    ← always closed      │
    │       request  = parser.parse(conn.input)       ← may abort cycle    │
    │       with locator.locate(path) as resource:    ← always closed      │
    │           writer.write_header(out, resource)                         │
    │           writer.write_body(out, resource)                           │
    │           conn.flush()                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR POLICY
=============================================================================

    RequestParseError   → log, send nothing, close
    missing/unreadable  → not an error: locator reports found=False, 404
    OSError             → transport failure (reset, broken pipe, timeout):
                          log, close
    anything else       → log with traceback, close

handle() never raises. Each connection runs in its own thread, and a
failure in one must not reach the acceptor or any other connection.
There are no retries.

=============================================================================
"""

import logging
from typing import Optional

from ..config import ServerConfig
from ..core.connection import Connection
from ..http.request import RequestParser, RequestParseError
from ..http.response import ResponseWriter
from ..http.status_codes import HTTPStatus
from .static import ResourceLocator


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Orchestrates parser → locator → writer for one connection.

    Holds no per-request state, so a single instance can be shared by
    every connection thread.

    Usage:
        handler = ConnectionHandler(ServerConfig(document_root="./public"))
        threading.Thread(target=handler.handle, args=(conn,)).start()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        parser: Optional[RequestParser] = None,
        locator: Optional[ResourceLocator] = None,
        writer: Optional[ResponseWriter] = None,
    ):
        self.config = config or ServerConfig()
        self.parser = parser or RequestParser(
            document_root=self.config.document_root,
            max_line_length=self.config.max_line_length,
        )
        self.locator = locator or ResourceLocator()
        self.writer = writer or ResponseWriter(
            server_name=self.config.server_name,
            chunk_size=self.config.chunk_size,
        )

    def handle(self, conn: Connection) -> None:
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")

        try:
            with conn:
                self._serve(conn)
        except RequestParseError as e:
            logger.warning(f"[{conn.id}] Bad request ({e.status_code}): {e}")
        except OSError as e:
            logger.warning(f"[{conn.id}] Transport error: {e}")
        except Exception as e:
            logger.exception(f"[{conn.id}] Unexpected error: {e}")

        logger.debug(f"[{conn.id}] Done handling connection")

    def _serve(self, conn: Connection) -> None:
        request = self.parser.parse(conn.input, conn.id)

        with self.locator.locate(request.resource_path) as resource:
            out = conn.output
            self.writer.write_header(out, resource)
            sent = self.writer.write_body(out, resource)
            conn.flush()

        status = HTTPStatus.OK if resource.found else HTTPStatus.NOT_FOUND
        logger.info(
            f'[{conn.id}] {conn.client_ip} "{request.method} {request.target}" '
            f"{status.value} {resource.content_type} {sent}"
        )
