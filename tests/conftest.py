"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import WebServer, ServerConfig
from webworker.core.connection import Connection
from webworker.handlers.connection_handler import ConnectionHandler
from webworker.http.response import ResponseWriter


FIXED_NOW = datetime(2026, 10, 19, 14, 3, 11, tzinfo=timezone.utc)
FIXED_DATE_STRING = "Mon Oct 19 14:03:11 UTC 2026"

# PNG signature followed by bytes that look like template tags
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
    + b"<cs371date><cs371server>\x00\xff\xfe" * 40
)


@pytest.fixture
def fixed_now() -> datetime:
    """Timestamp returned by the test clock."""
    return FIXED_NOW


@pytest.fixture
def fixed_date_string() -> str:
    """FIXED_NOW as rendered into <cs371date>."""
    return FIXED_DATE_STRING


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with headers."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with a template page, an image and a stylesheet."""
    (tmp_path / "index.html").write_bytes(
        b"<body><p><cs371date></cs371date></p>"
        b"<p><cs371server></cs371server></p></body>\n"
    )
    (tmp_path / "plain.html").write_bytes(b"<body>Nothing to replace</body>\n")
    (tmp_path / "empty.html").write_bytes(b"")
    (tmp_path / "style.css").write_bytes(b"body { color: red; }\n")

    images = tmp_path / "images"
    images.mkdir()
    (images / "logo.png").write_bytes(PNG_BYTES)
    (images / "favicon.ico").write_bytes(b"\x00\x00\x01\x00<cs371date>")

    return tmp_path


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Test server configuration rooted at doc_root."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        document_root=str(doc_root),
        server_name="Test Server",
        log_level="WARNING",
    )


@pytest.fixture
def handler(config: ServerConfig) -> ConnectionHandler:
    """Connection handler with a frozen clock."""
    writer = ResponseWriter(
        server_name=config.server_name,
        chunk_size=config.chunk_size,
        clock=lambda: FIXED_NOW,
    )
    return ConnectionHandler(config, writer=writer)


@pytest.fixture
def exchange(handler: ConnectionHandler) -> Callable[[bytes], bytes]:
    """
    Run one full cycle over a socket pair.

    Sends the raw request, lets the handler serve it on the other end,
    and returns everything the client received.
    """
    def run(raw_request: bytes, cycle_handler: ConnectionHandler = None) -> bytes:
        server_sock, client_sock = socket.socketpair()
        with client_sock:
            client_sock.sendall(raw_request)
            client_sock.shutdown(socket.SHUT_WR)

            conn = Connection(
                socket=server_sock,
                address=("127.0.0.1", 50000),
                timeout=5.0,
            )
            (cycle_handler or handler).handle(conn)

            return recv_all(client_sock)

    return run


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        data = sock.recv(4096)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if not self.server.wait_for_shutdown(timeout=5.0):
            raise RuntimeError("Server failed to stop")

    def request(self, raw_request: bytes) -> bytes:
        """Send a raw request and read the response until close."""
        with socket.create_connection(self.address, timeout=5.0) as sock:
            sock.sendall(raw_request)
            return recv_all(sock)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Create and start a test server."""
    test_srv = TestServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
