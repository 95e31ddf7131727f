"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the two byte streams the request
cycle works on, plus a close() that always releases everything.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as

    GET /index.html HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

may arrive as "GET /ind" + "ex.html HTTP/1.1\r\nHo" + "st: ...". Rather
than buffering by hand, we ask the socket for a buffered file object:

    sock.makefile("rb")   → .readline() blocks until a full line (or EOF)
    sock.makefile("wb")   → .write() buffers, .flush() pushes to the wire

Any blocking read primitive does the job; no polling loop is needed.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   TCP Connect → Request → Response → TCP Close                   │
    │                                                                  │
    │   No keep-alive. The end of the body is signalled by the close.  │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     └─────────────┴───────────────────────────────┘
                     (errors jump straight to CLOSING)

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close()."""
    NEW = "new"              # Just accepted, haven't read anything yet
    READING = "reading"      # Reading the request
    WRITING = "writing"      # Streaming the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        timeout: Socket timeout in seconds, None to block forever.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = 30.0

    # Lazily created file objects (not shown in repr for cleaner logs)
    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        """Configure the socket after initialization."""
        self.socket.setblocking(True)

        # settimeout(None) is the same as blocking forever
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        if isinstance(self.address, tuple) and self.address:
            return str(self.address[0])
        return str(self.address)

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # STREAMS
    # =========================================================================

    @property
    def input(self) -> BinaryIO:
        """Buffered binary reader over the socket."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._reader

    @property
    def output(self) -> BinaryIO:
        """Buffered binary writer over the socket."""
        if self._writer is None:
            self._writer = self.socket.makefile("wb")
        self.state = ConnectionState.WRITING
        return self._writer

    def flush(self) -> None:
        """Push buffered output to the client. Raises OSError on failure."""
        if self._writer is not None:
            self._writer.flush()

    # =========================================================================
    # CLOSING: Properly terminate the connection
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. Close the file objects (a failed flush here is logged, not raised)
        2. shutdown(SHUT_WR): send FIN so the client sees end-of-body
        3. Drain anything the client is still sending
        4. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        for stream in (self._writer, self._reader):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"[{self.id}] Stream close failed: {e}")

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)  # Quick timeout
            while self.socket.recv(1024):
                pass  # Discard any remaining data
        except OSError:
            pass  # Includes socket.timeout; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                request = parser.parse(conn.input)
                writer.write(conn.output, resource)
            # Connection automatically closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
