"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webworker --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBWORKER_PORT=3000 python -m webworker                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
DOCUMENT ROOT
=============================================================================

Every request target is turned into a file path by gluing it onto
`document_root`:

    document_root="."      GET /index.html  →  ./index.html
    document_root="/srv"   GET /a/b.png     →  /srv/a/b.png

This is plain string concatenation. There is NO path canonicalization and
NO check that the result stays below the root, so `GET /../secret` walks
right out of it. Do not point this server at anything you would not
publish as a whole.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the web worker server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    REQUEST / RESPONSE SETTINGS
    - document_root, chunk_size, max_line_length

    SERVER IDENTITY
    - server_name

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    timeout: Optional[float] = 30.0
    """
    Socket timeout for each client connection, in seconds.
    None = block forever on a silent client (the historical behavior).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST / RESPONSE SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Prefix glued in front of every request target to form a file path.
    """

    chunk_size: int = 1024
    """
    How many bytes of the resource are read per chunk when streaming.
    """

    max_line_length: int = 8192
    """
    Longest request line we accept, not counting the CRLF. Longer lines
    are a parse error. Longer header lines are read in pieces and dropped.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "Elena's Server!"
    """
    Substituted for <cs371server> tags and used as the page title.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every request line received.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST         Server host (default: 127.0.0.1)
        WEBWORKER_PORT         Server port (default: 8080)
        WEBWORKER_ROOT         Document root prefix (default: .)
        WEBWORKER_TIMEOUT      Client socket timeout, seconds (default: 30,
                               "none" disables it)
        WEBWORKER_SERVER_NAME  Server name for templates
        WEBWORKER_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        defaults = cls()

        timeout_value = os.getenv("WEBWORKER_TIMEOUT")
        if timeout_value is None:
            timeout = defaults.timeout
        elif timeout_value.strip().lower() in ("", "none", "0"):
            timeout = None
        else:
            timeout = float(timeout_value)

        return cls(
            host=os.getenv("WEBWORKER_HOST", defaults.host),
            port=int(os.getenv("WEBWORKER_PORT", str(defaults.port))),
            timeout=timeout,
            document_root=os.getenv("WEBWORKER_ROOT", defaults.document_root),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", defaults.server_name),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", defaults.log_level),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.max_line_length < 16:
            raise ValueError("max_line_length must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.document_root is None:
            raise ValueError("document_root must be set")
