"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Reads one HTTP request from a connection's input stream and pulls out the
only thing this server cares about: which file was asked for.

=============================================================================
WHAT WE READ
=============================================================================

    GET /index.html HTTP/1.1\r\n      ← request line: we keep token #2
    Host: localhost:8080\r\n          ┐
    User-Agent: curl/8.0\r\n          ├ headers: read and discarded
    Accept: */*\r\n                   ┘
    \r\n                              ← blank line: stop reading

Headers are drained, not parsed. We still read them so the client sees
its whole request consumed before we start answering.

=============================================================================
FROM TARGET TO FILE PATH
=============================================================================

    document_root + target

    "."    + "/index.html"   →  "./index.html"
    "/srv" + "/img/a.png"    →  "/srv/img/a.png"

The prefix anchors the lookup below the root for ordinary requests. It is
NOT a sandbox: "/../../etc/passwd" is concatenated just the same. Real
containment needs Path.resolve() plus a relative_to(root) check.

=============================================================================
FAILURE MODES
=============================================================================

    ┌───────────────────────────────┬──────────────────────────────────────┐
    │ Situation                     │ Result                               │
    ├───────────────────────────────┼──────────────────────────────────────┤
    │ Stream closed before line 1   │ RequestParseError                    │
    │ Line 1 has fewer than 2 tokens│ RequestParseError                    │
    │ Line 1 longer than the limit  │ RequestParseError                    │
    │ Read error while draining     │ stop draining, return the request    │
    │ Stream closed while draining  │ stop draining, return the request    │
    └───────────────────────────────┴──────────────────────────────────────┘

A read error on line 1 itself (reset, timeout) is a transport failure and
propagates as OSError to the connection handler.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class RequestParseError(Exception):
    """
    Raised when the request line is missing or malformed.

    Carries the status code a full HTTP server would answer with. This
    server answers with nothing at all; the code only ends up in logs.
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Request:
    """
    The parts of a request we keep.

    Attributes:
        resource_path: document root + request target, used to open the file.
        method: First token of the request line (logged only).
        target: Second token of the request line, as sent.
        version: Third token, if the client sent one.
    """
    resource_path: str
    method: str
    target: str
    version: Optional[str] = None


class RequestParser:
    """
    Line-oriented request parser.

    Usage:
        parser = RequestParser(document_root=".")
        request = parser.parse(conn.input)
        request.resource_path   # "./index.html"
    """

    def __init__(self, document_root: str = ".", max_line_length: int = 8192):
        self.document_root = document_root
        self.max_line_length = max_line_length

    def parse(self, stream: BinaryIO, conn_id: str = "-") -> Request:
        """
        Read one request from `stream`.

        Blocks on readline() until a line arrives or the stream closes.

        Raises:
            RequestParseError: No usable request line.
            OSError: The first line could not be read.
        """
        request = self._parse_request_line(stream, conn_id)
        self._drain_headers(stream, conn_id)
        return request

    def _parse_request_line(self, stream: BinaryIO, conn_id: str) -> Request:
        # Room for the line plus its CRLF; the limit counts content only
        raw = stream.readline(self.max_line_length + 2)

        if not raw:
            raise RequestParseError("Connection closed before request line")

        if len(raw.rstrip(b"\r\n")) > self.max_line_length:
            raise RequestParseError(
                f"Request line exceeds {self.max_line_length} bytes"
            )

        line = _decode_line(raw)
        logger.debug(f"[{conn_id}] Request line: ({line})")

        # ─────────────────────────────────────────────────────────────────
        # TOKENIZE
        # ─────────────────────────────────────────────────────────────────
        # split() with no argument collapses runs of spaces and tabs,
        # so "GET   /x" still yields ["GET", "/x"].

        tokens = line.split()
        if len(tokens) < 2:
            raise RequestParseError(f"Malformed request line: {line!r}")

        method, target = tokens[0], tokens[1]
        version = tokens[2] if len(tokens) > 2 else None

        return Request(
            resource_path=self.document_root + target,
            method=method,
            target=target,
            version=version,
        )

    def _drain_headers(self, stream: BinaryIO, conn_id: str) -> None:
        """Consume lines up to and including the blank line."""
        # A long header comes back from readline() in pieces. Only a piece
        # that starts a fresh line can be the blank terminator.
        at_line_start = True

        while True:
            try:
                raw = stream.readline(self.max_line_length + 2)
            except OSError as e:
                logger.debug(f"[{conn_id}] Request error: {e}")
                return

            if not raw:
                return  # Client closed its side early

            line = _decode_line(raw)
            logger.debug(f"[{conn_id}] Request line: ({line})")

            if at_line_start and not line:
                return

            at_line_start = raw.endswith(b"\n")


def _decode_line(raw: bytes) -> str:
    # UTF-8 with surrogateescape: open() encodes the target back to the
    # exact bytes the client sent, so non-ASCII file names are found.
    return raw.decode("utf-8", errors="surrogateescape").rstrip("\r\n")
