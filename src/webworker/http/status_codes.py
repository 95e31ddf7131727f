"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The web worker only ever answers with two statuses:

    HTTP/1.1 200 OK
    HTTP/1.1 404 File Not Found

Note the reason phrase on 404. RFC 9110 suggests "Not Found", but the
reason phrase is free text and clients must ignore it, so we keep the
historical "File Not Found" that existing clients of this server see.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the responder.

    IntEnum, so statuses compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'File Not Found'
    """

    OK = 200                # Resource found and streamed
    BAD_REQUEST = 400       # Malformed request line (logged, never sent)
    NOT_FOUND = 404         # Resource could not be opened

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _PHRASES.get(self, "Unknown")

    @property
    def status_line(self) -> str:
        """Get the full status line, e.g. 'HTTP/1.1 200 OK'."""
        return f"HTTP/1.1 {self.value} {self.phrase}"


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "File Not Found",
}
