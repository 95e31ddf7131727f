"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Writes the response for one resolved resource straight onto the client's
output stream. Nothing is built in memory first: the file is streamed
chunk by chunk, which is also why there is no Content-Length header.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\n                    ← or: HTTP/1.1 404 File Not Found\n
    Content-Type: text/html\n            ← sent for 404 too
    \n                                   ← end of headers
    <body bytes>                         ← until the connection closes

Lines end in a bare \n, and these are the only two header lines. Clients
find the end of the body when the server closes the connection.

=============================================================================
TWO STAGES, ALWAYS IN ORDER
=============================================================================

    ┌─────────────────┐        ┌────────────────────────────────────────┐
    │  write_header   │ ─────► │  write_body                            │
    └─────────────────┘        │                                        │
                               │  not found ──► fixed 404 page          │
                               │                                        │
                               │  found, BINARY ──► chunks verbatim     │
                               │                                        │
                               │  found, TEMPLATED ──► preamble (once)  │
                               │                       + chunks with    │
                               │                         tags replaced  │
                               └────────────────────────────────────────┘

=============================================================================
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, BinaryIO, Callable, Optional

from .mime_types import ContentMode
from .status_codes import HTTPStatus
from .templating import TemplateRenderer

if TYPE_CHECKING:
    from ..handlers.static import ResolvedResource


NOT_FOUND_BODY = (
    b"<html><head></head><body>\n"
    b"<h3>404: File not found.</h3>\n"
    b"</body></html>\n"
)

PREAMBLE_TEMPLATE = (
    "<html><head><title>{server_name}</title>"
    '<link rel="icon" href="images/favicon.ico" type="image/x-icon" >'
    "</head>"
)


def _local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


class ResponseWriter:
    """
    Streams a status line, a Content-Type header and a body.

    Args:
        server_name: Page title and <cs371server> replacement.
        chunk_size: Bytes read from the resource per iteration.
        clock: Returns the timestamp used for <cs371date>.
    """

    def __init__(
        self,
        server_name: str,
        chunk_size: int = 1024,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        self.server_name = server_name
        self.chunk_size = chunk_size
        self.clock = clock or _local_now
        self.preamble = PREAMBLE_TEMPLATE.format(server_name=server_name).encode("utf-8")

    def write(self, out: BinaryIO, resource: "ResolvedResource") -> int:
        """Write header then body. Returns body bytes written."""
        self.write_header(out, resource)
        return self.write_body(out, resource)

    def write_header(self, out: BinaryIO, resource: "ResolvedResource") -> None:
        status = HTTPStatus.OK if resource.found else HTTPStatus.NOT_FOUND
        header = f"{status.status_line}\nContent-Type: {resource.content_type}\n\n"
        out.write(header.encode("latin-1"))

    def write_body(self, out: BinaryIO, resource: "ResolvedResource") -> int:
        """
        Stream the body for `resource`.

        Returns:
            Number of body bytes written.
        """
        if not resource.found:
            out.write(NOT_FOUND_BODY)
            return len(NOT_FOUND_BODY)

        if resource.mode is ContentMode.BINARY:
            return self._write_binary(out, resource.byte_source)

        return self._write_templated(out, resource.byte_source)

    def _write_binary(self, out: BinaryIO, source: BinaryIO) -> int:
        written = 0
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break
            out.write(chunk)
            written += len(chunk)
        return written

    def _write_templated(self, out: BinaryIO, source: BinaryIO) -> int:
        # One timestamp per response, taken before the first chunk
        renderer = TemplateRenderer.for_response(self.clock(), self.server_name)

        written = 0
        started = False
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break

            if not started:
                # Preamble goes out once, ahead of the first chunk.
                # An empty file therefore gets an empty body.
                out.write(self.preamble)
                written += len(self.preamble)
                started = True

            rendered = renderer.feed(chunk)
            out.write(rendered)
            written += len(rendered)

        tail = renderer.finish()
        if tail:
            out.write(tail)
            written += len(tail)

        return written
