"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

The protocol side of one request/response cycle:

    request.py       - Read the request line, drain headers
    mime_types.py    - Path → Content-Type, and BINARY vs TEMPLATED
    templating.py    - <cs371date> / <cs371server> substitution
    response.py      - Status line, Content-Type, streamed body
    status_codes.py  - The two statuses we send

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import Request, RequestParser, RequestParseError
from .mime_types import ContentMode, resolve_content_type, major_type
from .templating import TemplateRenderer, format_server_date, DATE_TAG, SERVER_TAG
from .response import ResponseWriter, NOT_FOUND_BODY

__all__ = [
    "HTTPStatus",
    "Request",
    "RequestParser",
    "RequestParseError",
    "ContentMode",
    "resolve_content_type",
    "major_type",
    "TemplateRenderer",
    "format_server_date",
    "DATE_TAG",
    "SERVER_TAG",
    "ResponseWriter",
    "NOT_FOUND_BODY",
]
