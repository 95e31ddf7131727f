"""
=============================================================================
STATIC RESOURCE LOCATOR
=============================================================================

Turns a resource path into an open file (or a clean "not found").

=============================================================================
ONE QUESTION, TWO ANSWERS
=============================================================================

The locator does not stat(), list directories or pre-check existence.
It simply tries to open the file:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       locate("./index.html")                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   open(path, "rb")                                                   │
    │        │                                                             │
    │        ├── success ──────────► found=True,  byte_source=<file>       │
    │        │                                                             │
    │        └── FileNotFoundError ┐                                       │
    │            PermissionError   │                                       │
    │            IsADirectoryError ├─► found=False, byte_source=None      │
    │            any other OSError │                                       │
    │            ValueError (NUL)  ┘                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every failure collapses to 404. The client never learns whether a file is
missing or merely unreadable.

=============================================================================
OWNERSHIP
=============================================================================

The open file belongs to whoever called locate(). ResolvedResource is a
context manager, so the usual shape is:

    with locator.locate(request.resource_path) as resource:
        writer.write(out, resource)
    # file closed here, even if write() raised

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from ..http.mime_types import ContentMode, major_type, resolve_content_type


logger = logging.getLogger(__name__)


@dataclass
class ResolvedResource:
    """
    Result of locating one resource.

    Attributes:
        found: Whether the file could be opened.
        content_type: MIME type resolved from the path (set even if not found).
        major_type: Part of content_type before the slash.
        byte_source: Open binary file when found, else None.
    """
    found: bool
    content_type: str
    major_type: str
    byte_source: Optional[BinaryIO] = field(default=None, repr=False)

    @property
    def mode(self) -> ContentMode:
        """How the body is streamed, decided once from the content type."""
        return ContentMode.for_content_type(self.content_type)

    @property
    def closed(self) -> bool:
        return self.byte_source is None or self.byte_source.closed

    def close(self) -> None:
        """Close the underlying file. Safe to call more than once."""
        if self.byte_source is not None and not self.byte_source.closed:
            self.byte_source.close()

    def __enter__(self) -> "ResolvedResource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions


class ResourceLocator:
    """
    Opens resource paths for reading.

    Usage:
        locator = ResourceLocator()
        resource = locator.locate("./images/logo.png")
        resource.found          # True
        resource.content_type   # "image/png"
        resource.mode           # ContentMode.BINARY
    """

    def locate(self, path: str) -> ResolvedResource:
        content_type = resolve_content_type(path)

        try:
            source = open(path, "rb")
        except (OSError, ValueError) as e:
            logger.debug(f"Resource not available: {path} ({e.__class__.__name__})")
            return ResolvedResource(
                found=False,
                content_type=content_type,
                major_type=major_type(content_type),
            )

        return ResolvedResource(
            found=True,
            content_type=content_type,
            major_type=major_type(content_type),
            byte_source=source,
        )
