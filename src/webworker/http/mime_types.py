"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a resource path to the MIME type sent in the Content-Type header,
and decides how the body is streamed.

=============================================================================
RESOLUTION ORDER
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                    resolve_content_type(path)                      │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  1. OVERRIDES       .png → image/png                               │
    │                     .ico → image/x-con                             │
    │                                                                     │
    │  2. MIME_TYPES      our own table of common web extensions         │
    │                                                                     │
    │  3. mimetypes       the standard library / OS registry             │
    │                                                                     │
    │  4. DEFAULT         application/octet-stream                       │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

About image/x-con: yes, it is not a real type (the registered one is
image/vnd.microsoft.icon, the de-facto one image/x-icon). Existing pages
served by this server have always received it, and browsers sniff .ico
files anyway, so the value is kept as is.

=============================================================================
BODY MODE
=============================================================================

The "major type" is the part before the slash:

    image/png   → "image"   → ContentMode.BINARY     (bytes passed through)
    text/html   → "text"    → ContentMode.TEMPLATED  (tags substituted)
    anything else           → ContentMode.TEMPLATED

Only images are exempt from substitution. A .css or .js file goes through
the template path too, which is harmless unless it contains the tags.

=============================================================================
"""

import mimetypes
from enum import Enum
from pathlib import Path


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================

# Checked first. These win over every other table.
CONTENT_TYPE_OVERRIDES = {
    ".png": "image/png",
    ".ico": "image/x-con",
}

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONTS / MEDIA / DOCUMENTS
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".wasm": "application/wasm",
}

# application/octet-stream = "I don't know what this is"
DEFAULT_MIME_TYPE = "application/octet-stream"


class ContentMode(Enum):
    """
    How the body of a found resource is written.

    Selected once per request from the resolved content type, never
    re-decided per chunk.
    """
    BINARY = "binary"          # Raw passthrough
    TEMPLATED = "templated"    # Preamble + placeholder substitution

    @classmethod
    def for_content_type(cls, content_type: str) -> "ContentMode":
        if major_type(content_type) == "image":
            return cls.BINARY
        return cls.TEMPLATED


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def resolve_content_type(path: str | Path) -> str:
    """
    Get the MIME type for a resource path based on its extension.

    Args:
        path: Resource path, e.g. "./images/logo.png"

    Returns:
        The MIME type string

    Examples:
        >>> resolve_content_type("./a.png")
        'image/png'

        >>> resolve_content_type("./favicon.ico")
        'image/x-con'

        >>> resolve_content_type("./index.html")
        'text/html'

        >>> resolve_content_type("./unknown.zzz")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png

    if extension in CONTENT_TYPE_OVERRIDES:
        return CONTENT_TYPE_OVERRIDES[extension]

    if extension in MIME_TYPES:
        return MIME_TYPES[extension]

    guessed, _encoding = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE


def major_type(content_type: str) -> str:
    """
    Get the part of a MIME type before the slash.

        >>> major_type("image/png")
        'image'
        >>> major_type("text/html; charset=utf-8")
        'text'
    """
    return content_type.split("/", 1)[0].strip().lower()
