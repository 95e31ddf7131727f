"""
=============================================================================
PLACEHOLDER SUBSTITUTION
=============================================================================

Text resources may contain two tags that are filled in while streaming:

    <cs371date>     → the time the response started, e.g.
                      "Mon Oct 19 14:03:11 UTC 2026"
    <cs371server>   → the configured server name

Only the opening tags are replaced. A page written as

    <cs371date></cs371date>

comes out as "Mon Oct 19 14:03:11 UTC 2026</cs371date>"; the browser
ignores the unknown closing tag.

=============================================================================
TAGS SPLIT ACROSS CHUNKS
=============================================================================

Files are streamed in fixed-size chunks, so a tag can straddle two reads:

    chunk 1:  "...<p>Served on <cs37"
    chunk 2:  "1date></p>..."

Substituting each chunk on its own would miss it. TemplateRenderer keeps
back the tail of a chunk when that tail could still grow into a tag, and
prepends it to the next chunk:

    ┌──────────────────────────────────────────────────────────────────┐
    │  feed(chunk 1)                                                   │
    │     data    = pending + chunk        "...<p>Served on <cs37"     │
    │     replace complete tags            (none)                      │
    │     hold    = "<cs37"                (prefix of "<cs371date>")   │
    │     return  "...<p>Served on "                                   │
    │                                                                  │
    │  feed(chunk 2)                                                   │
    │     data    = "<cs37" + "1date></p>..."                          │
    │     replace complete tags            "<cs371date>" → date        │
    │     return  "Mon Oct 19 ...</p>..."                              │
    │                                                                  │
    │  finish()                                                        │
    │     return whatever is still held back, unchanged                │
    └──────────────────────────────────────────────────────────────────┘

Everything works on bytes, so a multi-byte UTF-8 character cut in half by
a chunk boundary is never decoded (and never mangled).

=============================================================================
"""

import re
from datetime import datetime
from typing import Mapping


DATE_TAG = b"<cs371date>"
SERVER_TAG = b"<cs371server>"

# Same shape as java.util.Date.toString(): "Mon Oct 19 14:03:11 UTC 2026"
DATE_FORMAT = "%a %b %d %H:%M:%S %Z %Y"


def format_server_date(dt: datetime) -> str:
    """
    Format a timestamp for <cs371date>.

    Naive datetimes are taken as local time.
    """
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.strftime(DATE_FORMAT)


class TemplateRenderer:
    """
    Streaming find-and-replace over a fixed set of byte tokens.

    One renderer per response: it holds the unfinished tail of the
    previous chunk.

    Usage:
        renderer = TemplateRenderer.for_response(now, "My Server")
        for chunk in chunks:
            out.write(renderer.feed(chunk))
        out.write(renderer.finish())
    """

    def __init__(self, replacements: Mapping[bytes, bytes]):
        if not replacements or any(not token for token in replacements):
            raise ValueError("replacements must map non-empty tokens")

        self._replacements = dict(replacements)
        # Longest first so a token that is a prefix of another never wins
        tokens = sorted(self._replacements, key=len, reverse=True)
        self._pattern = re.compile(b"|".join(re.escape(t) for t in tokens))
        self._prefixes = {
            token[:size]
            for token in tokens
            for size in range(1, len(token))
        }
        self._max_hold = max(len(t) for t in tokens) - 1
        self._pending = b""

    @classmethod
    def for_response(cls, now: datetime, server_name: str) -> "TemplateRenderer":
        return cls({
            DATE_TAG: format_server_date(now).encode("utf-8"),
            SERVER_TAG: server_name.encode("utf-8"),
        })

    def feed(self, chunk: bytes) -> bytes:
        """Substitute tags in `chunk`; may hold back a partial tag."""
        data = self._pending + chunk

        out = []
        position = 0
        for match in self._pattern.finditer(data):
            out.append(data[position:match.start()])
            out.append(self._replacements[match.group()])
            position = match.end()

        rest = data[position:]
        hold = self._partial_tag_length(rest)
        out.append(rest[:len(rest) - hold])
        self._pending = rest[len(rest) - hold:]

        return b"".join(out)

    def finish(self) -> bytes:
        """Release any held-back bytes. They can no longer form a tag."""
        pending, self._pending = self._pending, b""
        return pending

    def render(self, data: bytes) -> bytes:
        """Substitute tags in a complete, in-memory document."""
        return self.feed(data) + self.finish()

    def _partial_tag_length(self, data: bytes) -> int:
        # Longest suffix of `data` that is a proper prefix of some tag
        for size in range(min(self._max_hold, len(data)), 0, -1):
            if data[-size:] in self._prefixes:
                return size
        return 0
