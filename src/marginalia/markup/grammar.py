"""Tag grammar for the note block markup.

These strings are stored verbatim in saved note buffers, so they must not
change. Shared between:
- markup/formatter.py (writes tags)
- markup/parser.py (recognises tags)
"""

from __future__ import annotations

import re

from marginalia.models import ContentBlockType

OPEN_TAGS: dict[ContentBlockType, str] = {
    ContentBlockType.SOURCE: "<source-content>",
    ContentBlockType.AI: "<ai-content>",
    ContentBlockType.USER: "<user-note>",
}

CLOSE_TAGS: dict[ContentBlockType, str] = {
    ContentBlockType.SOURCE: "</source-content>",
    ContentBlockType.AI: "</ai-content>",
    ContentBlockType.USER: "</user-note>",
}

# Expected header keys per type, in the order the formatter writes them.
# The last key of each type is written bare ("QUOTE:"); the body follows.
METADATA_KEYS: dict[ContentBlockType, tuple[str, ...]] = {
    ContentBlockType.SOURCE: ("TITLE", "DATE", "QUOTE"),
    ContentBlockType.AI: ("MODEL", "DATE", "CONTENT"),
    ContentBlockType.USER: ("DATE", "NOTE"),
}

OPEN_TAG_TYPES: dict[str, ContentBlockType] = {
    tag: block_type for block_type, tag in OPEN_TAGS.items()
}
CLOSE_TAG_TYPES: dict[str, ContentBlockType] = {
    tag: block_type for block_type, tag in CLOSE_TAGS.items()
}

IMAGE_REF_TEMPLATE = '<img-ref id="{id}" filename="{filename}">'
# filename is optional and a trailing "/" is tolerated for older buffers
IMAGE_REF_PATTERN = re.compile(
    r'<img-ref\s+id="([^"]+)"(?:\s+filename="([^"]*)")?\s*/?>'
)

METADATA_SEPARATOR = ":"
