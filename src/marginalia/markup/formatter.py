"""Serialise structured note content into tagged buffer text.

The strings returned here are spliced into a note buffer by the editor
surface; nothing in this module touches the buffer itself.
"""

from __future__ import annotations

from datetime import datetime

from marginalia.markup.grammar import (
    CLOSE_TAGS,
    IMAGE_REF_PATTERN,
    IMAGE_REF_TEMPLATE,
    METADATA_KEYS,
    OPEN_TAG_TYPES,
    OPEN_TAGS,
)
from marginalia.models import TAGGED_TYPES, ContentBlockType
from marginalia.textspan import split_lines

# Placeholder (body, label) pairs inserted by "new block" actions
TEMPLATES: dict[ContentBlockType, tuple[str, str]] = {
    ContentBlockType.SOURCE: ("Enter quoted source text here...", "Source Title"),
    ContentBlockType.AI: ("Enter AI-generated content here...", "AI Model"),
    ContentBlockType.USER: ("Enter your notes here...", ""),
}


def _timestamp(now: datetime | None, timestamp_format: str | None) -> str:
    if timestamp_format is None:
        from marginalia.config import get_settings

        timestamp_format = get_settings().notes.timestamp_format
    return (now or datetime.now()).strftime(timestamp_format)


def _single_line(value: str) -> str:
    """Collapse line breaks so *value* fits on one metadata line."""
    return " ".join(split_lines(value)).strip()


def format_block(
    body: str,
    label: str,
    block_type: ContentBlockType,
    *,
    now: datetime | None = None,
    timestamp_format: str | None = None,
) -> str:
    """Build the buffer text for a new block.

    Tagged types produce an open tag, the type's metadata header, the body
    and the close tag, surrounded by blank lines::

        <source-content>
        TITLE: {label}
        DATE: {timestamp}
        QUOTE:
        {body}
        </source-content>

    ``DEFAULT`` produces an untagged heading (``label`` upper-cased), the
    timestamp, a blank line and the body. That form is for plain legacy
    content and does not parse back into a typed block.

    The body is inserted verbatim: a body line equal to the block's close
    tag, to any open tag or to an image reference ends the block early when
    the buffer is parsed. Use ``body_has_delimiter`` to check for that.

    Args:
        body: Block content, may span several lines.
        label: Source title (SOURCE), model name (AI) or heading (DEFAULT).
            Ignored for USER blocks.
        block_type: Provenance of the content.
        now: Timestamp to record. Defaults to the current local time.
        timestamp_format: ``strftime`` format. Defaults to
            ``Settings.notes.timestamp_format``.

    Returns:
        Text ready to splice into a note buffer.

    Raises:
        ValueError: If *block_type* is IMAGE; use ``format_image_ref``.
    """
    if block_type is ContentBlockType.IMAGE:
        raise ValueError("Image blocks are written with format_image_ref()")

    timestamp = _timestamp(now, timestamp_format)
    label = _single_line(label)

    if block_type is ContentBlockType.DEFAULT:
        return f"\n\n{label.upper()}\n{timestamp}\n\n{body}\n"

    values = {"TITLE": label, "MODEL": label, "DATE": timestamp}
    header = [
        f"{key}: {values[key]}" if key in values else f"{key}:"
        for key in METADATA_KEYS[block_type]
    ]
    lines = [OPEN_TAGS[block_type], *header, body, CLOSE_TAGS[block_type]]
    return "\n\n" + "\n".join(lines) + "\n"


def format_image_ref(image_id: str, filename: str) -> str:
    """Build the self-closing reference line for an embedded image.

    Raises:
        ValueError: If either value contains a double quote or line break,
            which the single-line reference grammar cannot carry.
    """
    for name, value in (("image_id", image_id), ("filename", filename)):
        if '"' in value or "\n" in value or "\r" in value:
            raise ValueError(f"{name} must not contain quotes or line breaks")
    if not image_id:
        raise ValueError("image_id must not be empty")
    return "\n" + IMAGE_REF_TEMPLATE.format(id=image_id, filename=filename) + "\n"


def template_for(
    block_type: ContentBlockType,
    *,
    now: datetime | None = None,
    timestamp_format: str | None = None,
) -> str:
    """Return a placeholder block of *block_type* for the user to fill in."""
    if block_type not in TEMPLATES:
        raise ValueError(f"No template for {block_type} blocks")
    body, label = TEMPLATES[block_type]
    return format_block(
        body, label, block_type, now=now, timestamp_format=timestamp_format
    )


def body_has_delimiter(body: str, block_type: ContentBlockType) -> bool:
    """Whether *body* contains a line that would end a *block_type* block early.

    The parser ends an open block at its own close tag, at any open tag and
    at an image reference line. Untagged types are never checked.
    """
    if block_type not in TAGGED_TYPES:
        return False
    close_tag = CLOSE_TAGS[block_type]
    return any(
        line == close_tag
        or line in OPEN_TAG_TYPES
        or IMAGE_REF_PATTERN.fullmatch(line.strip()) is not None
        for line in split_lines(body)
    )
