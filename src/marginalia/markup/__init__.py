"""Block markup engine for provenance-tagged note buffers."""

from marginalia.markup.editor import NoteEditor, NoteInserter
from marginalia.markup.formatter import (
    body_has_delimiter,
    format_block,
    format_image_ref,
    template_for,
)
from marginalia.markup.parser import parse_blocks, strip_metadata

__all__ = [
    "NoteEditor",
    "NoteInserter",
    "body_has_delimiter",
    "format_block",
    "format_image_ref",
    "parse_blocks",
    "strip_metadata",
    "template_for",
]
