"""Editor surface: the owner of a note buffer.

Other components that want to add content to a note (a selection tooltip,
an analysis panel) are handed a ``NoteInserter`` rather than reaching for a
process-wide callback.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from marginalia.markup.formatter import format_block, format_image_ref, template_for
from marginalia.markup.parser import parse_blocks

if TYPE_CHECKING:
    from marginalia.models import ContentBlock, ContentBlockType

logger = logging.getLogger(__name__)


class NoteInserter(Protocol):
    """Capability to splice text into a note buffer."""

    def insert(self, text: str, at_cursor: bool = True) -> int:
        """Insert *text* and return the buffer offset it was inserted at.

        Args:
            text: Text to splice in, usually from the formatter.
            at_cursor: Insert at the editor cursor; append when False.
        """
        ...


class NoteEditor:
    """A note buffer with a cursor, edited one change at a time.

    Persistence is the caller's concern: ``dirty`` reports unsaved edits and
    ``mark_saved`` clears it.
    """

    def __init__(self, buffer: str = "", cursor: int | None = None) -> None:
        self._lock = threading.Lock()
        self._buffer = buffer
        self._cursor = len(buffer) if cursor is None else self._clamp(cursor)
        self.last_insert_position: int | None = None
        self.dirty = False

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def cursor(self) -> int:
        return self._cursor

    def _clamp(self, position: int) -> int:
        return max(0, min(position, len(self._buffer)))

    def move_cursor(self, position: int) -> int:
        """Place the cursor, clamped into the buffer. Returns the new cursor."""
        with self._lock:
            self._cursor = self._clamp(position)
            return self._cursor

    def insert(self, text: str, at_cursor: bool = True) -> int:
        with self._lock:
            position = self._cursor if at_cursor else len(self._buffer)
            self._buffer = self._buffer[:position] + text + self._buffer[position:]
            self._cursor = position + len(text)
            self.last_insert_position = position
            self.dirty = True
        logger.debug("Inserted %d chars at offset %d", len(text), position)
        return position

    def append_block(
        self, body: str, label: str, block_type: ContentBlockType
    ) -> int:
        """Format a block and append it to the end of the buffer."""
        return self.insert(format_block(body, label, block_type), at_cursor=False)

    def insert_image_ref(self, image_id: str, filename: str) -> int:
        """Insert an image reference line at the cursor."""
        return self.insert(format_image_ref(image_id, filename))

    def insert_template(self, block_type: ContentBlockType) -> int:
        """Insert a placeholder block of *block_type* at the cursor."""
        return self.insert(template_for(block_type))

    def blocks(self) -> list[ContentBlock]:
        """Parse the current buffer."""
        return parse_blocks(self._buffer)

    def mark_saved(self) -> None:
        self.dirty = False
