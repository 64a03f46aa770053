"""Data models for provenance-tagged note blocks.

Plain dataclasses recomputed on every parse; the note buffer string is the
only authoritative copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ContentBlockType(StrEnum):
    """Provenance of a run of note content."""

    SOURCE = "source"  # quoted primary-source material
    AI = "ai"  # model-generated commentary
    USER = "user"  # the researcher's own note
    IMAGE = "image"  # embedded image reference
    DEFAULT = "default"  # untagged lines


# Types delimited by an open/close tag pair in the buffer
TAGGED_TYPES: frozenset[ContentBlockType] = frozenset(
    (ContentBlockType.SOURCE, ContentBlockType.AI, ContentBlockType.USER)
)


@dataclass
class ContentBlock:
    """One block of a parsed note buffer.

    Attributes:
        type: Provenance of the block.
        metadata: Recognised ``KEY: value`` header lines, in buffer order.
            Only populated for SOURCE, AI and USER blocks.
        body: Content lines with the metadata lines removed.
        image_id: Referenced image id (IMAGE blocks only).
        filename: Referenced image filename (IMAGE blocks only).
    """

    type: ContentBlockType
    body: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    image_id: str | None = None
    filename: str | None = None

    @property
    def text(self) -> str:
        """Body lines joined with newlines."""
        return "\n".join(self.body)
