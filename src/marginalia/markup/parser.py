"""Parse a tagged note buffer into an ordered list of content blocks.

The grammar has no nesting, so the parser is a single linear scan with one
open-block slot rather than a recursive-descent parser:

    state = None | open(type, lines)

Malformed markup never raises. An unclosed block is closed implicitly by
the next open tag, image reference or end of input; a close tag that does
not match the open block is kept as an ordinary line.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from marginalia.markup.grammar import (
    CLOSE_TAG_TYPES,
    IMAGE_REF_PATTERN,
    METADATA_KEYS,
    METADATA_SEPARATOR,
    OPEN_TAG_TYPES,
)
from marginalia.models import ContentBlock, ContentBlockType
from marginalia.textspan import split_lines

logger = logging.getLogger(__name__)


@dataclass
class _ScanState:
    """Mutable state threaded through the line scan."""

    blocks: list[ContentBlock] = field(default_factory=list)
    open_type: ContentBlockType | None = None
    open_lines: list[str] = field(default_factory=list)
    untagged: list[str] | None = None

    def flush_open(self) -> None:
        if self.open_type is None:
            return
        metadata, body = strip_metadata(self.open_type, self.open_lines)
        self.blocks.append(
            ContentBlock(type=self.open_type, body=body, metadata=metadata)
        )
        self.open_type = None
        self.open_lines = []

    def flush_untagged(self) -> None:
        if self.untagged is None:
            return
        # Blank-only runs are the separators the formatter writes around
        # each block; they are not content.
        if any(line.strip() for line in self.untagged):
            self.blocks.append(
                ContentBlock(type=ContentBlockType.DEFAULT, body=self.untagged)
            )
        self.untagged = None

    def flush(self) -> None:
        self.flush_open()
        self.flush_untagged()


def strip_metadata(
    block_type: ContentBlockType,
    lines: list[str],
) -> tuple[dict[str, str], list[str]]:
    """Split leading ``KEY: value`` header lines off a block body.

    Expected keys are consulted positionally: line *i* is consumed only if
    it carries the *i*-th expected key for *block_type*. The first line that
    does not match ends the header, and it and everything after it stay in
    the body.

    Returns:
        (metadata, body) where metadata maps key to stripped value.
    """
    metadata: dict[str, str] = {}
    consumed = 0
    for key in METADATA_KEYS.get(block_type, ()):
        if consumed >= len(lines):
            break
        prefix = key + METADATA_SEPARATOR
        line = lines[consumed]
        if not line.startswith(prefix):
            break
        metadata[key] = line[len(prefix) :].strip()
        consumed += 1
    return metadata, lines[consumed:]


def _handle_line(line: str, state: _ScanState) -> None:
    opened = OPEN_TAG_TYPES.get(line)
    if opened is not None:
        state.flush()
        state.open_type = opened
        return

    if state.open_type is not None and CLOSE_TAG_TYPES.get(line) is state.open_type:
        state.flush_open()
        return

    image = IMAGE_REF_PATTERN.fullmatch(line.strip())
    if image is not None:
        state.flush()
        state.blocks.append(
            ContentBlock(
                type=ContentBlockType.IMAGE,
                image_id=image.group(1),
                filename=image.group(2),
            )
        )
        return

    if state.open_type is not None:
        state.open_lines.append(line)
    elif state.untagged is None:
        state.untagged = [line]
    else:
        state.untagged.append(line)


def parse_blocks(buffer: str) -> list[ContentBlock]:
    """Parse a note buffer into content blocks, in buffer order.

    Never raises; malformed markup degrades to differently-shaped blocks.

    Args:
        buffer: The whole note buffer.

    Returns:
        Freshly built blocks. Parsing the same buffer twice gives equal
        lists.
    """
    if not buffer:
        return []

    state = _ScanState()
    for line in split_lines(buffer):
        _handle_line(line, state)
    state.flush()

    if logger.isEnabledFor(logging.DEBUG):
        counts = Counter(block.type.value for block in state.blocks)
        logger.debug("Parsed %d note blocks: %s", len(state.blocks), dict(counts))

    return state.blocks
