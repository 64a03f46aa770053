"""Partition a source document into highlighted and plain chunks.

Architecture:
    Spans are sorted by start offset and walked once with a cursor. Each gap
    before a span becomes a plain chunk, each span a highlighted chunk, and
    whatever follows the last span a final plain chunk. Concatenating the
    chunk texts in order gives back the document.

Overlapping spans are a caller precondition violation: they are neither
merged nor clipped here (see ``marginalia.highlights.segments.clip_spans``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from marginalia.models import Chunk
from marginalia.textspan import check_bounds

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from marginalia.models import ScoredSpan

logger = logging.getLogger(__name__)


def build_chunks(
    text: str,
    spans: Sequence[ScoredSpan],
    *,
    enabled: bool = True,
) -> list[Chunk]:
    """Build the ordered, gapless chunk list for *text*.

    Args:
        text: The immutable source document.
        spans: Scored ranges, in any order. Must be in bounds and should not
            overlap.
        enabled: When False, highlighting is off and the whole text is one
            plain chunk.

    Returns:
        Chunks whose texts concatenate to *text*. Highlighted chunks carry
        their span's score and its index in start-sorted order.

    Raises:
        InvalidSpanError: If any span has ``start < 0``, ``end > len(text)``
            or ``start > end``.
    """
    if not spans or not enabled:
        return [Chunk(text=text, start=0, end=len(text))]

    length = len(text)
    for span in spans:
        check_bounds(length, span.start, span.end)

    ordered = sorted(spans, key=lambda s: s.start)

    chunks: list[Chunk] = []
    cursor = 0
    for ordinal, span in enumerate(ordered):
        if span.start < cursor:
            logger.warning(
                "Span %d [%d, %d) overlaps previous span ending at %d; "
                "chunk output will not reconstruct the text",
                ordinal,
                span.start,
                span.end,
                cursor,
            )
        if span.start > cursor:
            chunks.append(
                Chunk(text=text[cursor : span.start], start=cursor, end=span.start)
            )
        chunks.append(
            Chunk(
                text=text[span.start : span.end],
                highlighted=True,
                score=span.score,
                ordinal=ordinal,
                start=span.start,
                end=span.end,
            )
        )
        cursor = span.end

    if cursor < length:
        chunks.append(Chunk(text=text[cursor:], start=cursor, end=length))

    logger.debug(
        "Built %d chunks from %d spans over %d chars", len(chunks), len(spans), length
    )
    return chunks


def reconstruct(chunks: Iterable[Chunk]) -> str:
    """Concatenate chunk texts in order."""
    return "".join(chunk.text for chunk in chunks)
