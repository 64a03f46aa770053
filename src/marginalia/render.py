"""Display structures built from parsed blocks and highlight chunks.

This is the seam between the engines and whatever draws them. It does no
layout; it only reshapes engine output into records a view can iterate,
plus a plain HTML rendering of a highlighted document.
"""

from __future__ import annotations

import html
from bisect import bisect_right
from dataclasses import dataclass
from typing import TYPE_CHECKING

from marginalia.highlights.buckets import classify_score
from marginalia.highlights.chunks import build_chunks, reconstruct
from marginalia.models import ContentBlockType
from marginalia.textspan import PARAGRAPH_SEPARATOR, split_paragraphs

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from marginalia.models import Chunk, ContentBlock, ScoredSpan

# Metadata key shown as a block's heading, per type
_HEADING_KEYS: dict[ContentBlockType, str] = {
    ContentBlockType.SOURCE: "TITLE",
    ContentBlockType.AI: "MODEL",
}


@dataclass
class BlockView:
    """A note block reduced to what a view shows.

    Attributes:
        kind: Block type.
        heading: Source title or model name, empty when absent.
        date: Recorded timestamp, empty when absent.
        text: Body text.
        image_id: Image to display (image blocks only).
    """

    kind: ContentBlockType
    heading: str = ""
    date: str = ""
    text: str = ""
    image_id: str | None = None


@dataclass(frozen=True)
class ChunkPiece:
    """The part of a chunk that falls inside one paragraph."""

    text: str
    highlighted: bool
    score: float
    ordinal: int


def block_views(blocks: Iterable[ContentBlock]) -> list[BlockView]:
    """Map parsed blocks to display records, preserving order."""
    views = []
    for block in blocks:
        heading_key = _HEADING_KEYS.get(block.type)
        views.append(
            BlockView(
                kind=block.type,
                heading=block.metadata.get(heading_key, "") if heading_key else "",
                date=block.metadata.get("DATE", ""),
                text=block.text,
                image_id=block.image_id,
            )
        )
    return views


def _paragraph_ranges(text: str) -> list[tuple[int, int]]:
    """Offsets ``[start, end)`` of each paragraph of *text*."""
    ranges = []
    position = 0
    for part in split_paragraphs(text):
        ranges.append((position, position + len(part)))
        position += len(part) + len(PARAGRAPH_SEPARATOR)
    return ranges


def chunk_paragraphs(chunks: Iterable[Chunk]) -> list[list[ChunkPiece]]:
    """Split chunks into paragraphs, keeping each piece's highlight state.

    Paragraph breaks are found in the concatenated text, not per chunk, so a
    separator split across two chunks still ends a paragraph. A chunk that
    spans a break contributes pieces to several paragraphs. Joining each
    paragraph's piece texts, then joining the paragraphs with the separator,
    gives back the chunked text.
    """
    chunks = list(chunks)
    text = reconstruct(chunks)
    ranges = _paragraph_ranges(text)
    ends = [end for _, end in ranges]

    paragraphs: list[list[ChunkPiece]] = [[] for _ in ranges]
    offset = 0
    for chunk in chunks:
        chunk_start, chunk_end = offset, offset + len(chunk.text)
        offset = chunk_end
        # first paragraph that ends after the chunk starts
        index = bisect_right(ends, chunk_start)
        while index < len(ranges) and ranges[index][0] < chunk_end:
            lo = max(chunk_start, ranges[index][0])
            hi = min(chunk_end, ranges[index][1])
            if lo < hi:
                paragraphs[index].append(
                    ChunkPiece(
                        text=text[lo:hi],
                        highlighted=chunk.highlighted,
                        score=chunk.score,
                        ordinal=chunk.ordinal,
                    )
                )
            index += 1
    return paragraphs


def _mark_open(piece: ChunkPiece, dark_mode: bool, explanation: str) -> str:
    style = classify_score(piece.score, dark_mode)
    title = f"Relevance: {round(piece.score * 100)}%"
    if explanation:
        title += f"\nExplanation: {explanation}"
    return (
        f'<mark class="score-highlight {style.css_class}" '
        f'data-ordinal="{piece.ordinal}" '
        f'data-score="{piece.score:.2f}" '
        f'data-bucket="{int(style.level)}" '
        f'style="background-color: {style.colour}; cursor: help;" '
        f'title="{html.escape(title, quote=True)}">'
    )


def render_highlight_html(
    text: str,
    spans: Sequence[ScoredSpan],
    *,
    dark_mode: bool | None = None,
    enabled: bool | None = None,
) -> str:
    """Render *text* as HTML paragraphs with ``<mark>`` highlights.

    Args:
        text: The source document.
        spans: Scored spans, validated or clipped by the caller.
        dark_mode: Palette choice. Defaults to ``Settings.highlight.dark_mode``.
        enabled: Highlighting switch. Defaults to
            ``Settings.highlight.enabled``.

    Returns:
        One ``<p>`` element per paragraph, text HTML-escaped.

    Raises:
        InvalidSpanError: If a span does not fit inside *text*.
    """
    if dark_mode is None or enabled is None:
        from marginalia.config import get_settings

        settings = get_settings().highlight
        dark_mode = settings.dark_mode if dark_mode is None else dark_mode
        enabled = settings.enabled if enabled is None else enabled

    explanations = [s.explanation for s in sorted(spans, key=lambda s: s.start)]
    chunks = build_chunks(text, spans, enabled=enabled)

    out = []
    for paragraph in chunk_paragraphs(chunks):
        parts = []
        for piece in paragraph:
            escaped = html.escape(piece.text)
            if piece.highlighted:
                mark = _mark_open(piece, dark_mode, explanations[piece.ordinal])
                parts.append(f"{mark}{escaped}</mark>")
            else:
                parts.append(escaped)
        out.append(f"<p>{''.join(parts)}</p>")
    return "\n".join(out)
