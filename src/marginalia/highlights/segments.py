"""Prepare relevance-scored segments before they reach ``build_chunks``.

The relevance scorer (an LLM, outside this package) returns JSON of the
form::

    {"segments": [{"text": "...", "startIndex": 12, "endIndex": 40,
                   "score": 0.85, "explanation": "..."}]}

Its offsets are not trustworthy, so callers decode, select, realign and
then either validate (reject) or clip (repair) the spans.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from marginalia.models import ScoredSpan
from marginalia.textspan import check_bounds

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_CODE_FENCE_JSON = re.compile(r"^```json\s*|\s*```$")
_CODE_FENCE = re.compile(r"^```\s*|\s*```$")


class OverlappingSpansError(ValueError):
    """Two spans cover some of the same characters."""

    def __init__(self, first: ScoredSpan, second: ScoredSpan) -> None:
        self.first = first
        self.second = second
        super().__init__(
            f"Span [{second.start}, {second.end}) overlaps "
            f"span [{first.start}, {first.end})"
        )


def _clamp_score(score: float) -> float:
    return max(0.0, min(1.0, score))


def validate_spans(text: str, spans: Sequence[ScoredSpan]) -> None:
    """Reject spans that are out of bounds or overlap each other.

    Raises:
        InvalidSpanError: If a span does not fit inside *text*.
        OverlappingSpansError: If two spans overlap once sorted by start.
    """
    length = len(text)
    for span in spans:
        check_bounds(length, span.start, span.end)

    ordered = sorted(spans, key=lambda s: s.start)
    for previous, current in zip(ordered, ordered[1:], strict=False):
        if current.start < previous.end:
            raise OverlappingSpansError(previous, current)


def clip_spans(text: str, spans: Sequence[ScoredSpan]) -> list[ScoredSpan]:
    """Repair spans so that ``validate_spans`` accepts them.

    Bounds are clamped into the text, and each span is trimmed to start no
    earlier than where the previous one (by start offset) ends. Spans left
    empty or reversed are dropped.

    Returns:
        Clipped spans sorted by start.
    """
    length = len(text)
    clipped: list[ScoredSpan] = []
    cursor = 0
    for span in sorted(spans, key=lambda s: s.start):
        start = max(span.start, cursor, 0)
        end = min(span.end, length)
        if start >= end:
            logger.debug("Dropping span [%d, %d) after clipping", span.start, span.end)
            continue
        if (start, end) == (span.start, span.end):
            clipped.append(span)
        else:
            clipped.append(replace(span, start=start, end=end, text=text[start:end]))
        cursor = end
    return clipped


def realign_span(content: str, span: ScoredSpan) -> ScoredSpan:
    """Move *span* onto its claimed text when the offsets are wrong.

    If ``span.text`` is set and ``content[start:end]`` differs from it, the
    span is moved to the first occurrence of ``span.text``. Spans whose
    text is not found are returned unchanged.
    """
    if not span.text:
        return span
    if 0 <= span.start <= span.end <= len(content) and (
        content[span.start : span.end] == span.text
    ):
        return span
    found = content.find(span.text)
    if found == -1:
        return span
    logger.debug(
        "Realigned span [%d, %d) to [%d, %d)",
        span.start,
        span.end,
        found,
        found + len(span.text),
    )
    return replace(span, start=found, end=found + len(span.text))


def select_segments(
    content: str,
    spans: Sequence[ScoredSpan],
    limit: int | None = None,
) -> list[ScoredSpan]:
    """Keep the highest-scoring spans whose text occurs in *content*.

    Args:
        content: The source document.
        spans: Decoded scorer output.
        limit: Maximum spans to keep. Defaults to
            ``Settings.highlight.max_segments``.

    Returns:
        Spans ordered by score, highest first.
    """
    if limit is None:
        from marginalia.config import get_settings

        limit = get_settings().highlight.max_segments

    ranked = sorted(spans, key=lambda s: s.score, reverse=True)[:limit]
    kept = [s for s in ranked if not s.text or s.text in content]
    logger.info("Found %d valid segments out of %d total", len(kept), len(ranked))
    return kept


def _coerce_segment(raw: dict[str, Any]) -> ScoredSpan:
    try:
        start = int(raw["startIndex"])
        end = int(raw["endIndex"])
        score = float(raw.get("score", 0.0))
    except KeyError as e:
        raise ValueError(f"Segment missing required field: {e.args[0]}") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Segment has a non-numeric field: {e}") from e
    if math.isnan(score):
        raise ValueError("Segment score must be a number, got NaN")
    return ScoredSpan(
        start=start,
        end=end,
        score=_clamp_score(score),
        text=str(raw.get("text", "")),
        explanation=str(raw.get("explanation", "")),
    )


def parse_segments_payload(raw: str) -> list[ScoredSpan]:
    """Decode the relevance scorer's JSON into spans.

    Markdown code fences around the JSON are removed first. Scores are
    clamped into [0, 1]. A bare JSON list of segments is accepted as well
    as the ``{"segments": [...]}`` object.

    Raises:
        ValueError: If the JSON is invalid or a segment lacks offsets.
    """
    cleaned = _CODE_FENCE.sub("", _CODE_FENCE_JSON.sub("", raw.strip())).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in segments payload: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("segments", [])
    if not isinstance(payload, list):
        raise ValueError("Segments payload must be a list of segments")

    segments = []
    for entry in payload:
        if not isinstance(entry, dict):
            raise ValueError("Each segment must be a JSON object")
        segments.append(_coerce_segment(entry))
    return segments
