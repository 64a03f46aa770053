"""Highlight segment engine: scored spans to renderable chunks."""

from marginalia.highlights.buckets import classify_score, score_bucket
from marginalia.highlights.chunks import build_chunks, reconstruct
from marginalia.highlights.segments import (
    OverlappingSpansError,
    clip_spans,
    parse_segments_payload,
    realign_span,
    select_segments,
    validate_spans,
)
from marginalia.textspan import InvalidSpanError

__all__ = [
    "InvalidSpanError",
    "OverlappingSpansError",
    "build_chunks",
    "classify_score",
    "clip_spans",
    "parse_segments_payload",
    "realign_span",
    "reconstruct",
    "score_bucket",
    "select_segments",
    "validate_spans",
]
