"""Data models for note blocks and source highlights."""

from marginalia.models.blocks import TAGGED_TYPES, ContentBlock, ContentBlockType
from marginalia.models.highlight import BucketStyle, Chunk, ScoreBucket, ScoredSpan

__all__ = [
    "TAGGED_TYPES",
    "BucketStyle",
    "Chunk",
    "ContentBlock",
    "ContentBlockType",
    "ScoreBucket",
    "ScoredSpan",
]
