"""Data models for scored highlight spans and the chunks built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


@dataclass(frozen=True)
class ScoredSpan:
    """A relevance-scored character range over a source document.

    Attributes:
        start: Start character index (inclusive).
        end: End character index (exclusive).
        score: Relevance score in [0, 1].
        text: The text the scorer claims lives at ``[start, end)``.
        explanation: Scorer's one-line reason for the score.
    """

    start: int
    end: int
    score: float
    text: str = ""
    explanation: str = ""


@dataclass(frozen=True)
class Chunk:
    """One contiguous run of a partitioned document.

    Attributes:
        text: The run's text.
        highlighted: Whether the run is covered by a span.
        score: The span's score, 0.0 when not highlighted.
        ordinal: Index of the span in start-sorted order, -1 when not
            highlighted.
        start: Offset of the run in the base text.
        end: End offset of the run in the base text.
    """

    text: str
    highlighted: bool = False
    score: float = 0.0
    ordinal: int = -1
    start: int = 0
    end: int = 0


class ScoreBucket(IntEnum):
    """Five fixed score ranges, lowest first."""

    VERY_LOW = 0  # [0.0, 0.2)
    LOW = 1  # [0.2, 0.4)
    MEDIUM = 2  # [0.4, 0.6)
    HIGH = 3  # [0.6, 0.8)
    VERY_HIGH = 4  # [0.8, 1.0]


@dataclass(frozen=True, order=True)
class BucketStyle:
    """A bucket together with the palette entry chosen for it.

    Ordering and equality look at ``level`` only, so styles from the light
    and dark palettes compare by bucket.
    """

    level: ScoreBucket
    colour: str = field(compare=False)
    css_class: str = field(compare=False)
