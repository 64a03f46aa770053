"""Map relevance scores to one of five visual intensity buckets."""

from __future__ import annotations

import math

from marginalia.models import BucketStyle, ScoreBucket

# Upper (exclusive) bound of every bucket but the last
_THRESHOLDS: tuple[tuple[float, ScoreBucket], ...] = (
    (0.2, ScoreBucket.VERY_LOW),
    (0.4, ScoreBucket.LOW),
    (0.6, ScoreBucket.MEDIUM),
    (0.8, ScoreBucket.HIGH),
)

# (hex colour, css classes); blue -> emerald -> yellow -> orange -> red
LIGHT_PALETTE: dict[ScoreBucket, tuple[str, str]] = {
    ScoreBucket.VERY_LOW: ("#dbeafe", "bg-blue-100 hover:bg-blue-200"),
    ScoreBucket.LOW: ("#d1fae5", "bg-emerald-100 hover:bg-emerald-200"),
    ScoreBucket.MEDIUM: ("#fef9c3", "bg-yellow-100 hover:bg-yellow-200"),
    ScoreBucket.HIGH: ("#ffedd5", "bg-orange-100 hover:bg-orange-200"),
    ScoreBucket.VERY_HIGH: ("#fee2e2", "bg-red-100 hover:bg-red-200"),
}

DARK_PALETTE: dict[ScoreBucket, tuple[str, str]] = {
    ScoreBucket.VERY_LOW: ("#1e40af", "bg-blue-800/60 hover:bg-blue-700/70"),
    ScoreBucket.LOW: ("#065f46", "bg-emerald-800/60 hover:bg-emerald-700/70"),
    ScoreBucket.MEDIUM: ("#854d0e", "bg-yellow-800/60 hover:bg-yellow-700/70"),
    ScoreBucket.HIGH: ("#9a3412", "bg-orange-800/60 hover:bg-orange-700/70"),
    ScoreBucket.VERY_HIGH: ("#991b1b", "bg-red-800/60 hover:bg-red-700/70"),
}


def score_bucket(score: float) -> ScoreBucket:
    """Return the bucket for *score*.

    Scores below 0 fall in the lowest bucket and scores of 0.8 or more
    (including anything above 1) in the highest.

    Raises:
        ValueError: If *score* is NaN.
    """
    if math.isnan(score):
        raise ValueError("Score must be a number, got NaN")
    for upper, bucket in _THRESHOLDS:
        if score < upper:
            return bucket
    return ScoreBucket.VERY_HIGH


def classify_score(score: float, dark_mode: bool = False) -> BucketStyle:
    """Return the bucket for *score* with its palette entry.

    ``dark_mode`` picks the palette only; bucket boundaries are the same in
    both modes.
    """
    level = score_bucket(score)
    palette = DARK_PALETTE if dark_mode else LIGHT_PALETTE
    colour, css_class = palette[level]
    return BucketStyle(level=level, colour=colour, css_class=css_class)
