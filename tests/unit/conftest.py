"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from marginalia.models import ScoredSpan

# A short primary source with two paragraphs
SAMPLE_SOURCE = (
    "We the People of the United States, in Order to form a more perfect "
    "Union, establish Justice, insure domestic Tranquility.\n\n"
    "Congress shall make no law respecting an establishment of religion."
)


@pytest.fixture
def source_text() -> str:
    return SAMPLE_SOURCE


@pytest.fixture
def source_spans() -> list[ScoredSpan]:
    """Non-overlapping, in-bounds spans over SAMPLE_SOURCE, deliberately unsorted."""
    religion_start = SAMPLE_SOURCE.index("establishment of religion")
    union_start = SAMPLE_SOURCE.index("more perfect Union")
    return [
        ScoredSpan(
            start=religion_start,
            end=religion_start + len("establishment of religion"),
            score=0.91,
            text="establishment of religion",
            explanation="Names the establishment clause.",
        ),
        ScoredSpan(
            start=0,
            end=len("We the People"),
            score=0.15,
            text="We the People",
        ),
        ScoredSpan(
            start=union_start,
            end=union_start + len("more perfect Union"),
            score=0.55,
            text="more perfect Union",
        ),
    ]
