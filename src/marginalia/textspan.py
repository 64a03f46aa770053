"""Primitive text operations shared by the markup and highlight engines.

Line and paragraph splitting that always round-trips, plus bounds-checked
substring extraction by character index.
"""

from __future__ import annotations

PARAGRAPH_SEPARATOR = "\n\n"


class InvalidSpanError(ValueError):
    """A character range does not fit inside the text it indexes."""

    def __init__(self, start: int, end: int, length: int) -> None:
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"Invalid span [{start}, {end}) for text of length {length}"
        )


def normalise_newlines(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> list[str]:
    """Split *text* into lines on ``\\n``.

    Unlike ``str.splitlines`` a trailing newline yields a trailing empty
    line, so ``"\\n".join(split_lines(t)) == normalise_newlines(t)``.
    """
    return normalise_newlines(text).split("\n")


def split_paragraphs(text: str) -> list[str]:
    """Split *text* on the paragraph separator (a blank line)."""
    return text.split(PARAGRAPH_SEPARATOR)


def join_paragraphs(parts: list[str]) -> str:
    """Inverse of ``split_paragraphs``."""
    return PARAGRAPH_SEPARATOR.join(parts)


def check_bounds(length: int, start: int, end: int) -> None:
    """Raise ``InvalidSpanError`` unless ``0 <= start <= end <= length``."""
    if start < 0 or end > length or start > end:
        raise InvalidSpanError(start, end, length)


def extract(text: str, start: int, end: int) -> str:
    """Return ``text[start:end]`` after checking the bounds."""
    check_bounds(len(text), start, end)
    return text[start:end]
