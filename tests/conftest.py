"""Shared pytest fixtures for marginalia tests."""

from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from marginalia.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate every test from the developer's environment and cached settings."""
    for key in list(os.environ):
        if key.startswith(("NOTES__", "HIGHLIGHT__", "APP__")):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed timestamp so formatted blocks are deterministic."""
    return datetime(2024, 3, 4, 21, 15)
