"""Helpers that turn a request path into a Collection/Identifier pattern."""
from __future__ import annotations

import re
from typing import Callable, Sequence

CALLBACK_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*)*")


class UnsupportedPatternError(Exception):
    """Raised when a method/pattern combination has no store operation."""

    def __init__(self, method: str, pattern: str):
        super().__init__(f"{method} not supported for pattern '{pattern}'")
        self.method = method
        self.pattern = pattern


def split_path(path: str | None) -> list[str]:
    """Split '/customers/abc/' into ['customers', 'abc']."""
    value = (path or "").strip("/")
    return value.split("/")


def classify(segments: Sequence[str], collection_exists: Callable[[str], bool]) -> str:
    """Return 'C' for every segment naming a collection and 'I' otherwise."""
    return "".join("C" if collection_exists(segment) else "I" for segment in segments)


def is_valid_callback(name: str | None) -> bool:
    """Only dotted JavaScript identifiers may wrap a JSONP payload."""
    if not name:
        return False
    return bool(CALLBACK_PATTERN.fullmatch(name))
