"""Exception types raised inside the engine and caught at the calculator boundary."""

from __future__ import annotations


class TrendscoreError(Exception):
    """Base class for trendscore errors."""


class MalformedInputError(TrendscoreError):
    """A serialized payload failed to parse or validate."""

    def __init__(self, kind: str, detail: str, preview: str = ""):
        super().__init__(f"Malformed {kind} payload: {detail}")
        self.kind = kind
        self.detail = detail
        self.preview = preview
