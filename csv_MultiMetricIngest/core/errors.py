# csv_MultiMetricIngest/core/errors.py
from __future__ import annotations


class ParseError(ValueError):
    """Fatal parse failure. ``kind`` is a short classification for callers."""
    kind: str = "parse_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


class EmptyInputError(ParseError):
    kind = "empty_input"


class InsufficientRowsError(ParseError):
    kind = "insufficient_rows"
