# csv_MultiMetricIngest/core/classify.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Sequence

from .model import ParseResult, Row
from .normalize import is_number, parse_date

MetricCategory = Literal["Voltage", "Power Factor", "Current", "Power", "Frequency", "Time", "Other"]

DATE_SAMPLE_ROWS = 10

def categorize_metric(header: str) -> MetricCategory:
    """
    Case-insensitive substring rules, first match wins:
      Voltage -> Power Factor ('pf' / 'power factor') -> Current
      -> Power (not '...factor') -> Frequency -> Time ('time' / 'timestamp') -> Other
    """
    h = (header or "").lower()
    if "voltage" in h:
        return "Voltage"
    if "pf" in h or "power factor" in h:
        return "Power Factor"
    if "current" in h:
        return "Current"
    if "power" in h and "factor" not in h:
        return "Power"
    if "frequency" in h:
        return "Frequency"
    if "time" in h or "timestamp" in h:
        return "Time"
    return "Other"

def group_metrics_by_category(headers: Sequence[str]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for h in headers:
        groups.setdefault(categorize_metric(h), []).append(h)
    return groups

# ----- column selection helpers -----
def is_date_column(rows: Sequence[Row], column: str, sample: int = DATE_SAMPLE_ROWS) -> bool:
    return any(parse_date(r.get(column)) is not None for r in rows[:sample])

def numeric_headers(result: ParseResult) -> list[str]:
    return [h for h in result.headers
            if any(is_number(r.get(h)) for r in result.rows)]

def date_headers(result: ParseResult, sample: int = DATE_SAMPLE_ROWS) -> list[str]:
    return [h for h in result.headers if is_date_column(result.rows, h, sample)]

@dataclass(frozen=True)
class AxisDefaults:
    x: str
    y: str
    multi: tuple[str, ...]

def default_axes(result: ParseResult) -> AxisDefaults:
    """x prefers a time/date column, y prefers voltage then the first numeric column."""
    headers = list(result.headers)
    dates = date_headers(result)
    nums = numeric_headers(result)

    x = next((h for h in headers
              if "time" in h.lower() or "timestamp" in h.lower() or h in dates), None)
    if x is None:
        x = headers[0] if headers else ""

    y = next((h for h in nums if "voltage" in h.lower()), None)
    if y is None:
        y = nums[0] if nums else (headers[1] if len(headers) > 1 else "")

    return AxisDefaults(x=x, y=y, multi=tuple(nums[:3]))
