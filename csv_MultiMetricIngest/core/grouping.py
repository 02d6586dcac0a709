# csv_MultiMetricIngest/core/grouping.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import logging
import pandas as pd

from .classify import is_date_column
from .model import Granularity, Method, Row, SortOrder
from .normalize import is_number, parse_date

_LOG = logging.getLogger(__name__)

DAY_ABBR = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

GRANULARITIES: tuple[str, ...] = ("none", "days", "weeks", "months")
METHODS: tuple[str, ...] = ("sum", "average", "count")
SORT_ORDERS: tuple[str, ...] = ("within_year", "chronological")
RAW_ROW_LIMIT = 50

# ---------- date helpers ----------
def format_timestamp(ts: pd.Timestamp) -> str:
    """MM/DD HH:MM:SS of the timestamp's own fields; parse_date has already moved offset-aware input to UTC."""
    return f"{ts.month:02d}/{ts.day:02d} {ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"

def week_number(ts: pd.Timestamp) -> int:
    """ISO 8601 week: the week holding the year's first Thursday is week 1."""
    return int(ts.isocalendar()[1])

def weekday_index(ts: pd.Timestamp) -> int:
    """0=Sunday .. 6=Saturday."""
    return (ts.weekday() + 1) % 7

# ---------- buckets ----------
@dataclass
class _Bucket:
    key: str
    label: str
    order: tuple[int, ...]            # chronological sort key
    values: dict[str, list[float]] = field(default_factory=dict)
    count: int = 0

def _bucket_for(ts: pd.Timestamp, granularity: str) -> tuple[str, str, tuple[int, ...]]:
    if granularity == "days":
        d = weekday_index(ts)
        return f"{d}", DAY_ABBR[d], (d,)
    if granularity == "weeks":
        w = week_number(ts)
        return f"{ts.year}-W{w}", f"Week {w}", (ts.year, w)
    m = ts.month - 1
    return f"{ts.year}-{m}", MONTH_ABBR[m], (ts.year, m)

def _sort_buckets(buckets: list[_Bucket], granularity: str, sort_order: str) -> list[_Bucket]:
    # list.sort is stable: ties keep first-seen order
    if granularity == "days":
        return sorted(buckets, key=lambda b: b.order[0])
    if sort_order == "chronological":
        return sorted(buckets, key=lambda b: b.order)
    if granularity == "weeks":
        return sorted(buckets, key=lambda b: b.key)        # lexicographic: "2025-W10" < "2025-W2"
    return sorted(buckets, key=lambda b: b.order[1])       # month index only, year ignored

def _reduce(values: list[float], count: int, method: str) -> float:
    if not values:
        return 0.0
    if method == "sum":
        total = sum(values)
    elif method == "average":
        total = sum(values) / len(values)
    else:
        total = float(count)
    return round(total, 2)

# ---------- public ----------
def _check(granularity: str, method: str, sort_order: str) -> None:
    if granularity not in GRANULARITIES:
        raise ValueError(f"unknown granularity {granularity!r}; expected one of {GRANULARITIES}")
    if method not in METHODS:
        raise ValueError(f"unknown aggregation method {method!r}; expected one of {METHODS}")
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"unknown sort order {sort_order!r}; expected one of {SORT_ORDERS}")

def _passthrough(rows: Sequence[Row], time_column: str, raw_row_limit: int) -> list[dict]:
    if not is_date_column(rows, time_column):
        _LOG.info("time column '%s' is not date-like; returning first %d row(s) unchanged",
                  time_column, raw_row_limit)
        return [dict(r) for r in rows[:raw_row_limit]]
    out: list[dict] = []
    for r in rows:
        new = dict(r)
        ts = parse_date(r.get(time_column))
        if ts is not None:
            new[time_column] = format_timestamp(ts)
        out.append(new)
    return out

def aggregate(rows: Sequence[Row],
              time_column: str,
              granularity: Granularity,
              value_columns: str | Sequence[str],
              method: Method = "average",
              *,
              sort_order: SortOrder = "within_year",
              raw_row_limit: int = RAW_ROW_LIMIT) -> list[dict]:
    """
    Re-bucket rows by calendar period and reduce each value column.

    - granularity 'none' passes rows through with the time column shown as MM/DD HH:MM:SS
    - 'days' / 'weeks' / 'months' group by weekday, ISO week, month
    - method 'sum' | 'average' | 'count'; a column without numeric values in a bucket yields 0
    - 'count' is the bucket's row count, shared by all value columns
    Results are rounded to 2 decimals. Rows whose time value is not a date are skipped.
    """
    _check(granularity, method, sort_order)
    rows = list(rows)
    if granularity == "none":
        return _passthrough(rows, time_column, raw_row_limit)

    cols = [value_columns] if isinstance(value_columns, str) else list(value_columns)
    buckets: dict[str, _Bucket] = {}
    skipped = 0
    for r in rows:
        ts = parse_date(r.get(time_column))
        if ts is None:
            skipped += 1
            continue
        key, label, order = _bucket_for(ts, granularity)
        b = buckets.get(key)
        if b is None:
            b = buckets[key] = _Bucket(key=key, label=label, order=order)
        for c in cols:
            v = r.get(c)
            if is_number(v):
                b.values.setdefault(c, []).append(float(v))
        b.count += 1

    if skipped:
        _LOG.debug("aggregate: %d row(s) without a parseable '%s' skipped", skipped, time_column)

    out: list[dict] = []
    for b in _sort_buckets(list(buckets.values()), granularity, sort_order):
        row: dict = {time_column: b.label}
        for c in cols:
            row[c] = _reduce(b.values.get(c, []), b.count, method)
        out.append(row)
    return out

# --- config-driven wrapper helpers ---

@dataclass
class AggregationCfg:
    granularity: str = "none"
    method: str = "average"
    sort_order: str = "within_year"
    raw_row_limit: int = RAW_ROW_LIMIT
    time_column: str | None = None               # None -> default x axis
    value_columns: tuple[str, ...] = ()          # empty -> default numeric columns

def prepare_aggregation(global_cfg: dict) -> AggregationCfg:
    """Read the aggregation section from config; unknown values fall back to defaults."""
    agg = (global_cfg or {}).get("aggregation", {}) or {}

    granularity = str(agg.get("granularity", "none")).lower().strip()
    if granularity not in GRANULARITIES:
        _LOG.warning("unknown granularity %r in config; using 'none'", granularity)
        granularity = "none"
    method = str(agg.get("method", "average")).lower().strip()
    if method not in METHODS:
        _LOG.warning("unknown aggregation method %r in config; using 'average'", method)
        method = "average"
    sort_order = str(agg.get("sort_order", "within_year")).lower().strip()
    if sort_order not in SORT_ORDERS:
        _LOG.warning("unknown sort order %r in config; using 'within_year'", sort_order)
        sort_order = "within_year"

    cols = agg.get("value_columns") or ()
    if isinstance(cols, str):
        cols = (cols,)
    time_col = agg.get("time_column")

    return AggregationCfg(
        granularity=granularity,
        method=method,
        sort_order=sort_order,
        raw_row_limit=int(agg.get("raw_row_limit", RAW_ROW_LIMIT)),
        time_column=str(time_col) if time_col else None,
        value_columns=tuple(str(c) for c in cols),
    )
