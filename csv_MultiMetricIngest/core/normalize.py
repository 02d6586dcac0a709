# csv_MultiMetricIngest/core/normalize.py
from __future__ import annotations
import logging
import math
import re
from typing import Iterable, Sequence
import pandas as pd

from .model import Value

_LOG = logging.getLogger(__name__)

# ----- defaults (used if configure_from_config isn't called) -----
DEFAULT_PREFIX_PATTERNS: tuple[str, ...] = (r"^[A-Za-z]+\d+\s*>\s*",)   # e.g. "IOITSecure12 > ", "Device123 > "
_PREFIXES: tuple[re.Pattern, ...] = tuple(re.compile(p) for p in DEFAULT_PREFIX_PATTERNS)
_DECIMAL_COMMA: bool = True

_DECIMAL_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_DECIMAL_COMMA_RE = re.compile(r"^[-+]?\d+,\d+$")
_THOUSANDS_RE = re.compile(r"^[-+]?\d{1,3},\d{3}$")     # "1,234" is a grouped integer, not 1.234
# a full calendar date must be present: 2025-01-06, 2025/1/6, 06/01/2025, 6.1.25
_CALENDAR_DATE_RE = re.compile(r"\d{4}[-/.]\d{1,2}[-/.]\d{1,2}|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}")
MIN_YEAR, MAX_YEAR = 1900, 2999
_DATE_MARKS = ("/", ":", "-")

def configure_from_config(cfg: dict) -> None:
    """Override header prefixes (``headers.strip_prefixes``) and ``parsing.decimal_comma``."""
    global _PREFIXES, _DECIMAL_COMMA

    # reset to defaults each call so repeated invocations do not accumulate
    _PREFIXES = tuple(re.compile(p) for p in DEFAULT_PREFIX_PATTERNS)
    _DECIMAL_COMMA = True

    hdr = (cfg or {}).get("headers", {}) or {}
    pats = hdr.get("strip_prefixes", None)
    if isinstance(pats, Iterable) and not isinstance(pats, (str, bytes)):
        _PREFIXES = tuple(re.compile(str(p)) for p in pats)

    parsing = (cfg or {}).get("parsing", {}) or {}
    _DECIMAL_COMMA = bool(parsing.get("decimal_comma", _DECIMAL_COMMA))

# ---------- typed values ----------
def is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)

def to_number(text: str) -> float | None:
    """Finite float for a complete decimal literal, else None."""
    t = text.strip()
    if _DECIMAL_RE.match(t):
        num = float(t)
    elif _DECIMAL_COMMA and _DECIMAL_COMMA_RE.match(t) and not _THOUSANDS_RE.match(t):
        num = float(t.replace(",", "."))
    else:
        return None
    return num if math.isfinite(num) else None

def coerce_value(text: str, *, keep_if_date_like: bool = False) -> Value:
    t = text.strip()
    if keep_if_date_like and any(m in t for m in _DATE_MARKS):
        return t
    num = to_number(t)
    return t if num is None else num

# ---------- dates ----------
def parse_date(value) -> pd.Timestamp | None:
    """
    Timestamp for strings holding a full calendar date, None otherwise.
    Numbers, clock-only text ("12:30:00") and partial dates ("1-2") are not dates.
    Offset-aware values are converted to UTC and returned naive, so calendar fields are UTC wall clock.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or not _CALENDAR_DATE_RE.search(text):
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    if not MIN_YEAR <= ts.year <= MAX_YEAR:
        return None
    return ts

# ---------- headers ----------
def clean_header(name: str, prefixes: Sequence[re.Pattern] | None = None) -> str:
    h = str(name).strip()
    for pat in (_PREFIXES if prefixes is None else prefixes):
        h = pat.sub("", h)
    return h.strip()

def normalize_headers(raw: Sequence[str], prefixes: Sequence[str] | None = None) -> list[str]:
    """
    Strip device prefixes and make names unique.
    First occurrence stays as is; later ones become "Name 2", "Name 3", ...
    """
    compiled = None if prefixes is None else [re.compile(p) for p in prefixes]
    out: list[str] = []
    counts: dict[str, int] = {}
    emitted: set[str] = set()
    for name in raw:
        base = clean_header(name, compiled)
        if base not in counts and base not in emitted:
            counts[base] = 1
            emitted.add(base)
            out.append(base)
            continue
        n = counts.get(base, 1)
        while True:
            n += 1
            candidate = f"{base} {n}"
            if candidate not in emitted:
                break
        counts[base] = n
        emitted.add(candidate)
        out.append(candidate)
    renamed = sum(1 for a, b in zip(raw, out) if str(a).strip() != b)
    if renamed:
        _LOG.debug("renamed %d of %d header(s)", renamed, len(out))
    return out
