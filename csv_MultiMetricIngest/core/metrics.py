# csv_MultiMetricIngest/core/metrics.py
from __future__ import annotations
import numpy as np

from .model import ParseResult
from .normalize import is_number

def column_metrics(result: ParseResult, column: str) -> dict:
    vals = np.array([v for v in result.column(column) if is_number(v)], dtype=float)
    if vals.size == 0:
        return {"column": column, "n_points": 0, "min": 0.0, "max": 0.0, "mean": 0.0, "last": 0.0}
    return {
        "column": column,
        "n_points": int(vals.size),
        "min":  round(float(np.nanmin(vals)), 6),
        "max":  round(float(np.nanmax(vals)), 6),
        "mean": round(float(np.nanmean(vals)), 6),
        "last": round(float(vals[-1]), 6),
    }

def dataset_metrics(result: ParseResult) -> dict:
    return {
        "n_rows": len(result.rows),
        "n_headers": len(result.headers),
        "n_values": len(result.rows) * len(result.headers),
        "source_format": result.source_format,
        "is_multi_metric": result.is_multi_metric,
    }

def percent_change(current: float, previous: float | None) -> float:
    if not previous:
        return 0.0
    return (current - previous) / previous * 100.0
