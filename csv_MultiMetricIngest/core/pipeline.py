# csv_MultiMetricIngest/core/pipeline.py
from __future__ import annotations
from pathlib import Path
import json

from ..loaders.csv_loader import load
from . import normalize
from .classify import default_axes, group_metrics_by_category
from .grouping import AggregationCfg, aggregate, prepare_aggregation
from .metrics import column_metrics, dataset_metrics
from .model import ParseResult
from .reports import write_rows

def _resolve_columns(result: ParseResult, prep: AggregationCfg) -> tuple[str, list[str]]:
    axes = default_axes(result)
    time_col = prep.time_column or axes.x
    values = list(prep.value_columns) or list(axes.multi) or ([axes.y] if axes.y else [])
    return time_col, values

def run_pipeline(path: Path, cfg: dict, out_root: Path) -> list[dict]:
    """
    Parse one file, aggregate it per the config and write parsed/aggregated reports + summary.json.
    Returns the aggregated rows.
    """
    normalize.configure_from_config(cfg)
    prep = prepare_aggregation(cfg)
    fmt = str(cfg.get("reports", {}).get("format", "csv")).lower()

    result = load(path, cfg)
    out_dir = out_root / path.stem
    out_dir.mkdir(parents=True, exist_ok=True)

    time_col, value_cols = _resolve_columns(result, prep)
    if not value_cols:
        print(f"[INFO] {path.name}: no numeric columns; aggregation yields labels only.")

    aggregated = aggregate(
        result.rows,
        time_col,
        prep.granularity,
        value_cols,
        prep.method,
        sort_order=prep.sort_order,
        raw_row_limit=prep.raw_row_limit,
    )

    write_rows(result.rows, result.headers, out_dir / "parsed", f"{path.name} parsed", fmt=fmt)
    agg_headers = list(result.headers) if prep.granularity == "none" else [time_col, *value_cols]
    write_rows(aggregated, agg_headers, out_dir / "aggregated",
               f"{path.name} {prep.granularity}/{prep.method}", fmt=fmt, mat_variable="aggregated")

    summary = {
        "file": path.name,
        **dataset_metrics(result),
        "time_column": time_col,
        "value_columns": value_cols,
        "granularity": prep.granularity,
        "method": prep.method,
        "categories": group_metrics_by_category(result.headers),
        "columns": [column_metrics(result, c) for c in value_cols],
    }
    summary_path = out_dir / "summary.json"
    with summary_path.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    print(f"[OK] wrote summary: {summary_path}")
    return aggregated
