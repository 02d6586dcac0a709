# csv_MultiMetricIngest/core/reports.py
from __future__ import annotations
from pathlib import Path
import re
from typing import Literal, Sequence
import numpy as np
import pandas as pd
from scipy.io import savemat

ReportFormat = Literal["csv", "json", "mat", "all"]

def _build_dataframe(rows: Sequence[dict], headers: Sequence[str]) -> pd.DataFrame:
    """Rows in header order; keys absent from a row become NaN."""
    return pd.DataFrame(list(rows), columns=list(headers))

def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> None:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")

def _write_json(df_out: pd.DataFrame, out_json: Path, title: str) -> None:
    out_json.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_json(out_json, orient="records", indent=2, force_ascii=False)
    print(f"[OK] wrote report: {title} → {out_json}")

def _to_mat_cellstr(seq: list) -> np.ndarray:
    """Make a MATLAB column cell array from a list of strings."""
    seq2 = [("" if s is None or (isinstance(s, float) and np.isnan(s)) else str(s)) for s in seq]
    arr = np.empty((len(seq2), 1), dtype=object)
    arr[:, 0] = seq2
    return arr

def _mat_field(name: str, used: set[str]) -> str:
    s = re.sub(r"[^A-Za-z0-9_]+", "_", name).strip("_") or "col"
    if not s[0].isalpha():
        s = "c_" + s
    s = s[:60]
    base, k = s, 2
    while s in used:
        s = f"{base}_{k}"
        k += 1
    used.add(s)
    return s

def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str, title: str) -> None:
    """
    Save a MATLAB struct with one field per column.
    Numeric columns become double (Nx1), everything else a cell array (Nx1).
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    used: set[str] = set()
    mat_struct = {}
    for col in df_out.columns:
        s = df_out[col]
        if pd.api.types.is_numeric_dtype(s):
            mat_struct[_mat_field(str(col), used)] = s.to_numpy(dtype=float).reshape(-1, 1)
        else:
            mat_struct[_mat_field(str(col), used)] = _to_mat_cellstr(s.tolist())
    savemat(out_mat, {varname: mat_struct})
    print(f"[OK] wrote report: {title} → {out_mat}")

def write_rows(rows: Sequence[dict],
               headers: Sequence[str],
               out_base: Path,
               title: str,
               fmt: ReportFormat = "csv",
               mat_variable: str = "data") -> None:
    """
    Write a row sequence in the requested format.
    - out_base is a *base path without extension* (e.g., .../aggregated)
    - fmt: "csv" | "json" | "mat" | "all"
    - mat_variable: MATLAB variable name of the struct
    """
    if not rows:
        return
    df_out = _build_dataframe(rows, headers)

    if fmt in ("csv", "all"):
        _write_csv(df_out, out_base.with_suffix(".csv"), title)
    if fmt in ("json", "all"):
        _write_json(df_out, out_base.with_suffix(".json"), title)
    if fmt in ("mat", "all"):
        _write_mat(df_out, out_base.with_suffix(".mat"), mat_variable, title)
