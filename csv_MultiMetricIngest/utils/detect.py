# csv_MultiMetricIngest/utils/detect.py
from __future__ import annotations
from pathlib import Path
from dataclasses import dataclass
import logging

from ..core.model import FormatHint, SourceFormat
from ..core.tokenize import split_line

_LOG = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

@dataclass(frozen=True)
class DetectedItem:
    path: Path        # actual path on disk
    size: int

def detect_format(first_line: str, second_line: str) -> SourceFormat:
    """
    Classify a file from its first two non-empty lines.
    - header's first cell holds ';'-joined names AND the data line carries ';'-joined values -> 'compound'
    - else -> 'standard'
    Heuristic only: a standard file with ';' inside a quoted first header cell can be misread.
    """
    head = split_line(first_line)
    data = split_line(second_line)
    if ";" not in head[0]:
        return "standard"
    if ";" in data[0] or any(";" in c for c in data[1:]):
        return "compound"
    return "standard"

def resolve_format(hint: FormatHint, first_line: str, second_line: str) -> SourceFormat:
    if hint in ("standard", "compound"):
        return hint
    if hint != "auto":
        raise ValueError(f"unknown format hint: {hint!r}")
    fmt = detect_format(first_line, second_line)
    _LOG.debug("auto-detected %s format", fmt)
    return fmt

def validate_csv_file(p: Path, max_bytes: int = MAX_UPLOAD_BYTES) -> tuple[bool, str | None]:
    """Cheap pre-parse checks: suffix, existence, non-empty, size ceiling."""
    if p.suffix.lower() != ".csv":
        return False, "File must be a CSV file"
    if not p.is_file():
        return False, "No file provided"
    size = p.stat().st_size
    if size == 0:
        return False, "File is empty"
    if size > max_bytes:
        return False, f"File size must be less than {max_bytes // (1024 * 1024)}MB"
    return True, None

def discover_inputs(root: Path, recurse: bool = True) -> list[DetectedItem]:
    """
    If 'root' is a file -> return that one item (if it is a .csv).
    If 'root' is a folder -> walk (optionally recursively) and collect .csv files.
    """
    items: list[DetectedItem] = []
    if root.is_file():
        if root.suffix.lower() == ".csv":
            items.append(DetectedItem(root.resolve(), root.stat().st_size))
        return items

    # folder
    if recurse:
        it = root.rglob("*")
    else:
        it = root.glob("*")

    for p in it:
        if p.is_file() and p.suffix.lower() == ".csv":
            items.append(DetectedItem(p.resolve(), p.stat().st_size))

    # deterministic ordering
    items.sort(key=lambda x: str(x.path))
    return items
