# csv_MultiMetricIngest/loaders/csv_loader.py
from __future__ import annotations
from pathlib import Path
import logging

from ..core.errors import EmptyInputError, InsufficientRowsError
from ..core.model import FormatHint, ParseResult, Row
from ..core.normalize import coerce_value, normalize_headers
from ..core.tokenize import split_line
from ..utils.detect import resolve_format

_LOG = logging.getLogger(__name__)

# ---------- line helpers ----------
def _content_lines(text: str) -> list[str]:
    return [ln.strip() for ln in text.splitlines() if ln.strip()]

def _split_compound(cells: list[str]) -> list[str]:
    out: list[str] = []
    for cell in cells:
        if ";" in cell:
            out.extend(part.strip() for part in cell.split(";"))
        else:
            out.append(cell.strip())
    return out

# ---------- standard ----------
def parse_standard(lines: list[str]) -> ParseResult:
    """One value per comma cell; short rows are padded with "" for the missing trailing headers."""
    headers = normalize_headers(split_line(lines[0]))
    rows: list[Row] = []
    ragged = 0
    for line in lines[1:]:
        cells = split_line(line)
        if len(cells) != len(headers):
            ragged += 1
        row: Row = {}
        for i, h in enumerate(headers):
            row[h] = coerce_value(cells[i]) if i < len(cells) else ""
        rows.append(row)
    if ragged:
        _LOG.debug("standard parse: %d ragged row(s) padded/truncated", ragged)
    return ParseResult(
        headers=tuple(headers),
        rows=tuple(rows),
        is_multi_metric=False,
        source_format="standard",
    )

# ---------- compound ----------
def parse_compound(lines: list[str]) -> ParseResult:
    """
    Header and data rows pack ';'-joined sub-fields into comma cells.
    Each sub-value fills the next header slot; excess values are dropped,
    missing ones stay unset so the row is sparse.
    """
    headers = normalize_headers(_split_compound(split_line(lines[0])))
    rows: list[Row] = []
    dropped = 0
    short = 0
    for line in lines[1:]:
        row: Row = {}
        slot = 0
        for cell_idx, cell in enumerate(split_line(line)):
            if ";" in cell:
                values = [v.strip() for v in cell.split(";")]
                first_plain = False
            else:
                values = [cell.strip()]
                first_plain = cell_idx == 0
            for v in values:
                if slot >= len(headers):
                    dropped += 1
                    continue
                # clock-style first column stays text
                row[headers[slot]] = coerce_value(v, keep_if_date_like=first_plain)
                slot += 1
        if not row:
            continue
        if slot < len(headers):
            short += 1
        rows.append(row)
    if dropped or short:
        _LOG.debug("compound parse: %d excess value(s) dropped, %d short row(s)", dropped, short)
    return ParseResult(
        headers=tuple(headers),
        rows=tuple(rows),
        is_multi_metric=True,
        source_format="compound",
    )

# ---------- public entry points ----------
def parse(text: str, fmt: FormatHint = "auto") -> ParseResult:
    """
    Parse CSV text into headers + typed rows.
    Raises EmptyInputError for blank text, InsufficientRowsError for fewer than two non-empty lines.
    """
    if not text or not text.strip():
        raise EmptyInputError("Empty CSV content")
    lines = _content_lines(text)
    if len(lines) < 2:
        raise InsufficientRowsError("CSV must have at least a header row and one data row")

    source_format = resolve_format(fmt, lines[0], lines[1])
    if source_format == "compound":
        result = parse_compound(lines)
    else:
        result = parse_standard(lines)
    _LOG.info("parsed %d row(s) x %d header(s) (%s)", len(result.rows), len(result.headers), source_format)
    return result

def load(path: Path, cfg: dict | None = None) -> ParseResult:
    """Read a UTF-8 (BOM tolerated) CSV file and parse it with the configured format hint."""
    hint = str(((cfg or {}).get("parsing", {}) or {}).get("format", "auto")).lower()
    text = path.read_bytes().decode("utf-8-sig")
    return parse(text, hint)
