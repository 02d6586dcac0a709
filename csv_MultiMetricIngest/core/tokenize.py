# csv_MultiMetricIngest/core/tokenize.py
from __future__ import annotations

QUOTE = '"'

def split_line(line: str, sep: str = ",") -> list[str]:
    """
    Split one text line into trimmed cells.
    A double quote toggles the quoted state and is not kept; ``sep`` inside quotes is content.
    Unbalanced quotes never raise, the line is split as far as the toggles allow.
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == QUOTE:
            in_quotes = not in_quotes
        elif ch == sep and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    cells.append("".join(current).strip())
    return cells
