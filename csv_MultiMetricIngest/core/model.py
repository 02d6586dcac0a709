# csv_MultiMetricIngest/core/model.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Union
import pandas as pd

SourceFormat = Literal["standard", "compound"]
FormatHint = Literal["standard", "compound", "auto"]
Granularity = Literal["none", "days", "weeks", "months"]
Method = Literal["sum", "average", "count"]
SortOrder = Literal["within_year", "chronological"]

Value = Union[float, str]
Row = dict[str, Value]

@dataclass(frozen=True)
class ParseResult:
    headers: tuple[str, ...]      # unique, first-seen column order
    rows: tuple[Row, ...]         # sparse for compound files: a missing key means absent, not zero
    is_multi_metric: bool
    source_format: SourceFormat

    def column(self, name: str) -> list[Value]:
        return [r[name] for r in self.rows if name in r]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.rows), columns=list(self.headers))
