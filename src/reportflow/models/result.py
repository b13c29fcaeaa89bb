"""Pydantic model for a fetched and flattened report."""

from typing import Any

from pydantic import BaseModel


class ReportResult(BaseModel):
    """Rows produced by one fetch, in header order.

    metric_count is kept so sinks know which trailing columns are numeric.
    """

    header: list[str]
    rows: list[tuple[Any, ...]]
    row_count: int
    metric_count: int
    fetch_time_ms: float

    def as_dicts(self) -> list[dict[str, Any]]:
        return [dict(zip(self.header, row)) for row in self.rows]
