"""Pydantic models for a completed report.

mirrors the "report" object the service returns from Report.Get. only the
fields the flattener and header resolver need are modelled - pydantic drops
the rest (urls, totals, breakdownTotal etc).
"""

from pydantic import BaseModel, Field

# metric values come back as strings ("1024") most of the time. we keep them
# as-is - coercion belongs to whoever consumes the rows.
MetricValue = str | int | float | None

TEMPORAL_FIELDS = ("year", "month", "day", "hour", "minute")


class ReportElement(BaseModel):
    """A dimension the report was broken down by."""

    id: str
    name: str | None = None


class ReportMetric(BaseModel):
    """A numeric measure in the report."""

    id: str
    name: str | None = None
    type: str | None = None


class ReportDataNode(BaseModel):
    """One dimension value at one depth of the report tree.

    leaves carry counts, internal nodes carry a breakdown. when a node has
    both, breakdown wins.
    """

    name: str | None = None
    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    counts: list[MetricValue] = Field(default_factory=list)
    breakdown: list["ReportDataNode"] | None = None

    @property
    def is_leaf(self) -> bool:
        return not self.breakdown

    def temporal_fields(self) -> list[str]:
        """Names of the temporal fields set on this node, year to minute."""
        return [f for f in TEMPORAL_FIELDS if getattr(self, f) is not None]

    def temporal_values(self) -> list[int]:
        return [getattr(self, f) for f in self.temporal_fields()]


class Report(BaseModel):
    """A completed report: elements, metrics and the data tree."""

    type: str | None = None  # trended / ranked / overtime
    elements: list[ReportElement] = Field(default_factory=list)
    metrics: list[ReportMetric] = Field(default_factory=list)
    data: list[ReportDataNode] = Field(default_factory=list)

    @property
    def element_ids(self) -> list[str]:
        return [e.id for e in self.elements]

    @property
    def metric_ids(self) -> list[str]:
        return [m.id for m in self.metrics]
