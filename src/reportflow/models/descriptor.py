"""Report request models.

ReportConfig is the loose, user-facing shape (strings straight out of yaml or
a dialog). ReportDescriptor is the strict, frozen request we actually send.
build_descriptor is the only way to get from one to the other.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from reportflow.exceptions import ConfigurationError


class DateGranularity(str, Enum):
    """Date granularities the reporting service accepts.

    same five grains as most bi tools. hour exists on the service side too
    but the step never exposed it.
    """

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


def split_ids(value: Any) -> list[str]:
    """Split a comma-separated id list, dropping blanks.

    accepts an already-split list too since yaml users tend to write both.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = [str(p) for p in value if p is not None]
    else:
        raise ValueError(f"expected a comma-separated string or a list, got {value!r}")
    return [p.strip() for p in parts if p.strip()]


class ReportConfig(BaseModel):
    """Report settings as supplied by the configuration surface.

    every field is optional. check_config reports all the missing pieces
    at once.
    """

    name: str = "report"
    report_suite_id: str | None = None
    start_date: str | None = None  # YYYY-MM-DD
    end_date: str | None = None
    granularity: str = DateGranularity.DAY.value
    metrics: list[str] = Field(default_factory=list)  # "pageviews,visits" in yaml
    elements: list[str] = Field(default_factory=list)
    segment: str | None = None

    @field_validator("metrics", "elements", mode="before")
    @classmethod
    def _split(cls, v: Any) -> list[str]:
        return split_ids(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_to_str(cls, v: Any) -> Any:
        # yaml turns an unquoted 2015-01-01 into a date object
        if isinstance(v, date):
            return v.isoformat()
        return v


class ReportDescriptor(BaseModel):
    """An immutable report request."""

    model_config = ConfigDict(frozen=True)

    report_suite_id: str
    start_date: date
    end_date: date
    granularity: DateGranularity
    metrics: tuple[str, ...]
    elements: tuple[str, ...]
    segment: str | None = None

    def to_request(self) -> dict[str, Any]:
        """Serialise to the service's reportDescription object."""
        description: dict[str, Any] = {
            "reportSuiteID": self.report_suite_id,
            "dateFrom": self.start_date.isoformat(),
            "dateTo": self.end_date.isoformat(),
            "dateGranularity": self.granularity.value,
            "metrics": [{"id": m} for m in self.metrics],
            "elements": [{"id": e} for e in self.elements],
        }
        if self.segment:
            description["segments"] = [{"id": self.segment}]
        return description


DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def _parse_date(value: str) -> date:
    # strictly YYYY-MM-DD, fromisoformat would also take 20150101 or 2015-W01-4
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"{value!r} is not YYYY-MM-DD")
    return datetime.strptime(value, "%Y-%m-%d").date()


def check_config(config: ReportConfig) -> None:
    """Raise ConfigurationError if any mandatory setting is absent."""
    missing = []
    if not config.report_suite_id:
        missing.append("report_suite_id")
    if not config.start_date:
        missing.append("start_date")
    if not config.end_date:
        missing.append("end_date")
    if not config.metrics:
        missing.append("metrics")
    if not config.elements:
        missing.append("elements")

    if missing:
        raise ConfigurationError(
            f"Report '{config.name}' is missing required settings: {', '.join(missing)}",
            missing=missing,
        )


def build_descriptor(config: ReportConfig) -> ReportDescriptor:
    """Assemble a ReportDescriptor from a checked ReportConfig.

    no network, no io. dates and granularity are validated here.
    """
    check_config(config)

    try:
        granularity = DateGranularity(config.granularity.lower())
    except ValueError:
        allowed = ", ".join(g.value for g in DateGranularity)
        raise ConfigurationError(
            f"Unknown date granularity '{config.granularity}'. Use one of: {allowed}"
        ) from None

    try:
        start = _parse_date(config.start_date)
        end = _parse_date(config.end_date)
    except ValueError as e:
        raise ConfigurationError(f"Dates must be YYYY-MM-DD: {e}") from e

    if start > end:
        raise ConfigurationError(f"Start date {start} is after end date {end}")

    try:
        return ReportDescriptor(
            report_suite_id=config.report_suite_id,
            start_date=start,
            end_date=end,
            granularity=granularity,
            metrics=tuple(config.metrics),
            elements=tuple(config.elements),
            segment=config.segment or None,
        )
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
