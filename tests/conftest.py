"""Pytest fixtures for reportflow tests."""

from pathlib import Path
from typing import Any

import pytest

from reportflow.config import Settings
from reportflow.exceptions import ReportNotReadyError
from reportflow.models.descriptor import ReportConfig
from reportflow.models.report import Report


class FakeApi:
    """In-memory stand-in for the reporting service.

    responses are consumed one per get() call - a dict is returned as the
    report payload, an exception instance is raised.
    """

    def __init__(
        self,
        responses: list[Any] | None = None,
        job_id: int = 42,
        queue_error: Exception | None = None,
        ping_error: Exception | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.job_id = job_id
        self.queue_error = queue_error
        self.ping_error = ping_error
        self.queued: list[dict] = []
        self.get_calls: list[int] = []
        self.ping_calls = 0
        self.close_calls = 0

    def queue(self, description: dict) -> int:
        if self.queue_error is not None:
            raise self.queue_error
        self.queued.append(description)
        return self.job_id

    def get(self, report_id: int) -> dict:
        self.get_calls.append(report_id)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def ping(self) -> None:
        self.ping_calls += 1
        if self.ping_error is not None:
            raise self.ping_error

    def close(self) -> None:
        self.close_calls += 1


def not_ready(times: int) -> list[Exception]:
    return [ReportNotReadyError("Report not ready") for _ in range(times)]


@pytest.fixture
def example_payload() -> dict:
    """eVar2 values A and B, each broken down by day."""
    return {
        "type": "trended",
        "elements": [{"id": "eVar2", "name": "Campaign"}],
        "metrics": [{"id": "pageviews", "name": "Page Views"}, {"id": "visits", "name": "Visits"}],
        "data": [
            {
                "name": "A",
                "breakdown": [
                    {"name": "day1", "day": 1, "counts": [10, 2]},
                    {"name": "day2", "day": 2, "counts": [20, 3]},
                ],
            },
            {
                "name": "B",
                "breakdown": [
                    {"name": "day1", "day": 1, "counts": [5, 1]},
                ],
            },
        ],
    }


@pytest.fixture
def trended_payload() -> dict:
    """The shape the service returns for a report with a date granularity."""
    return {
        "type": "trended",
        "elements": [{"id": "eVar2", "name": "Campaign"}],
        "metrics": [{"id": "pageviews"}, {"id": "visits"}],
        "data": [
            {
                "name": "Thu. 1 Jan. 2015",
                "year": 2015,
                "month": 1,
                "day": 1,
                "breakdown": [
                    {"name": "spring", "url": "", "counts": ["120", "30"]},
                    {"name": "summer", "url": "", "counts": ["80", "12"]},
                ],
            },
            {
                "name": "Fri. 2 Jan. 2015",
                "year": 2015,
                "month": 1,
                "day": 2,
                "breakdown": [
                    {"name": "spring", "url": "", "counts": ["90", "20"]},
                ],
            },
        ],
        "totals": ["290", "62"],
    }


@pytest.fixture
def example_report(example_payload: dict) -> Report:
    return Report.model_validate(example_payload)


@pytest.fixture
def trended_report(trended_payload: dict) -> Report:
    return Report.model_validate(trended_payload)


@pytest.fixture
def report_config() -> ReportConfig:
    return ReportConfig(
        name="weekly",
        report_suite_id="mysuite",
        start_date="2015-01-01",
        end_date="2015-01-30",
        granularity="week",
        metrics="pageviews,visits",
        elements="eVar2",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(username="analyst:acme", secret="s3cr3t", poll_interval=0.0)


@pytest.fixture
def sample_reports_yaml() -> str:
    """Sample report YAML content for testing."""
    return """
reports:
  - name: weekly
    report_suite_id: mysuite
    start_date: 2015-01-01
    end_date: 2015-01-30
    granularity: week
    metrics: pageviews,visits
    elements: eVar2

  - name: daily
    report_suite_id: mysuite
    start_date: "2015-01-01"
    end_date: "2015-01-07"
    granularity: day
    metrics:
      - pageviews
    elements:
      - eVar2
      - page
    segment: s_returning
"""


@pytest.fixture
def reports_dir(tmp_path: Path, sample_reports_yaml: str) -> Path:
    """Create a temporary report config directory."""
    path = tmp_path / "reports"
    path.mkdir()
    (path / "reports.yaml").write_text(sample_reports_yaml)
    return path
