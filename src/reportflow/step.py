"""Pipeline step interface for reportflow."""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any

from reportflow.client.api import HttpReportingApi, ReportingApi
from reportflow.client.report_client import ReportClient
from reportflow.config import Settings
from reportflow.emitter import RowEmitter
from reportflow.models.descriptor import ReportConfig, ReportDescriptor, build_descriptor
from reportflow.models.result import ReportResult
from reportflow.transform.flattener import flatten_report
from reportflow.transform.headers import headers

logger = logging.getLogger(__name__)


class ReportInputStep:
    """Input step that turns one report into a stream of rows.

    the pipeline drives it as init -> rows -> close. everything the step
    needs (report config, credentials, transport) comes in through the
    constructor - no globals, no environment lookups after this point.
    """

    def __init__(
        self,
        config: ReportConfig,
        settings: Settings | None = None,
        api: ReportingApi | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the step.

        Args:
            config: Report to fetch.
            settings: Credentials and transport settings, read from the
                environment when omitted.
            api: Transport override, mostly for tests.
            sleep: Wait between polls.
        """
        self.config = config
        self.settings = settings or Settings()
        self.api = api or HttpReportingApi(self.settings)
        self.client = ReportClient(self.api, poll_interval=self.settings.poll_interval, sleep=sleep)
        self._descriptor: ReportDescriptor | None = None

    def init(self) -> ReportDescriptor:
        """Check settings and build the descriptor. Fails before any network call."""
        self.settings.require_credentials()
        self._descriptor = build_descriptor(self.config)
        return self._descriptor

    def fetch(
        self, cancel: threading.Event | None = None, timeout: float | None = None
    ) -> ReportResult:
        """Fetch the report and flatten it into rows."""
        descriptor = self._descriptor or self.init()

        start = time.perf_counter()
        report = self.client.fetch(descriptor, cancel=cancel, timeout=timeout)

        header = headers(report)
        emitter = RowEmitter(header)
        rows = list(emitter.rows(flatten_report(report)))
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info("Report '%s': %d columns, %d rows", self.config.name, len(header), len(rows))
        return ReportResult(
            header=header,
            rows=rows,
            row_count=len(rows),
            metric_count=len(report.metrics),
            fetch_time_ms=round(elapsed_ms, 2),
        )

    def rows(
        self, cancel: threading.Event | None = None, timeout: float | None = None
    ) -> Iterator[tuple[Any, ...]]:
        """Yield output rows one at a time, the way the pipeline pulls them."""
        yield from self.fetch(cancel=cancel, timeout=timeout).rows

    def discover_fields(self, timeout: float | None = None) -> list[str]:
        """Run the report once and return the columns it would produce."""
        return self.fetch(timeout=timeout).header

    def test_connection(self) -> None:
        """Check the credentials against the service. Raises on failure."""
        self.client.test_connection()
        logger.info("Connected to %s as %s", self.settings.endpoint, self.settings.username)

    def close(self) -> None:
        """Release the transport session."""
        self.api.close()

    def __enter__(self) -> "ReportInputStep":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
