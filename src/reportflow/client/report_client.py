"""Queue-and-poll report retrieval.

the service is asynchronous: Report.Queue hands back an id, then Report.Get
answers report_not_ready until the report is built. the lifecycle of one
fetch is

    submitted -> polling -> ready | failed

not-ready keeps us in polling with a fixed wait. any other api error is
fatal and goes straight back to the caller. there is no retry cap - callers
who care pass a cancel event or a timeout.
"""

import logging
import threading
import time
from collections.abc import Callable

from pydantic import ValidationError

from reportflow.client.api import ReportingApi
from reportflow.exceptions import (
    ApiError,
    FatalApiError,
    FetchCancelledError,
    FetchTimeoutError,
    ReportNotReadyError,
)
from reportflow.models.descriptor import ReportDescriptor
from reportflow.models.report import Report

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0


class ReportClient:
    """Submits report descriptors and polls until the report is ready."""

    def __init__(
        self,
        api: ReportingApi,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the client.

        Args:
            api: Transport for the reporting service.
            poll_interval: Seconds to wait after a not-ready answer.
            sleep: Blocking wait, injectable so tests don't actually sleep.
            clock: Monotonic clock used for timeouts.
        """
        self.api = api
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def submit(self, descriptor: ReportDescriptor) -> int:
        """Queue a report and return its job id.

        io failures surface as SubmissionError straight from the transport.
        an api error here (bad metric id, unknown suite...) is never
        retryable, so it becomes FatalApiError.
        """
        try:
            job_id = self.api.queue(descriptor.to_request())
        except FatalApiError:
            raise
        except ApiError as e:
            raise FatalApiError(e.code, e.description) from e

        logger.info(
            "Queued report %d for suite %s (%s to %s)",
            job_id,
            descriptor.report_suite_id,
            descriptor.start_date,
            descriptor.end_date,
        )
        return job_id

    def poll(self, job_id: int) -> Report | None:
        """Ask once for a queued report.

        Returns:
            The Report when ready, None while the service says not ready.

        Raises:
            FatalApiError: for any other api error, or a payload that is not
                a report.
        """
        try:
            payload = self.api.get(job_id)
        except ReportNotReadyError:
            return None
        except FatalApiError:
            raise
        except ApiError as e:
            if e.code == ReportNotReadyError.CODE:
                return None
            raise FatalApiError(e.code, e.description) from e

        try:
            return Report.model_validate(payload)
        except ValidationError as e:
            raise FatalApiError("invalid_response", str(e)) from e

    def fetch(
        self,
        descriptor: ReportDescriptor,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> Report:
        """Submit a descriptor and block until its report is ready.

        the transport session is closed when this returns or raises.

        Args:
            descriptor: What to fetch.
            cancel: Set it from another thread to stop polling.
            timeout: Overall deadline in seconds, None for no limit.

        Raises:
            SubmissionError: the report could not be queued.
            FatalApiError: the service rejected the report.
            FetchCancelledError: cancel was set.
            FetchTimeoutError: the deadline passed while still not ready.
        """
        deadline = self._clock() + timeout if timeout is not None else None
        try:
            job_id = self.submit(descriptor)
            attempt = 0
            while True:
                self._check_stop(job_id, cancel, deadline)
                attempt += 1
                report = self.poll(job_id)
                if report is not None:
                    logger.info(
                        "Report %d ready after %d poll(s): %d top-level rows",
                        job_id,
                        attempt,
                        len(report.data),
                    )
                    return report

                logger.info(
                    "Report %d not ready yet (attempt %d), retrying in %.1fs",
                    job_id,
                    attempt,
                    self.poll_interval,
                )
                self._wait(cancel, deadline)
        finally:
            self.api.close()

    def _wait(self, cancel: threading.Event | None, deadline: float | None) -> None:
        interval = self.poll_interval
        if deadline is not None:
            # never sleep past the deadline
            interval = max(0.0, min(interval, deadline - self._clock()))
        if cancel is not None:
            # returns early if someone sets the event mid-wait
            cancel.wait(interval)
        else:
            self._sleep(interval)

    def _check_stop(
        self, job_id: int, cancel: threading.Event | None, deadline: float | None
    ) -> None:
        if cancel is not None and cancel.is_set():
            logger.warning("Fetch of report %d cancelled", job_id)
            raise FetchCancelledError(f"Fetch of report {job_id} was cancelled")
        if deadline is not None and self._clock() >= deadline:
            logger.warning("Fetch of report %d timed out", job_id)
            raise FetchTimeoutError(f"Report {job_id} was not ready before the deadline")

    def test_connection(self) -> None:
        """Make one authenticated call; raises ApiError if it fails."""
        try:
            self.api.ping()
        finally:
            self.api.close()
