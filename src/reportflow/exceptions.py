"""Exception hierarchy for reportflow.

kept deliberately flat. callers mostly care about two things: did the fetch
fail for good (FatalApiError, SubmissionError) or did they stop it themselves
(FetchCancelledError). the not-ready signal never leaves the poll loop.
"""


class ReportflowError(Exception):
    """Base class for errors raised by reportflow."""


class ConfigurationError(ReportflowError):
    """A mandatory report setting is missing or malformed.

    raised before any network traffic - the fetch never starts.
    """

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class ApiError(ReportflowError):
    """Error body returned by the reporting service.

    the service answers with {"error": code, "error_description": text}.
    ReportClient translates this into ReportNotReadyError or FatalApiError.
    """

    def __init__(self, code: str, description: str | None = None) -> None:
        super().__init__(f"{code}: {description}" if description else code)
        self.code = code
        self.description = description


class ReportNotReadyError(ApiError):
    """The queued report is still being generated. Retried, never surfaced."""

    CODE = "report_not_ready"

    def __init__(self, description: str | None = None) -> None:
        super().__init__(self.CODE, description)


class FatalApiError(ApiError):
    """Any API error other than report_not_ready. Aborts the fetch."""


class SubmissionError(ReportflowError):
    """The report could not be queued (network / IO failure)."""


class FetchCancelledError(ReportflowError):
    """The caller asked the poll loop to stop."""


class FetchTimeoutError(FetchCancelledError):
    """The fetch ran past its deadline while the report was not ready."""
