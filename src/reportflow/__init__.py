"""reportflow - fetch analytics reports and flatten them into rows."""

from reportflow.config import Settings
from reportflow.exceptions import (
    ConfigurationError,
    FatalApiError,
    FetchCancelledError,
    FetchTimeoutError,
    ReportflowError,
    SubmissionError,
)
from reportflow.step import ReportInputStep

__all__ = [
    "ConfigurationError",
    "FatalApiError",
    "FetchCancelledError",
    "FetchTimeoutError",
    "ReportInputStep",
    "ReportflowError",
    "Settings",
    "SubmissionError",
]
