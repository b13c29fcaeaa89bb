"""Pydantic models for reportflow."""

from reportflow.models.descriptor import (
    DateGranularity,
    ReportConfig,
    ReportDescriptor,
    build_descriptor,
    check_config,
)
from reportflow.models.report import (
    Report,
    ReportDataNode,
    ReportElement,
    ReportMetric,
)
from reportflow.models.result import ReportResult

__all__ = [
    "DateGranularity",
    "Report",
    "ReportConfig",
    "ReportDataNode",
    "ReportDescriptor",
    "ReportElement",
    "ReportMetric",
    "ReportResult",
    "build_descriptor",
    "check_config",
]
