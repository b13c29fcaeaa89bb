"""Output column names for a report."""

from reportflow.models.report import TEMPORAL_FIELDS, Report


def headers(report: Report) -> list[str]:
    """Derive the ordered column list for a report.

    "name", then the temporal fields present, then element ids, then metric
    ids. temporal fields are sampled from the first node at each level of the
    leftmost path rather than scanning the whole tree - reports are
    homogeneous so one path tells us everything. for the usual trended report
    that path's only dated node is the first top-level one.
    """
    columns = ["name"]

    present: set[str] = set()
    node = report.data[0] if report.data else None
    while node is not None:
        present.update(node.temporal_fields())
        node = node.breakdown[0] if node.breakdown else None

    columns.extend(f for f in TEMPORAL_FIELDS if f in present)
    columns.extend(report.element_ids)
    columns.extend(report.metric_ids)
    return columns
