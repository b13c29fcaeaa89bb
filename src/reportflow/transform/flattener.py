"""Flatten a report tree into rows.

the report comes back as a tree: each level is one dimension (dates, then
element values), metric counts sit on the leaves. we walk it depth-first and
emit one row per leaf, carrying every ancestor's label along the way.

the accumulator is an immutable tuple so sibling branches can't leak values
into each other - every append hands back a fresh record.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from reportflow.models.report import Report, ReportDataNode
from reportflow.transform.headers import headers

logger = logging.getLogger(__name__)

Scalar = str | int | float | None


@dataclass(frozen=True)
class FlatRecord:
    """A partial or complete row built along one root-to-leaf path.

    width is the length a finished row must have. anything else is an
    incomplete leaf and gets dropped.
    """

    width: int
    values: tuple[Scalar, ...] = ()

    def extend(self, values: Iterable[Scalar]) -> "FlatRecord":
        return FlatRecord(self.width, self.values + tuple(values))

    @property
    def is_complete(self) -> bool:
        return len(self.values) == self.width

    def __len__(self) -> int:
        return len(self.values)


def node_labels(node: ReportDataNode) -> list[Scalar]:
    """Values a node contributes to every row below it.

    name first, then whichever temporal fields are set - same order the
    header uses.
    """
    return [node.name, *node.temporal_values()]


def flatten(nodes: Sequence[ReportDataNode], accumulator: FlatRecord) -> list[FlatRecord]:
    """Turn a list of sibling nodes into complete rows, pre-order."""
    records: list[FlatRecord] = []
    for node in nodes:
        branch = accumulator.extend(node_labels(node))

        if not node.is_leaf:
            records.extend(flatten(node.breakdown, branch))
            continue

        leaf = branch.extend(node.counts)
        if leaf.is_complete:
            records.append(leaf)
        else:
            # incomplete leaf
            logger.debug(
                "Dropping incomplete leaf %r: %d values, expected %d",
                node.name,
                len(leaf),
                leaf.width,
            )
    return records


def flatten_report(report: Report) -> list[FlatRecord]:
    """Flatten a whole report, sizing rows to match its header."""
    width = len(headers(report))
    records = flatten(report.data, FlatRecord(width))

    leaves = _count_leaves(report.data)
    if leaves != len(records):
        logger.warning(
            "Dropped %d of %d report leaves with unexpected shape (expected %d values each)",
            leaves - len(records),
            leaves,
            width,
        )
    return records


def _count_leaves(nodes: Sequence[ReportDataNode]) -> int:
    total = 0
    for node in nodes:
        total += 1 if node.is_leaf else _count_leaves(node.breakdown)
    return total
