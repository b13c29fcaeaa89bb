"""Boundary adapter between flat records and the downstream pipeline."""

from collections.abc import Iterable, Iterator
from typing import Any

from reportflow.transform.flattener import FlatRecord, Scalar


class RowEmitter:
    """Hand finished records to the pipeline in header order.

    values pass through untouched - type conversion against the target
    schema is the pipeline's job, not ours.
    """

    def __init__(self, header: list[str]) -> None:
        self.header = list(header)

    def emit(self, record: FlatRecord) -> tuple[Scalar, ...]:
        if not record.is_complete or len(record) != len(self.header):
            raise ValueError(
                f"Record has {len(record)} values but header has {len(self.header)} columns"
            )
        return record.values

    def emit_dict(self, record: FlatRecord) -> dict[str, Any]:
        """Same as emit but keyed by column name."""
        return dict(zip(self.header, self.emit(record)))

    def rows(self, records: Iterable[FlatRecord]) -> Iterator[tuple[Scalar, ...]]:
        for record in records:
            yield self.emit(record)
