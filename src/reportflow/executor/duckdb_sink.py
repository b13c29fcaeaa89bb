"""DuckDB destination for flattened report rows.

handy when there is no pipeline engine around - fetch a report straight into
a local table and query it with sql afterwards. element ids like eVar2 are
mixed case, so every identifier goes through sqlglot for quoting.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import duckdb
from sqlglot import exp

logger = logging.getLogger(__name__)


def quote(name: str) -> str:
    """Quote an identifier for duckdb."""
    return exp.to_identifier(name, quoted=True).sql(dialect="duckdb")


class DuckDBSink:
    """Write report rows into a DuckDB table.

    label columns (name, dates, element values) are stored as VARCHAR, the
    trailing metric columns as DOUBLE.
    """

    def __init__(self, database_path: str | None = None) -> None:
        """Initialize the sink.

        Args:
            database_path: Path to DuckDB file, or None for in-memory.
        """
        self.database_path = database_path
        self._conn: duckdb.DuckDBPyConnection | None = None  # lazy init

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(self.database_path or ":memory:")
        return self._conn

    def write(
        self,
        table_name: str,
        header: Sequence[str],
        rows: Iterable[Sequence[Any]],
        metric_count: int,
    ) -> int:
        """Replace table_name with the given rows. Returns the row count."""
        label_count = len(header) - metric_count
        if label_count < 0:
            raise ValueError("metric_count is larger than the header")

        col_defs = ", ".join(
            f"{quote(col)} {'DOUBLE' if i >= label_count else 'VARCHAR'}"
            for i, col in enumerate(header)
        )
        self.conn.execute(f"CREATE OR REPLACE TABLE {quote(table_name)} ({col_defs})")

        data = [_coerce(row, label_count) for row in rows]
        if data:
            placeholders = ", ".join(["?"] * len(header))
            self.conn.executemany(
                f"INSERT INTO {quote(table_name)} VALUES ({placeholders})",
                data,
            )

        logger.info("Wrote %d rows to %s", len(data), table_name)
        return len(data)

    def execute_raw(self, sql: str) -> list[tuple[Any, ...]]:
        """Execute SQL and return raw tuples."""
        return self.conn.execute(sql).fetchall()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DuckDBSink":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def _coerce(row: Sequence[Any], label_count: int) -> tuple[Any, ...]:
    labels = [None if v is None else str(v) for v in row[:label_count]]
    metrics = [_to_number(v) for v in row[label_count:]]
    return tuple(labels + metrics)


def _to_number(value: Any) -> float | None:
    # the service sends counts as strings, occasionally empty ones
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Storing unparseable metric value %r as NULL", value)
        return None
