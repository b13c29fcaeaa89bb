"""Basic usage example for reportflow.

needs real credentials in the environment:

    export REPORTFLOW_USERNAME="user:company"
    export REPORTFLOW_SECRET="..."
"""

import logging
import threading

from reportflow import ReportInputStep, ReportflowError, Settings
from reportflow.executor.duckdb_sink import DuckDBSink, quote
from reportflow.parser.loader import ReportConfigLoader


def main():
    """Fetch one report, print a few rows and store it in DuckDB."""
    logging.basicConfig(level=logging.INFO)

    loader = ReportConfigLoader()
    loader.load("examples/reports.yaml")
    config = loader.get_report("weekly_campaigns")

    cancel = threading.Event()  # set() from another thread to give up early

    try:
        with ReportInputStep(config, Settings()) as step:
            step.test_connection()
            result = step.fetch(cancel=cancel, timeout=300)
    except ReportflowError as e:
        print(f"Fetch failed: {e}")
        return

    print("=" * 60)
    print(f"{config.name}: {result.row_count} rows in {result.fetch_time_ms}ms")
    print("=" * 60)
    print(" | ".join(result.header))
    for row in result.rows[:10]:
        print(" | ".join("" if v is None else str(v) for v in row))

    with DuckDBSink("reports.duckdb") as sink:
        sink.write(config.name, result.header, result.rows, result.metric_count)
        total = sink.execute_raw(f"SELECT SUM(pageviews) FROM {quote(config.name)}")[0][0]
        print(f"\nTotal pageviews: {total:,.0f}")


if __name__ == "__main__":
    main()
