"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FakeApi, not_ready
from reportflow.cli import main as cli
from reportflow.cli.main import app
from reportflow.client.report_client import ReportClient
from reportflow.config import Settings
from reportflow.exceptions import ApiError, FatalApiError
from reportflow.executor.duckdb_sink import DuckDBSink
from reportflow.step import ReportInputStep

runner = CliRunner()


@pytest.fixture
def fake_step(monkeypatch: pytest.MonkeyPatch, settings: Settings):
    """Route the CLI's step through a FakeApi with the given responses."""

    def install(responses: list) -> FakeApi:
        api = FakeApi(responses=responses)
        monkeypatch.setattr(
            cli,
            "get_step",
            lambda config: ReportInputStep(config, settings, api=api, sleep=lambda s: None),
        )
        return api

    return install


class TestCLIList:
    def test_list_reports(self, reports_dir: Path):
        """Can list reports via CLI."""
        result = runner.invoke(app, ["list", "--config", str(reports_dir)])
        assert result.exit_code == 0
        assert "weekly" in result.stdout
        assert "daily" in result.stdout

    def test_list_nonexistent_directory(self, tmp_path: Path):
        """Reports error for nonexistent directory."""
        result = runner.invoke(app, ["list", "--config", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "error" in result.stdout.lower()


class TestCLIValidate:
    def test_validate_success(self, reports_dir: Path):
        result = runner.invoke(app, ["validate", "--config", str(reports_dir)])
        assert result.exit_code == 0
        assert "success" in result.stdout.lower()

    def test_validate_failure(self, tmp_path: Path):
        """Missing fields are reported and exit non-zero."""
        path = tmp_path / "bad.yaml"
        path.write_text("reports:\n  - name: broken\n    metrics: pageviews\n")

        result = runner.invoke(app, ["validate", "--config", str(path)])
        assert result.exit_code == 1
        assert "report_suite_id" in result.stdout


class TestCLIFetch:
    def test_fetch_json(self, reports_dir: Path, fake_step, trended_payload: dict):
        """Fetched rows print as JSON objects keyed by header."""
        api = fake_step(not_ready(1) + [trended_payload])

        result = runner.invoke(
            app, ["fetch", "weekly", "--config", str(reports_dir), "--output", "json"]
        )

        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert rows[0] == {
            "name": "Thu. 1 Jan. 2015",
            "year": 2015,
            "month": 1,
            "day": 1,
            "eVar2": "spring",
            "pageviews": "120",
            "visits": "30",
        }
        assert len(rows) == 3
        assert len(api.get_calls) == 2

    def test_fetch_csv(self, reports_dir: Path, fake_step, example_payload: dict):
        fake_step([example_payload])

        result = runner.invoke(
            app, ["fetch", "weekly", "--config", str(reports_dir), "--output", "csv"]
        )

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "name,day,eVar2,pageviews,visits"
        assert lines[1] == "A,day1,1,10,2"
        assert len(lines) == 4

    def test_fetch_table(self, reports_dir: Path, fake_step, example_payload: dict):
        fake_step([example_payload])
        result = runner.invoke(app, ["fetch", "weekly", "--config", str(reports_dir)])
        assert result.exit_code == 0
        assert "Report" in result.stdout

    def test_fetch_to_duckdb(
        self, reports_dir: Path, tmp_path: Path, fake_step, example_payload: dict
    ):
        """--db writes the rows into a DuckDB table."""
        fake_step([example_payload])
        db_path = str(tmp_path / "out.duckdb")

        result = runner.invoke(
            app, ["fetch", "weekly", "--config", str(reports_dir), "--db", db_path]
        )

        assert result.exit_code == 0
        with DuckDBSink(db_path) as sink:
            assert sink.execute_raw("SELECT COUNT(*) FROM weekly") == [(3,)]

    def test_fetch_fatal_error(self, reports_dir: Path, fake_step):
        fake_step([FatalApiError("report_failed", "Report generation failed")])

        result = runner.invoke(app, ["fetch", "weekly", "--config", str(reports_dir)])

        assert result.exit_code == 1
        assert "report_failed" in result.stdout

    def test_fetch_unknown_report(self, reports_dir: Path):
        result = runner.invoke(app, ["fetch", "nonexistent", "--config", str(reports_dir)])
        assert result.exit_code == 1
        assert "unknown report" in result.stdout.lower()


class TestCLIFields:
    def test_fields(self, reports_dir: Path, fake_step, trended_payload: dict):
        fake_step([trended_payload])

        result = runner.invoke(app, ["fields", "weekly", "--config", str(reports_dir)])

        assert result.exit_code == 0
        assert result.stdout.split() == [
            "name",
            "year",
            "month",
            "day",
            "eVar2",
            "pageviews",
            "visits",
        ]


class TestCLITestConnection:
    def test_success(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(cli, "get_client", lambda: ReportClient(FakeApi()))
        result = runner.invoke(app, ["test-connection"])
        assert result.exit_code == 0
        assert "successful" in result.stdout.lower()

    def test_missing_credentials(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        """No credentials fails locally instead of pinging the service."""
        monkeypatch.delenv("REPORTFLOW_USERNAME", raising=False)
        monkeypatch.delenv("REPORTFLOW_SECRET", raising=False)
        monkeypatch.chdir(tmp_path)  # no .env to pick up
        monkeypatch.setattr(
            cli, "HttpReportingApi", lambda settings: pytest.fail("service was contacted")
        )

        result = runner.invoke(app, ["test-connection"])

        assert result.exit_code == 1
        assert "missing credentials" in result.stdout.lower()

    def test_failure(self, monkeypatch: pytest.MonkeyPatch):
        api = FakeApi(ping_error=ApiError("Bad Request", "The user credentials are invalid"))
        monkeypatch.setattr(cli, "get_client", lambda: ReportClient(api))

        result = runner.invoke(app, ["test-connection"])

        assert result.exit_code == 1
        assert "failed" in result.stdout.lower()


class TestCLIHelp:
    def test_main_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "report" in result.stdout.lower()

    @pytest.mark.parametrize("command", ["list", "validate", "fetch", "fields", "test-connection"])
    def test_command_help(self, command: str):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
