"""YAML loader for report definitions.

report definitions live in yaml next to the pipeline, one or many per file:

    reports:
      - name: weekly_pageviews
        report_suite_id: mysuite
        start_date: 2015-01-01
        end_date: 2015-01-30
        granularity: week
        metrics: pageviews,visits
        elements: eVar2

credentials are not read from these files, see reportflow.config.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from reportflow.exceptions import ConfigurationError
from reportflow.models.descriptor import ReportConfig

logger = logging.getLogger(__name__)


class ReportConfigLoader:
    """Registry of named report configurations loaded from yaml."""

    def __init__(self) -> None:
        self.reports: dict[str, ReportConfig] = {}

    def load(self, path: str | Path) -> None:
        """Load a single yaml file or every yaml file under a directory."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Report config not found: {path}")

        if path.is_file():
            self._load_file(path)
            return

        # support both .yaml and .yml
        yaml_files = sorted(path.glob("**/*.yaml")) + sorted(path.glob("**/*.yml"))
        if not yaml_files:
            raise ValueError(f"No YAML files found in {path}")

        for yaml_file in yaml_files:
            self._load_file(yaml_file)

    def _load_file(self, path: Path) -> None:
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            return  # empty file

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping with a 'reports' list")

        for report_data in data.get("reports", []) or []:
            try:
                config = ReportConfig.model_validate(report_data)
            except ValidationError as e:
                raise ConfigurationError(f"{path}: invalid report definition: {e}") from e

            if config.name in self.reports:
                raise ValueError(f"Duplicate report: {config.name}")
            self.reports[config.name] = config

        logger.debug("Loaded %s (%d reports so far)", path, len(self.reports))

    def get_report(self, name: str) -> ReportConfig:
        """Get a report configuration by name."""
        if name not in self.reports:
            raise KeyError(f"Unknown report: {name}")
        return self.reports[name]
