"""Unit tests for the configuration validation CLI."""

import json
from unittest.mock import patch

import pytest

from release_sync.config.tools.validate import (
    ConfigurationValidator,
    format_report,
    main,
)

VALID_YAML = r"""
work_items:
  patterns:
    - name: feature-branch
      pattern: 'feature/(\d+)-'
spreadsheet:
  spreadsheet_id: sheet-1
"""


@pytest.fixture
def write_config(tmp_path):
    def factory(content: str):
        path = tmp_path / "release-sync.yaml"
        path.write_text(content, encoding="utf-8")
        return str(path)

    return factory


class TestConfigurationValidator:
    def test_valid_file_has_no_errors(self, write_config):
        errors, warnings = ConfigurationValidator(write_config(VALID_YAML)).validate_all()

        assert errors == []
        assert warnings == []

    def test_missing_file(self, tmp_path):
        errors, _ = ConfigurationValidator(str(tmp_path / "nope.yaml")).validate_all()

        assert errors == [f"Configuration file not found: {tmp_path / 'nope.yaml'}"]

    def test_missing_environment_variable_reported(self, write_config, monkeypatch):
        monkeypatch.delenv("RELEASE_SHEET_ID", raising=False)
        path = write_config("spreadsheet:\n  spreadsheet_id: ${RELEASE_SHEET_ID}\n")

        errors, _ = ConfigurationValidator(path).validate_all()

        assert "Missing required environment variable: RELEASE_SHEET_ID" in errors

    def test_overlapping_columns_reported(self, write_config):
        path = write_config("spreadsheet:\n  columns:\n    team: B\n")

        errors, _ = ConfigurationValidator(path).validate_all()

        assert any("distinct columns" in error for error in errors)

    def test_no_rules_is_a_warning(self, write_config):
        _, warnings = ConfigurationValidator(write_config("{}\n")).validate_all()

        assert any("No extraction rules" in warning for warning in warnings)

    def test_fail_policy_without_rules_is_an_error(self, write_config):
        path = write_config(
            "work_items:\n  parsing_behavior:\n    on_parse_failure: fail\n"
        )

        errors, _ = ConfigurationValidator(path).validate_all()

        assert any("aborts every run" in error for error in errors)


class TestMain:
    def test_json_output_and_success_exit(self, write_config, capsys):
        path = write_config(VALID_YAML)

        with patch("sys.argv", ["validate", "--config", path, "--json"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 0
        result = json.loads(capsys.readouterr().out)
        assert result["validation_success"] is True
        assert result["summary"]["error_count"] == 0

    def test_errors_exit_with_one(self, write_config, capsys):
        path = write_config("work_items: [unclosed")

        with patch("sys.argv", ["validate", "--config", path]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "Configuration validation failed!" in capsys.readouterr().out


class TestFormatReport:
    def test_lists_findings_under_headings(self):
        report = format_report("release-sync.yaml", ["bad column"], ["no rules"])

        assert "ERRORS (1):\n  - bad column" in report
        assert "WARNINGS (1):\n  - no rules" in report
        assert report.endswith("Configuration validation failed!")

    def test_clean_report_passes(self):
        report = format_report("release-sync.yaml", [], [])

        assert "ERRORS" not in report
        assert report.endswith("Configuration validation passed!")
