"""Unit tests for configuration loading and conversion helpers."""

from unittest.mock import patch

import pytest

from release_sync.config import loader as loader_module
from release_sync.config.exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from release_sync.config.loader import ConfigurationLoader
from release_sync.config.utils import (
    build_extraction_rules,
    build_team_mappings,
    build_user_mappings,
    column_mapping,
    get_config_summary,
)
from release_sync.models import ParseFailurePolicy, Platform
from release_sync.sync.exceptions import ReleaseSyncError

CONFIG_YAML = r"""
system:
  log_level: DEBUG
work_items:
  patterns:
    - name: feature-branch
      pattern: 'feature/(\d+)-'
    - name: vsts-title
      pattern: 'VSTS(\d+)'
      case_sensitive: true
  parsing_behavior:
    on_parse_failure: fail
  team_mapping:
    - original_team_name: Team Payments
      display_name: Payments
user_mapping:
  - display_name: Alice Chen
    gitlab_user_id: alice
    github_user_id: alice-c
spreadsheet:
  spreadsheet_id: sheet-1
  sheet_name: Releases
  columns:
    repository: A
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "release-sync.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class TestConfigurationLoader:
    """Tests for ConfigurationLoader."""

    def test_load_from_file(self, config_file):
        """
        Why: YAML files are the primary configuration source
        What: Every section of a complete file is loaded
        How: Writes a file to tmp_path and loads it
        """
        loader = ConfigurationLoader()

        config = loader.load_from_file(config_file)

        assert config.system.log_level.value == "DEBUG"
        assert [rule.name for rule in config.work_items.patterns] == [
            "feature-branch",
            "vsts-title",
        ]
        assert config.spreadsheet.columns.repository == "A"
        assert loader.config_file_path == config_file.resolve()
        assert loader.is_loaded

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationFileError, match="not found"):
            ConfigurationLoader().load_from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("work_items: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationFileError, match="Failed to parse YAML"):
            ConfigurationLoader().load_from_file(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationFileError, match="mapping"):
            ConfigurationLoader().load_from_file(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = ConfigurationLoader().load_from_file(path)

        assert config.work_items.patterns == []

    def test_schema_errors_are_validation_errors(self):
        with pytest.raises(ConfigurationValidationError) as exc_info:
            ConfigurationLoader().load_from_dict({"unknown_section": {}})

        assert exc_info.value.validation_errors
        assert exc_info.value.details["error_count"] == 1
        assert exc_info.value.messages()[0].startswith("unknown_section: ")

    def test_file_errors_carry_the_path(self, tmp_path):
        path = tmp_path / "missing.yaml"

        with pytest.raises(ConfigurationFileError) as exc_info:
            ConfigurationLoader().load_from_file(path)

        assert exc_info.value.file_path == str(path)
        assert exc_info.value.details == {"file_path": str(path)}
        assert isinstance(exc_info.value, ReleaseSyncError)

    def test_uncompilable_pattern_rejected(self):
        """
        Why: A broken pattern should be caught before a run, not per record
        What: Loading fails with the rule name in the message
        How: Loads a dictionary with an unbalanced parenthesis
        """
        data = {"work_items": {"patterns": [{"name": "bad", "pattern": "feature/(\\d+"}]}}

        with pytest.raises(ConfigurationValidationError, match="'bad'"):
            ConfigurationLoader().load_from_dict(data)

    def test_uncompilable_pattern_allowed_without_validation(self):
        data = {"work_items": {"patterns": [{"name": "bad", "pattern": "("}]}}

        config = ConfigurationLoader().load_from_dict(data, validate=False)

        assert config.work_items.patterns[0].pattern == "("

    def test_capture_group_beyond_pattern_rejected(self):
        data = {
            "work_items": {
                "patterns": [{"name": "one", "pattern": r"(\d+)", "capture_group": 2}]
            }
        }

        with pytest.raises(ConfigurationValidationError, match="capture group 2"):
            ConfigurationLoader().load_from_dict(data)

    def test_duplicate_rule_names_rejected(self):
        rule = {"name": "dup", "pattern": r"(\d+)"}

        with pytest.raises(ConfigurationValidationError, match="Duplicate"):
            ConfigurationLoader().load_from_dict({"work_items": {"patterns": [rule, rule]}})

    def test_find_config_file_uses_environment_path(self, config_file, monkeypatch):
        monkeypatch.chdir(config_file.parent.parent)
        monkeypatch.setenv("RELEASE_SYNC_CONFIG_PATH", str(config_file.parent))

        assert ConfigurationLoader().find_config_file() == config_file


class TestGlobalLoader:
    """Tests for the module-level helpers."""

    def test_load_get_and_reload(self, config_file):
        with patch.object(loader_module, "_loader", ConfigurationLoader()):
            loaded = loader_module.load_config(config_file)

            assert loader_module.get_config() is loaded
            assert loader_module.reload_config().spreadsheet.sheet_name == "Releases"

    def test_get_config_before_load(self):
        with patch.object(loader_module, "_loader", ConfigurationLoader()):
            with pytest.raises(ConfigurationError, match="No configuration loaded"):
                loader_module.get_config()

    def test_load_config_wraps_errors(self, tmp_path):
        with patch.object(loader_module, "_loader", ConfigurationLoader()):
            with pytest.raises(ConfigurationError, match="Failed to load"):
                loader_module.load_config(tmp_path / "missing.yaml")

    def test_reload_requires_file(self):
        with patch.object(loader_module, "_loader", ConfigurationLoader()):
            loader_module.load_config(auto_discover=False)

            with pytest.raises(ConfigurationError, match="not loaded from a file"):
                loader_module.reload_config()


class TestConversionHelpers:
    def test_build_extraction_rules(self, config_file):
        config = ConfigurationLoader().load_from_file(config_file)

        rules, policy = build_extraction_rules(config)

        assert [rule.name for rule in rules] == ["feature-branch", "vsts-title"]
        assert rules[0].pattern == r"feature/(\d+)-"
        assert rules[1].case_sensitive is True
        assert rules[0].capture_group_index == 1
        assert policy == ParseFailurePolicy.FAIL

    def test_build_mappings(self, config_file):
        config = ConfigurationLoader().load_from_file(config_file)

        teams = build_team_mappings(config)
        users = build_user_mappings(config)

        assert teams[0].display_name == "Payments"
        assert users[0].user_id_for(Platform.GITHUB) == "alice-c"
        assert users[0].user_id_for(Platform.BITBUCKET) is None
        assert column_mapping(config).repository == "A"

    def test_config_summary(self, config_file):
        config = ConfigurationLoader().load_from_file(config_file)

        summary = get_config_summary(config)

        assert summary["work_items"]["on_parse_failure"] == "fail"
        assert summary["spreadsheet"]["columns"]["repository"] == "A"
        assert summary["user_mappings"] == 1
