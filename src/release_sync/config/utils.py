"""Conversion of validated configuration into core objects."""

from typing import Any

from ..models import ColumnMapping, ParseFailurePolicy
from ..sync.mapping import TeamMapping, UserMapping
from ..sync.resolver import ExtractionRule
from .models import Config


def build_extraction_rules(
    config: Config,
) -> tuple[list[ExtractionRule], ParseFailurePolicy]:
    """Return the extraction rules in configured order and the failure policy."""
    rules = [
        ExtractionRule(
            name=rule.name,
            pattern=rule.pattern,
            case_sensitive=rule.case_sensitive,
            capture_group_index=rule.capture_group,
        )
        for rule in config.work_items.patterns
    ]
    return rules, config.work_items.parsing_behavior.on_parse_failure


def build_team_mappings(config: Config) -> list[TeamMapping]:
    return [
        TeamMapping(
            original_team_name=entry.original_team_name,
            display_name=entry.display_name,
        )
        for entry in config.work_items.team_mapping
    ]


def build_user_mappings(config: Config) -> list[UserMapping]:
    return [
        UserMapping(
            display_name=entry.display_name,
            gitlab_user_id=entry.gitlab_user_id,
            bitbucket_user_id=entry.bitbucket_user_id,
            github_user_id=entry.github_user_id,
        )
        for entry in config.user_mapping
    ]


def column_mapping(config: Config) -> ColumnMapping:
    return config.spreadsheet.columns.to_mapping()


def get_config_summary(config: Config) -> dict[str, Any]:
    """Get a summary of configuration for logging.

    Args:
        config: Configuration to summarize

    Returns:
        Configuration summary dictionary
    """
    return {
        "system": {"log_level": config.system.log_level.value},
        "work_items": {
            "rules": [rule.name for rule in config.work_items.patterns],
            "on_parse_failure": config.work_items.parsing_behavior.on_parse_failure.value,
            "team_mappings": len(config.work_items.team_mapping),
        },
        "user_mappings": len(config.user_mapping),
        "spreadsheet": {
            "spreadsheet_id": config.spreadsheet.spreadsheet_id,
            "sheet_name": config.spreadsheet.sheet_name,
            "display_timezone_offset_hours": (
                config.spreadsheet.display_timezone_offset_hours
            ),
            "columns": config.spreadsheet.columns.model_dump(),
        },
    }
