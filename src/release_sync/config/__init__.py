"""Configuration management for release sync.

Example usage:
    from release_sync.config import build_extraction_rules, load_config

    config = load_config("release-sync.yaml")
    rules, policy = build_extraction_rules(config)
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .loader import (
    ConfigurationLoader,
    get_config,
    get_loader,
    load_config,
    reload_config,
)
from .models import (
    ColumnMappingConfig,
    Config,
    ExtractionRuleConfig,
    LogLevel,
    ParsingBehaviorConfig,
    SpreadsheetConfig,
    SystemConfig,
    TeamMappingEntry,
    UserMappingEntry,
    WorkItemConfig,
)
from .utils import (
    build_extraction_rules,
    build_team_mappings,
    build_user_mappings,
    column_mapping,
    get_config_summary,
)

__all__ = [
    "ColumnMappingConfig",
    "Config",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "ExtractionRuleConfig",
    "LogLevel",
    "ParsingBehaviorConfig",
    "SpreadsheetConfig",
    "SystemConfig",
    "TeamMappingEntry",
    "UserMappingEntry",
    "WorkItemConfig",
    "build_extraction_rules",
    "build_team_mappings",
    "build_user_mappings",
    "column_mapping",
    "get_config",
    "get_config_summary",
    "get_loader",
    "load_config",
    "reload_config",
]
