"""Pydantic configuration models for release sync.

The configuration hierarchy follows this structure:
- Config: Root configuration
- SystemConfig: Process-wide settings (logging)
- WorkItemConfig: Identifier extraction rules, parse failure policy and
  team mapping
- UserMappingEntry: Author display names per platform handle
- SpreadsheetConfig: Target sheet, display time zone and column layout

Environment variables are substituted using the format ${VAR_NAME} with
optional defaults: ${VAR_NAME:default_value}
"""

import os
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import ColumnMapping, ParseFailurePolicy

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _require_text(value: str, what: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{what} cannot be empty")
    return value


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseConfigModel(BaseModel):
    """Base configuration model with environment variable substitution."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def substitute_env_vars(cls, values: Any) -> Any:
        """Substitute environment variables in string values.

        Supports formats:
        - ${VAR_NAME} - Required environment variable
        - ${VAR_NAME:default} - Optional with default value

        Raises:
            ValueError: If required environment variable is missing
        """
        if not isinstance(values, dict):
            return values

        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Required environment variable '{var_name}' not found")

        def substitute_value(value: Any) -> Any:
            if isinstance(value, str):
                return _ENV_PATTERN.sub(replacer, value)
            elif isinstance(value, dict):
                return {k: substitute_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [substitute_value(item) for item in value]
            else:
                return value

        return {key: substitute_value(value) for key, value in values.items()}


class SystemConfig(BaseConfigModel):
    """Process-wide settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="System-wide logging level"
    )


class ExtractionRuleConfig(BaseConfigModel):
    """One identifier extraction pattern."""

    name: str = Field(description="Rule name used in logs")

    pattern: str = Field(description="Regular expression with an identifier group")

    case_sensitive: bool = Field(default=False, description="Match case")

    capture_group: int = Field(
        default=1, ge=0, description="Capture group holding the identifier"
    )

    @field_validator("name", "pattern")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank names and patterns."""
        return _require_text(v, "Value")


class ParsingBehaviorConfig(BaseConfigModel):
    """What to do when no extraction rule matches."""

    on_parse_failure: ParseFailurePolicy = Field(
        default=ParseFailurePolicy.WARN_AND_CONTINUE,
        description="warn-and-continue keeps the record unresolved, fail aborts",
    )


class TeamMappingEntry(BaseConfigModel):
    """Tracker team name and the name shown in the report."""

    original_team_name: str = Field(description="Team name as the tracker reports it")
    display_name: str = Field(description="Team name shown in the report")

    @field_validator("original_team_name", "display_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank team names."""
        return _require_text(v, "Team name").strip()


class UserMappingEntry(BaseConfigModel):
    """Author display name and the handles it has on each platform."""

    display_name: str = Field(description="Name shown in the report")
    gitlab_user_id: str | None = Field(default=None, description="GitLab username")
    bitbucket_user_id: str | None = Field(
        default=None, description="Bitbucket username"
    )
    github_user_id: str | None = Field(default=None, description="GitHub login")

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        """Reject blank display names."""
        return _require_text(v, "Display name").strip()


class WorkItemConfig(BaseConfigModel):
    """Work item resolution settings."""

    patterns: list[ExtractionRuleConfig] = Field(
        default_factory=list, description="Extraction rules in evaluation order"
    )

    parsing_behavior: ParsingBehaviorConfig = Field(
        default_factory=ParsingBehaviorConfig,
        description="Behavior when no rule matches",
    )

    team_mapping: list[TeamMappingEntry] = Field(
        default_factory=list,
        description="Team display names; when set, unmapped teams are filtered",
    )


class ColumnMappingConfig(BaseConfigModel):
    """Spreadsheet column of each report field."""

    repository: str = Field(default="Z", description="Repository name column")
    feature: str = Field(default="B", description="Feature column")
    team: str = Field(default="D", description="Team column")
    authors: str = Field(default="W", description="Authors column")
    links: str = Field(default="X", description="Change request links column")
    unique_key: str = Field(default="Y", description="Unique key column")
    merged_at: str = Field(default="G", description="Merge time column")
    auto_sync: str | None = Field(default="F", description="Auto-sync flag column")

    @field_validator(
        "repository",
        "feature",
        "team",
        "authors",
        "links",
        "unique_key",
        "merged_at",
        "auto_sync",
    )
    @classmethod
    def normalize_column(cls, v: str | None) -> str | None:
        """Upper-case and trim column letters."""
        if v is None:
            return None
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_mapping(self) -> "ColumnMappingConfig":
        """Reject malformed or overlapping columns."""
        if not self.to_mapping().is_valid():
            raise ValueError(
                "Column mapping must use distinct columns between A and ZZ: "
                f"{self.to_mapping()}"
            )
        return self

    def to_mapping(self) -> ColumnMapping:
        """Convert to the domain column mapping."""
        return ColumnMapping(
            repository=self.repository,
            feature=self.feature,
            team=self.team,
            authors=self.authors,
            links=self.links,
            unique_key=self.unique_key,
            merged_at=self.merged_at,
            auto_sync=self.auto_sync,
        )


class SpreadsheetConfig(BaseConfigModel):
    """Target spreadsheet settings."""

    spreadsheet_id: str | None = Field(default=None, description="Spreadsheet ID")

    sheet_name: str = Field(default="Sheet1", description="Worksheet name")

    display_timezone_offset_hours: float = Field(
        default=8,
        ge=-12,
        le=14,
        description="UTC offset merge times are displayed in",
    )

    columns: ColumnMappingConfig = Field(
        default_factory=ColumnMappingConfig, description="Column layout"
    )

    @field_validator("sheet_name")
    @classmethod
    def validate_sheet_name(cls, v: str) -> str:
        """Reject a blank worksheet name."""
        return _require_text(v, "Sheet name")


class Config(BaseConfigModel):
    """Root configuration."""

    system: SystemConfig = Field(
        default_factory=SystemConfig, description="Process-wide settings"
    )

    work_items: WorkItemConfig = Field(
        default_factory=WorkItemConfig, description="Work item resolution"
    )

    user_mapping: list[UserMappingEntry] = Field(
        default_factory=list, description="Author display names"
    )

    spreadsheet: SpreadsheetConfig = Field(
        default_factory=SpreadsheetConfig, description="Target spreadsheet"
    )
