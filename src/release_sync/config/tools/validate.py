#!/usr/bin/env python3
"""
Release sync configuration checker.

Checks a configuration file before a run:
- YAML parsing and schema validation against the Pydantic models
- Environment variable references
- Spreadsheet column mapping
- Extraction rule patterns

Usage:
    python -m release_sync.config.tools.validate --config release-sync.yaml
"""

import argparse
import json
import logging
import os
import re
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ...models import ParseFailurePolicy
from ...sync.schema import validate as validate_column_mapping
from ..exceptions import ConfigurationError, ConfigurationValidationError
from ..loader import DEFAULT_CONFIG_FILENAME, ConfigurationLoader, read_config_file
from ..models import Config
from ..utils import column_mapping

_ENV_REFERENCE = re.compile(r"\$\{([^}:]+)(:[^}]*)?\}")


def _env_references(data: Any) -> Iterator[tuple[str, bool]]:
    """Yield ``(name, has_default)`` for every ``${VAR}`` in the raw YAML."""
    if isinstance(data, dict):
        data = list(data.values())
    if isinstance(data, list):
        for item in data:
            yield from _env_references(item)
    elif isinstance(data, str):
        for name, default in _ENV_REFERENCE.findall(data):
            yield name, bool(default)


class ConfigurationValidator:
    """Runs every check on one file and collects errors and warnings."""

    def __init__(self, config_path: str | None = None, verbose: bool = False):
        self.config_path = config_path or DEFAULT_CONFIG_FILENAME
        self.verbose = verbose
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.config: Config | None = None

    def validate_all(self) -> tuple[list[str], list[str]]:
        """Check the file.

        Returns:
            Tuple of (errors, warnings)
        """
        self.errors = []
        self.warnings = []
        self.config = None

        try:
            raw = read_config_file(Path(self.config_path))
        except ConfigurationError as e:
            self.errors.append(str(e))
            return self.errors, self.warnings

        self._check_environment(raw)
        self._check_schema()

        if self.config is not None:
            self._check_columns(self.config)
            self._check_rules(self.config)

        return self.errors, self.warnings

    def _check_environment(self, raw: dict[str, Any]) -> None:
        references: dict[str, bool] = {}
        for name, has_default in _env_references(raw):
            references[name] = references.get(name, False) or has_default

        for name in sorted(references):
            if not references[name] and os.getenv(name) is None:
                self.errors.append(f"Missing required environment variable: {name}")

        self._note(f"Found {len(references)} environment variable references")

    def _check_schema(self) -> None:
        try:
            self.config = ConfigurationLoader().load_from_file(self.config_path)
        except ConfigurationValidationError as e:
            self.errors.extend(f"Schema error: {message}" for message in e.messages())
        except ConfigurationError as e:
            self.errors.append(f"Configuration error: {e}")
        else:
            self._note("Schema validation passed")

    def _check_columns(self, config: Config) -> None:
        if not validate_column_mapping(column_mapping(config)):
            self.errors.append("Spreadsheet column mapping is invalid")
        elif config.spreadsheet.columns.auto_sync is None:
            self.warnings.append(
                "No auto-sync column configured; every row is treated as auto-synced"
            )

    def _check_rules(self, config: Config) -> None:
        work_items = config.work_items

        if not work_items.patterns:
            self.warnings.append(
                "No extraction rules configured; no work item will be resolved"
            )
            if work_items.parsing_behavior.on_parse_failure == ParseFailurePolicy.FAIL:
                self.errors.append(
                    "Parse failure policy 'fail' with no extraction rules "
                    "aborts every run"
                )

        if not config.spreadsheet.spreadsheet_id:
            self.warnings.append("No spreadsheet_id configured")

        self._note(f"Checked {len(work_items.patterns)} extraction rules")

    def _note(self, message: str) -> None:
        if self.verbose:
            print(message)


def format_report(config_path: str, errors: list[str], warnings: list[str]) -> str:
    """Render findings for a terminal."""
    lines = ["", "Release Sync Configuration Check", "=" * 50, f"Config file: {config_path}"]

    for title, findings in (("ERRORS", errors), ("WARNINGS", warnings)):
        if findings:
            lines.append(f"\n{title} ({len(findings)}):")
            lines.extend(f"  - {finding}" for finding in findings)

    lines.append(f"\nSUMMARY: {len(errors)} error(s), {len(warnings)} warning(s)")
    lines.append(
        "\nConfiguration validation failed!"
        if errors
        else "\nConfiguration validation passed!"
    )
    return "\n".join(lines)


def main() -> None:
    """Command line entry point; exits 1 when any error is found."""
    parser = argparse.ArgumentParser(
        description="Validate release sync configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check the default file
  release-sync-validate-config

  # Check a specific file and print JSON
  release-sync-validate-config --config production.yaml --json
        """,
    )
    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_FILENAME,
        help=f"Configuration file path (default: {DEFAULT_CONFIG_FILENAME})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print each check")
    parser.add_argument("--json", action="store_true", help="Print findings as JSON")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    errors, warnings = ConfigurationValidator(args.config, args.verbose).validate_all()

    if args.json:
        print(
            json.dumps(
                {
                    "config_file": args.config,
                    "validation_success": not errors,
                    "errors": errors,
                    "warnings": warnings,
                    "summary": {
                        "error_count": len(errors),
                        "warning_count": len(warnings),
                    },
                },
                indent=2,
            )
        )
    else:
        print(format_report(args.config, errors, warnings))

    sys.exit(1 if errors else 0)


if __name__ == "__main__":
    main()
