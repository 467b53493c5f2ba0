"""Configuration loading.

Configuration comes from a YAML file, a plain dictionary or the model
defaults. A file is looked up, in order, at an explicit path, in the
current directory, at ``RELEASE_SYNC_CONFIG_PATH`` and in
``~/.release-sync/``. One loaded configuration is kept per process.
"""

import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .models import Config

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "RELEASE_SYNC_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "release-sync.yaml"


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file reads as ``{}``."""
    if not path.is_file():
        reason = "not found" if not path.exists() else "is not a file"
        raise ConfigurationFileError(f"Configuration file {reason}: {path}", str(path))

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationFileError(
            f"Failed to parse YAML configuration: {e}", str(path)
        ) from e
    except OSError as e:
        raise ConfigurationFileError(
            f"Failed to read configuration file: {e}", str(path)
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationFileError(
            f"Configuration root must be a mapping, got {type(data).__name__}",
            str(path),
        )
    return data


def _rule_errors(config: Config) -> list[str]:
    """Extraction rule problems the schema cannot express."""
    errors = []
    seen: set[str] = set()

    for rule in config.work_items.patterns:
        if rule.name in seen:
            errors.append(f"Duplicate extraction rule name '{rule.name}'")
        seen.add(rule.name)

        try:
            groups = re.compile(rule.pattern).groups
        except re.error as e:
            errors.append(f"Extraction rule '{rule.name}' has invalid pattern: {e}")
            continue

        if rule.capture_group > groups:
            errors.append(
                f"Extraction rule '{rule.name}' uses capture group "
                f"{rule.capture_group} but the pattern has {groups}"
            )

    return errors


class ConfigurationLoader:
    """Builds a validated ``Config`` and remembers where it came from."""

    def __init__(self) -> None:
        self._config: Config | None = None
        self._source: Path | None = None

    def load_from_file(self, config_path: str | Path, validate: bool = True) -> Config:
        """Load a YAML configuration file.

        ``validate`` additionally compiles every extraction rule pattern and
        checks its capture group before the configuration is accepted.

        Raises:
            ConfigurationFileError: If the file is missing, unreadable or not
                a YAML mapping
            ConfigurationValidationError: If the schema or a rule is invalid
        """
        path = Path(config_path)
        config = self._build(read_config_file(path), validate)
        self._source = path.resolve()
        logger.info(
            f"Loaded configuration from {self._source} "
            f"({len(config.work_items.patterns)} extraction rules)"
        )
        return config

    def load_from_dict(
        self, config_data: dict[str, Any], validate: bool = True
    ) -> Config:
        """Load configuration from an in-memory mapping."""
        config = self._build(config_data, validate)
        self._source = None
        return config

    def load_default(self) -> Config:
        """Load model defaults only.

        The defaults have no extraction rules, so every record stays
        unresolved until patterns are configured.
        """
        return self.load_from_dict({})

    def find_config_file(
        self, filename: str = DEFAULT_CONFIG_FILENAME
    ) -> Path | None:
        """Return the first existing candidate file, or None."""
        return next(
            (path for path in self._candidate_paths(filename) if path.is_file()),
            None,
        )

    def auto_load(self, config_filename: str = DEFAULT_CONFIG_FILENAME) -> Config:
        """Load the first configuration file found in the standard locations.

        Raises:
            ConfigurationFileError: If no candidate location has the file
        """
        path = self.find_config_file(config_filename)
        if path is None:
            searched = ", ".join(str(p) for p in self._candidate_paths(config_filename))
            raise ConfigurationFileError(
                f"No configuration file '{config_filename}' found (searched: {searched})"
            )
        return self.load_from_file(path)

    @staticmethod
    def _candidate_paths(filename: str) -> Iterator[Path]:
        yield Path.cwd() / filename

        env_path = os.getenv(CONFIG_PATH_ENV_VAR)
        if env_path:
            path = Path(env_path)
            yield path if path.is_file() else path / filename

        yield Path.home() / ".release-sync" / filename

    def _build(self, config_data: dict[str, Any], validate: bool) -> Config:
        try:
            config = Config(**config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}",
                validation_errors=e.errors(include_url=False),
            ) from e

        if validate:
            errors = _rule_errors(config)
            if errors:
                raise ConfigurationValidationError(
                    f"Configuration validation failed: {'; '.join(errors)}",
                    validation_errors=errors,
                )

        self._config = config
        return config

    @property
    def config(self) -> Config | None:
        """Most recently loaded configuration."""
        return self._config

    @property
    def config_file_path(self) -> Path | None:
        """Resolved file the configuration came from, if any."""
        return self._source

    @property
    def is_loaded(self) -> bool:
        return self._config is not None


_loader = ConfigurationLoader()


def load_config(
    config_path: str | Path | None = None, auto_discover: bool = True
) -> Config:
    """Load the process configuration.

    An explicit path wins. Without one, the standard locations are searched
    when ``auto_discover`` is set; otherwise the defaults are used.

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid
    """
    try:
        if config_path:
            return _loader.load_from_file(config_path)
        if auto_discover:
            return _loader.auto_load()
        return _loader.load_default()
    except (ConfigurationFileError, ConfigurationValidationError) as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


def get_config() -> Config:
    """Return the process configuration loaded by ``load_config``."""
    if _loader.config is None:
        raise ConfigurationError("No configuration loaded. Call load_config() first.")
    return _loader.config


def get_loader() -> ConfigurationLoader:
    return _loader


def reload_config() -> Config:
    """Re-read the file the process configuration was loaded from.

    Raises:
        ConfigurationError: If nothing was loaded, or it did not come from a file
    """
    if not _loader.is_loaded:
        raise ConfigurationError("Cannot reload: no configuration was previously loaded")

    if _loader.config_file_path is None:
        raise ConfigurationError("Cannot reload: configuration was not loaded from a file")

    return _loader.load_from_file(_loader.config_file_path)
