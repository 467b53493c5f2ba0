"""Command-line tools for working with release sync configuration files."""

from .validate import ConfigurationValidator

__all__ = ["ConfigurationValidator"]
