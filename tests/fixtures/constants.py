"""Shared test constants."""

from datetime import UTC, datetime

# A Monday, 10:30 in the default display time zone (UTC+8).
BASE_TIME = datetime(2024, 3, 4, 2, 30, tzinfo=UTC)
