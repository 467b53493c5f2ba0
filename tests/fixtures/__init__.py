"""Reusable fakes for the release sync boundary interfaces."""

from .constants import BASE_TIME
from .fakes import FakeChangeRequestSource, FakeWorkItemSource, RecordingSheetWriter

__all__ = [
    "BASE_TIME",
    "FakeChangeRequestSource",
    "FakeWorkItemSource",
    "RecordingSheetWriter",
]
