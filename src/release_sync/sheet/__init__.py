"""Spreadsheet row encoding and an in-memory sheet backend."""

from .columns import column_to_index, index_to_column
from .memory import InMemorySheet
from .row_codec import RowCodec, hyperlink_formula

__all__ = [
    "InMemorySheet",
    "RowCodec",
    "column_to_index",
    "hyperlink_formula",
    "index_to_column",
]
