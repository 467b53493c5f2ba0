"""Spreadsheet column letter arithmetic."""


def column_to_index(column: str) -> int:
    """Convert a column letter to a 0-based index (``"A"`` -> 0, ``"AA"`` -> 26).

    Raises:
        ValueError: If the column reference is blank or not alphabetic
    """
    if not column or not column.strip():
        raise ValueError("Column letter cannot be empty")

    index = 0
    for char in column.strip().upper():
        if not ("A" <= char <= "Z"):
            raise ValueError(f"Invalid column letter: {column!r}")
        index = index * 26 + (ord(char) - ord("A") + 1)

    return index - 1


def index_to_column(index: int) -> str:
    """Convert a 0-based index back to a column letter.

    Raises:
        ValueError: If the index is negative
    """
    if index < 0:
        raise ValueError(f"Column index cannot be negative: {index}")

    letters = ""
    number = index + 1
    while number > 0:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters
