"""
Range helpers for extracolumn.

Builds and validates full-column A1 references like ``Diagnostics!F:F`` and
extracts spreadsheet IDs from URLs.
"""

from __future__ import annotations

import re

# <Sheet>!<Col>:<Col>, sheet either bare or single-quoted with '' escapes
_COLUMN_RANGE_PATTERN = re.compile(
    r"^(?P<sheet>'(?:[^']|'')+'|[^'!:]+)!(?P<start>[A-Za-z]+):(?P<end>[A-Za-z]+)$"
)
_SPREADSHEET_URL_PATTERN = re.compile(r"docs\.google\.com/spreadsheets/d/([a-zA-Z0-9_-]+)")


class InvalidRangeError(ValueError):
    """Raised when a range reference is not a single full column."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid range reference '{reference}': {reason}")


def letter_to_column_index(letter: str) -> int:
    """Convert A1 notation letter(s) to a zero-based column index.

    Examples:
        A -> 0, B -> 1, Z -> 25, AA -> 26, AB -> 27, AAA -> 702
    """
    if not letter.isalpha() or not letter.isascii():
        raise ValueError(f"Invalid column letter: {letter!r}")
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def escape_sheet_title(title: str) -> str:
    """Escape sheet title for use in A1 notation ranges.

    Sheet names containing spaces, special characters, or starting with
    digits need to be wrapped in single quotes.
    """
    needs_quoting = (
        " " in title
        or "'" in title
        or "!" in title
        or ":" in title
        or (len(title) > 0 and title[0].isdigit())
    )
    if needs_quoting:
        escaped = title.replace("'", "''")
        return f"'{escaped}'"
    return title


def column_range(sheet_title: str, column: str) -> str:
    """Build a full-column reference for a sheet.

    Example:
        ("Diagnostics", "f") -> "Diagnostics!F:F"
        ("My Sheet", "B") -> "'My Sheet'!B:B"
    """
    if not sheet_title:
        raise InvalidRangeError(f"!{column}:{column}", "sheet title is empty")
    letter = column.strip().upper()
    # Rejects anything that is not a column letter
    try:
        letter_to_column_index(letter)
    except ValueError as e:
        raise InvalidRangeError(f"{sheet_title}!{column}:{column}", str(e)) from e
    return f"{escape_sheet_title(sheet_title)}!{letter}:{letter}"


def validate_column_range(reference: str) -> str:
    """Check that ``reference`` names exactly one full column of one sheet.

    Returns the reference unchanged so it can be used inline.

    Raises:
        InvalidRangeError: If the reference is malformed, spans several
            columns, or is bounded by row numbers.
    """
    match = _COLUMN_RANGE_PATTERN.match(reference)
    if not match:
        raise InvalidRangeError(reference, "expected <Sheet>!<Col>:<Col>")
    if match.group("start").upper() != match.group("end").upper():
        raise InvalidRangeError(reference, "only a single column can be exported")
    return reference


def parse_spreadsheet_id(id_or_url: str) -> str:
    """Extract spreadsheet ID from a URL or return as-is if already an ID."""
    # https://docs.google.com/spreadsheets/d/SPREADSHEET_ID/edit...
    match = _SPREADSHEET_URL_PATTERN.search(id_or_url)
    if match:
        return match.group(1)
    return id_or_url.strip()
