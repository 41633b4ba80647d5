"""
Delimiter-sniffing, quote-aware CSV parsing.

Steps (in order):
- strip a leading BOM
- normalize CRLF/CR -> LF
- sniff the delimiter from the first line
- split non-empty lines on the delimiter, ignoring delimiters inside quotes
- unquote fully quoted fields
- decide whether the first row is a header

Sniffing and header detection are heuristics. Both sit behind small
protocols so a caller can swap in a stricter or fixed policy.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from typing import List, Optional, Protocol, Sequence, Tuple

from .models import ParsedTable
from .rules import BOM, DELIMITER_CANDIDATES, QUOTE

log = logging.getLogger(__name__)


class DelimiterSniffer(Protocol):
    def sniff(self, text: str) -> str:
        """Pick a delimiter for normalized (BOM-free, LF-only) text."""
        ...


class HeaderClassifier(Protocol):
    def is_header(self, row: Sequence[str]) -> bool:
        ...


def _check_delimiter(delimiter: str) -> str:
    # the row splitter scans one character at a time
    if len(delimiter) != 1 or delimiter in (QUOTE, "\n"):
        raise ValueError(f"delimiter must be a single character other than quote or newline, got {delimiter!r}")
    return delimiter


class FirstLineSniffer:
    """
    Choose the candidate that splits the first line into the most fields.

    Only a strictly greater count replaces the current best, so ties go to
    the earlier candidate. Quotes are not considered here.
    """

    def __init__(self, candidates: Sequence[str] = DELIMITER_CANDIDATES):
        self.candidates = tuple(_check_delimiter(d) for d in candidates)
        if not self.candidates:
            raise ValueError("at least one delimiter candidate is required")

    def sniff(self, text: str) -> str:
        first_line = text.split("\n", 1)[0]
        best = self.candidates[0]
        best_count = 0
        for delim in self.candidates:
            count = len(first_line.split(delim))
            if count > best_count:
                best, best_count = delim, count
        return best


class FixedDelimiter:
    def __init__(self, delimiter: str):
        self.delimiter = _check_delimiter(delimiter)

    def sniff(self, text: str) -> str:
        return self.delimiter


# Mirrors the string-to-number grammar of JavaScript's Number(): decimal
# literals with optional sign and exponent, signed Infinity, and unsigned
# hex/octal/binary literals.
_NUMERIC_RE = re.compile(
    r"""
    [+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |0[xX][0-9a-fA-F]+
    |0[oO][0-7]+
    |0[bB][01]+
    """,
    re.VERBOSE | re.ASCII,
)


def looks_numeric(value: str) -> bool:
    # empty (or all-whitespace) counts as non-numeric
    stripped = value.strip()
    return bool(stripped) and _NUMERIC_RE.fullmatch(stripped) is not None


class NonNumericHeaderClassifier:
    """
    First row is a header when none of its fields parse as a number.

    Known misses: a single all-text data row is taken as a header, and a
    header of numeric labels ("2023", "2024") is taken as data.
    """

    def is_header(self, row: Sequence[str]) -> bool:
        return all(not looks_numeric(cell) for cell in row)


class NeverHeader:
    def is_header(self, row: Sequence[str]) -> bool:
        return False


DEFAULT_SNIFFER = FirstLineSniffer()
DEFAULT_CLASSIFIER = NonNumericHeaderClassifier()


def normalize_text(text: str) -> str:
    if text.startswith(BOM):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_line(line: str, delimiter: str) -> Tuple[List[str], bool]:
    """
    Split one line on ``delimiter`` outside double quotes.

    Returns the raw (still quoted) fields and whether the line ended inside
    an open quote. Each quote toggles the state, so an escaped ``""`` leaves
    it unchanged.
    """
    fields: List[str] = []
    buf: List[str] = []
    inside = False

    for ch in line:
        if ch == QUOTE:
            inside = not inside
            buf.append(ch)
        elif ch == delimiter and not inside:
            fields.append("".join(buf))
            buf = []
        else:
            buf.append(ch)

    fields.append("".join(buf))
    return fields, inside


def unquote_field(field: str) -> str:
    if len(field) >= 2 and field.startswith(QUOTE) and field.endswith(QUOTE):
        return field[1:-1].replace(QUOTE * 2, QUOTE)
    return field


def sniff_delimiter(text: str, sniffer: Optional[DelimiterSniffer] = None) -> str:
    return (sniffer or DEFAULT_SNIFFER).sniff(normalize_text(text))


def sniff_and_parse(
    text: str,
    sniffer: Optional[DelimiterSniffer] = None,
    classifier: Optional[HeaderClassifier] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[str, ParsedTable]:
    """Parse ``text`` and also return the delimiter that was used."""
    logger = logger or log
    text = normalize_text(text)
    delimiter = (sniffer or DEFAULT_SNIFFER).sniff(text)

    rows: List[List[str]] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line:
            continue
        fields, unterminated = split_line(line, delimiter)
        if unterminated:
            # rest of the line after the open quote stays in one field
            logger.warning("Unterminated quoted field on line %d", lineno)
        rows.append([unquote_field(f) for f in fields])

    if not rows:
        return delimiter, ParsedTable(rows=[])

    if (classifier or DEFAULT_CLASSIFIER).is_header(rows[0]):
        return delimiter, ParsedTable(headers=rows[0], rows=rows[1:])

    return delimiter, ParsedTable(rows=rows)


def parse_csv(
    text: str,
    sniffer: Optional[DelimiterSniffer] = None,
    classifier: Optional[HeaderClassifier] = None,
    logger: Optional[logging.Logger] = None,
) -> ParsedTable:
    """Parse delimited text into a ParsedTable. Never raises for str input."""
    return sniff_and_parse(text, sniffer=sniffer, classifier=classifier, logger=logger)[1]


def to_csv_text(table: ParsedTable, delimiter: str = ",") -> str:
    """Serialize a table back to delimited text, quoting only where needed."""
    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=delimiter, lineterminator="\n")

    if table.headers is not None:
        writer.writerow(table.headers)
    for row in table.rows:
        writer.writerow(row)

    return outp.getvalue()
