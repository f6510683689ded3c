"""
Pattern-driven identifier formatting for invoices, receipts and client numbers.

Each clinic configures its own patterns in its settings, e.g. "INV-0000" or
"HH/000/year", so numbering formats change without code changes.
"""
import re
from datetime import date
from typing import Optional, Union

_YEAR_TOKEN = re.compile('year', re.IGNORECASE)
_ZERO_RUN = re.compile('0+')


def generate_next_id(pattern: Optional[str], sequence_number: Union[int, str], year: Optional[int] = None) -> str:
    """
    Format a sequence number according to a clinic-defined pattern.

    Rules:
    - Empty pattern: the bare number.
    - Every "year" (any case) becomes the four-digit year.
    - The first run of zeros outside the year tokens sets the padding width
      and is replaced (first occurrence only) by the zero-padded number, so
      "HH/year/000" in 2026 gives "HH/2026/001". Numbers wider than the run
      are never truncated.
    - Only when the pattern has no zeros of its own is the first zero run of
      the substituted year used ("R-year-" in 2005 gives "R-2035-").
    - No run of zeros at all: the number is appended.

    Never raises: identifier generation must not block the creation of the
    record it numbers.

    Args:
        pattern: Pattern string or None
        sequence_number: Ordinal of the record
        year: Year to substitute (defaults to the current calendar year)

    Returns:
        Formatted identifier

    Examples:
        generate_next_id("HH/000/year", 1, year=2025) -> "HH/001/2025"
        generate_next_id("INV-0000", 42) -> "INV-0042"
        generate_next_id("PREFIX", 7) -> "PREFIX7"
        generate_next_id(None, 5) -> "5"
    """
    number = str(sequence_number)
    if not pattern:
        return number

    current_year = str(year if year is not None else date.today().year)

    # Look for the placeholder outside the year tokens first
    segments = _YEAR_TOKEN.split(pattern)
    for i, segment in enumerate(segments):
        zero_match = _ZERO_RUN.search(segment)
        if zero_match is not None:
            segments[i] = _pad_run(segment, zero_match, number)
            return current_year.join(segments)

    formatted = current_year.join(segments)
    zero_match = _ZERO_RUN.search(formatted)
    if zero_match is None:
        return f"{formatted}{number}"
    return _pad_run(formatted, zero_match, number)


def _pad_run(text: str, zero_match, number: str) -> str:
    width = zero_match.end() - zero_match.start()
    return f"{text[:zero_match.start()]}{number.rjust(width, '0')}{text[zero_match.end():]}"
