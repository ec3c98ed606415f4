"""Date formatting rules for citations.

Dates are kept as printed in the book. Marriage years of children are
printed with two digits ("∞ 78") and are expanded from the parents' birth
years when no full date is known.
"""

import re

FULL_DATE = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$")
FOUR_DIGIT_YEAR = re.compile(r"^\d{4}$")
TWO_DIGIT_YEAR = re.compile(r"^\d{2}$")


def is_full_date(date: str | None) -> bool:
    return bool(date) and FULL_DATE.match(date.strip()) is not None


def is_two_digit_year(date: str | None) -> bool:
    return bool(date) and TWO_DIGIT_YEAR.match(date.strip()) is not None


def normalize_date(date: str) -> str:
    """Format a printed date for display.

    Full dates and four-digit years are shown as they are; the book's
    "n 1666" (approximately) becomes "about 1666".
    """
    trimmed = date.strip()
    if FULL_DATE.match(trimmed) or FOUR_DIGIT_YEAR.match(trimmed):
        return trimmed
    if trimmed.startswith("n "):
        return f"about {trimmed[2:].strip()}"
    return trimmed


def expand_two_digit_year(two_digit: str, parent_birth_year: int | None) -> str:
    """Expand a two-digit marriage year using the older parent's birth year.

    The century is taken from the parent's birth year plus twenty years.

    Args:
        two_digit: Year as printed, e.g. "78"
        parent_birth_year: Birth year of the older parent, if known

    Returns:
        Four-digit year, or the input unchanged if it cannot be expanded
    """
    value = two_digit.strip()
    if parent_birth_year is None or not TWO_DIGIT_YEAR.match(value):
        return two_digit
    century = (parent_birth_year + 20) // 100
    return str(century * 100 + int(value))


def format_marriage_date(
    marriage_date: str | None,
    full_marriage_date: str | None,
    parent_birth_year: int | None = None,
) -> str | None:
    """Choose and format the marriage date to display.

    Returns:
        The full date if known, else the expanded or printed marriage date,
        or None when neither is present
    """
    if full_marriage_date and full_marriage_date.strip():
        return normalize_date(full_marriage_date)
    if not marriage_date or not marriage_date.strip():
        return None
    if is_two_digit_year(marriage_date):
        return expand_two_digit_year(marriage_date, parent_birth_year)
    return normalize_date(marriage_date)
