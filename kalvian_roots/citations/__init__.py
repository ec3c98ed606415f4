"""Citation generation for families and persons."""

from kalvian_roots.citations.dates import (
    expand_two_digit_year,
    format_marriage_date,
    normalize_date,
)
from kalvian_roots.citations.generator import ChildEntry, CitationGenerator
from kalvian_roots.citations.hiski import (
    EventType,
    HiskiCitation,
    HiskiQuery,
    HiskiService,
    format_date_for_hiski,
)

__all__ = [
    "ChildEntry",
    "CitationGenerator",
    "EventType",
    "HiskiCitation",
    "HiskiQuery",
    "HiskiService",
    "expand_two_digit_year",
    "format_date_for_hiski",
    "format_marriage_date",
    "normalize_date",
]
