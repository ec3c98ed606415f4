"""Family ID registry.

Validates family identifiers against a fixed catalog and provides corpus-order
navigation and clan grouping for browsing.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator

from kalvian_roots.registry.catalog import FAMILY_IDS

_ROMAN = re.compile(r"^[IVX]+$")
_NUMBER_WITH_LETTER = re.compile(r"^(\d+)([A-Z]*)$")
_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10}


def roman_to_int(numeral: str) -> int:
    """Convert a roman numeral such as 'IV' to an integer."""
    total = 0
    previous = 0
    for char in reversed(numeral.upper()):
        value = _ROMAN_VALUES[char]
        if value < previous:
            total -= value
        else:
            total += value
            previous = value
    return total


def split_clan(family_id: str) -> tuple[str, str]:
    """Split an identifier into clan name and suffix.

    The suffix is the trailing number, together with a roman numeral that
    precedes it ("KYKYRI II 9" -> ("KYKYRI", "II 9")).
    """
    tokens = family_id.split()
    if len(tokens) < 2:
        return family_id, ""
    if len(tokens) >= 3 and _ROMAN.match(tokens[-2]):
        return " ".join(tokens[:-2]), " ".join(tokens[-2:])
    return " ".join(tokens[:-1]), tokens[-1]


def suffix_sort_key(suffix: str) -> tuple:
    """Natural sort key: plain numbers first, then roman-prefixed suffixes."""
    parts = suffix.split()
    if len(parts) == 2 and _ROMAN.match(parts[0]):
        match = _NUMBER_WITH_LETTER.match(parts[1])
        if match:
            return (1, roman_to_int(parts[0]), int(match.group(1)), match.group(2))
    match = _NUMBER_WITH_LETTER.match(suffix)
    if match:
        return (0, 0, int(match.group(1)), match.group(2))
    return (2, 0, 0, suffix)


@dataclass
class ClanGroup:
    """Family identifiers sharing one clan name."""

    clan: str
    suffixes: list[str] = field(default_factory=list)

    @property
    def family_ids(self) -> list[str]:
        return [f"{self.clan} {suffix}" for suffix in self.suffixes]


class FamilyIDRegistry:
    """Immutable catalog of known family identifiers in corpus order."""

    def __init__(self, family_ids: Iterable[str] = FAMILY_IDS):
        ordered: list[str] = []
        seen: set[str] = set()
        for family_id in family_ids:
            normalized = self.normalize(family_id)
            if normalized and normalized not in seen:
                seen.add(normalized)
                ordered.append(normalized)
        self._ids = tuple(ordered)
        self._index = {family_id: i for i, family_id in enumerate(self._ids)}

    @classmethod
    def from_file(cls, path: Path) -> "FamilyIDRegistry":
        """Load a catalog with one identifier per line (blank lines and '#' comments ignored)."""
        lines = path.read_text(encoding="utf-8").splitlines()
        return cls(line for line in lines if line.strip() and not line.lstrip().startswith("#"))

    @staticmethod
    def normalize(family_id: str) -> str:
        """Canonical form: upper-case with single spaces."""
        return " ".join(family_id.split()).upper()

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __contains__(self, family_id: object) -> bool:
        return isinstance(family_id, str) and self.is_valid(family_id)

    @property
    def all_family_ids(self) -> tuple[str, ...]:
        return self._ids

    def is_valid(self, family_id: str) -> bool:
        return self.normalize(family_id) in self._index

    def index_of(self, family_id: str) -> int | None:
        return self._index.get(self.normalize(family_id))

    def family_at(self, index: int) -> str | None:
        if 0 <= index < len(self._ids):
            return self._ids[index]
        return None

    def next_family_after(self, family_id: str) -> str | None:
        index = self.index_of(family_id)
        return None if index is None else self.family_at(index + 1)

    def previous_family_before(self, family_id: str) -> str | None:
        index = self.index_of(family_id)
        return None if index is None else self.family_at(index - 1)

    def grouped_by_clan(self) -> list[ClanGroup]:
        """Partition the catalog by clan name.

        Returns:
            Clan groups sorted by clan name, each with naturally sorted suffixes
        """
        groups: dict[str, ClanGroup] = {}
        for family_id in self._ids:
            clan, suffix = split_clan(family_id)
            groups.setdefault(clan, ClanGroup(clan=clan)).suffixes.append(suffix)
        for group in groups.values():
            group.suffixes.sort(key=suffix_sort_key)
        return [groups[clan] for clan in sorted(groups)]


@lru_cache(maxsize=1)
def default_registry() -> FamilyIDRegistry:
    """Registry over the built-in catalog, created once."""
    return FamilyIDRegistry()
