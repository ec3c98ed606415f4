"""Pydantic schemas for family records.

These schemas describe one family entry of the corpus as structured data.
They double as the structured output format requested from the LLM parser.
Optional fields use None for "absent in source"; an empty string means the
source carried the field without a value.
"""

import re

from pydantic import BaseModel, ConfigDict, Field

_YEAR = re.compile(r"(\d{4})\s*$")


def year_of(date: str | None) -> int | None:
    """Return the four-digit year a date string ends with, if any."""
    if not date:
        return None
    match = _YEAR.search(date.strip())
    return int(match.group(1)) if match else None


class Person(BaseModel):
    """A person as printed in a family entry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Given name as printed, e.g. 'Matti'")
    patronymic: str | None = Field(
        default=None, description="Patronymic as printed, e.g. 'Erikinp.' or 'Jaakont.'"
    )
    birth_date: str | None = Field(
        default=None, description="Birth date as printed (dd.mm.yyyy, yyyy or 'n yyyy')"
    )
    death_date: str | None = Field(default=None, description="Death date as printed")
    marriage_date: str | None = Field(
        default=None, description="Marriage date as printed, often a two-digit year"
    )
    full_marriage_date: str | None = Field(
        default=None, description="Full dd.mm.yyyy marriage date when printed"
    )
    spouse: str | None = Field(default=None, description="Spouse name for married children")
    as_child: str | None = Field(
        default=None, description="Family ID where this person appears as a child"
    )
    as_parent: str | None = Field(
        default=None, description="Family ID where this person appears as a parent"
    )
    family_search_id: str | None = Field(
        default=None, description="External FamilySearch record id"
    )
    note_markers: list[str] = Field(
        default_factory=list, description="Footnote markers such as '*' attached to this person"
    )
    father_name: str | None = Field(default=None, description="Father's name when printed")
    mother_name: str | None = Field(default=None, description="Mother's name when printed")
    spouse_birth_date: str | None = Field(
        default=None, description="Spouse birth date filled in from a resolved family"
    )
    spouse_parents_family_id: str | None = Field(
        default=None, description="Spouse's birth family ID filled in from a resolved family"
    )

    @property
    def display_name(self) -> str:
        """Name with patronymic, as used for parents."""
        if self.patronymic:
            return f"{self.name} {self.patronymic}"
        return self.name

    @property
    def best_marriage_date(self) -> str | None:
        return self.full_marriage_date or self.marriage_date

    @property
    def is_married(self) -> bool:
        return bool(self.spouse or self.marriage_date or self.full_marriage_date)

    @property
    def birth_year(self) -> int | None:
        return year_of(self.birth_date)


class Couple(BaseModel):
    """A husband and wife with the children of their marriage."""

    model_config = ConfigDict(frozen=True)

    husband: Person = Field(description="Husband")
    wife: Person = Field(description="Wife")
    marriage_date: str | None = Field(default=None, description="Marriage date as printed")
    full_marriage_date: str | None = Field(
        default=None, description="Full dd.mm.yyyy marriage date when printed"
    )
    children: list[Person] = Field(default_factory=list, description="Children in print order")
    children_died_infancy: int | None = Field(
        default=None, description="Number of children who died in infancy"
    )
    couple_notes: list[str] = Field(
        default_factory=list, description="Notes specific to this couple"
    )

    @property
    def is_complete(self) -> bool:
        return bool(self.husband.name.strip() and self.wife.name.strip())

    @property
    def older_parent_birth_year(self) -> int | None:
        """Birth year of the older spouse, or None if neither year is known."""
        years = [y for y in (self.husband.birth_year, self.wife.birth_year) if y]
        return min(years) if years else None


class Family(BaseModel):
    """One family entry of the corpus, possibly with several couples."""

    model_config = ConfigDict(frozen=True)

    family_id: str = Field(description="Family identifier, e.g. 'KORPI 6'")
    page_references: list[str] = Field(
        default_factory=list, description="Page numbers the entry is printed on"
    )
    couples: list[Couple] = Field(
        default_factory=list, description="Couples in order; later couples are remarriages"
    )
    notes: list[str] = Field(default_factory=list, description="Family-level notes")
    note_definitions: dict[str, str] = Field(
        default_factory=dict, description="Footnote marker to footnote text"
    )

    @property
    def primary_couple(self) -> Couple | None:
        return self.couples[0] if self.couples else None

    @property
    def father(self) -> Person | None:
        return self.primary_couple.husband if self.primary_couple else None

    @property
    def mother(self) -> Person | None:
        return self.primary_couple.wife if self.primary_couple else None

    @property
    def children(self) -> list[Person]:
        """Children of the primary couple."""
        return list(self.primary_couple.children) if self.primary_couple else []

    @property
    def all_children(self) -> list[Person]:
        return [child for couple in self.couples for child in couple.children]

    @property
    def all_parents(self) -> list[Person]:
        """Every husband and wife, without repeating a person across remarriages."""
        parents: list[Person] = []
        for couple in self.couples:
            for parent in (couple.husband, couple.wife):
                if parent not in parents:
                    parents.append(parent)
        return parents

    @property
    def all_persons(self) -> list[Person]:
        return self.all_parents + self.all_children

    @property
    def married_children(self) -> list[Person]:
        return [child for child in self.all_children if child.is_married]

    @property
    def total_children_died_infancy(self) -> int:
        return sum(couple.children_died_infancy or 0 for couple in self.couples)

    @property
    def page_reference_string(self) -> str:
        """Human readable page reference, e.g. 'page 105' or 'pages 105, 106'."""
        if not self.page_references:
            return self.family_id
        if len(self.page_references) == 1:
            return f"page {self.page_references[0]}"
        return "pages " + ", ".join(self.page_references)

    @property
    def is_valid(self) -> bool:
        return bool(self.family_id.strip()) and any(c.is_complete for c in self.couples)

    def validate_structure(self) -> list[str]:
        """Check the entry for structural problems.

        Returns:
            List of warning messages (empty if the entry looks sound)
        """
        warnings = []
        if not self.family_id.strip():
            warnings.append("Family ID is empty")
        if not self.couples:
            warnings.append("Family has no couples")
        for index, couple in enumerate(self.couples, start=1):
            if not couple.is_complete:
                warnings.append(f"Couple {index} is missing a husband or wife name")
        if not self.page_references:
            warnings.append("No page references")
        for child in self.all_children:
            if child.as_parent and not child.spouse:
                warnings.append(f"{child.name} has an asParent reference but no spouse")
        for marker in {m for p in self.all_persons for m in p.note_markers}:
            if marker not in self.note_definitions:
                warnings.append(f"Note marker {marker!r} has no definition")
        return warnings

    def find_person(self, name: str) -> Person | None:
        """Find a person by name or display name (case-insensitive)."""
        target = name.strip().lower()
        for person in self.all_persons:
            if target in (person.name.lower(), person.display_name.lower()):
                return person
        return None

    def find_couple_for_child(self, child: Person) -> Couple | None:
        for couple in self.couples:
            if child in couple.children:
                return couple
        return None
