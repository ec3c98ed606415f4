"""Citation text generation.

Citations describe a family entry as a list of facts ready to paste into a
genealogy program's source field. When a resolved network is available,
children's entries are completed with dates found in the families they
founded; those values are shown in brackets and listed under
"Additional information".
"""

import logging
from dataclasses import dataclass

from kalvian_roots.citations.dates import format_marriage_date, is_full_date, normalize_date
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.schemas import Couple, Family, FamilyNetwork, Person

logger = logging.getLogger(__name__)

TARGET_MARKER = "→ "
PLAIN_MARKER = "  "


@dataclass
class ChildEntry:
    """What a citation shows for one child, after enhancement."""

    person: Person
    birth_date: str | None = None
    death_date: str | None = None
    marriage_date: str | None = None
    spouse: str | None = None
    spouse_birth_date: str | None = None
    spouse_death_date: str | None = None
    is_target: bool = False
    enhanced_death: bool = False
    enhanced_marriage: bool = False
    as_parent_family: Family | None = None
    spouse_family: Family | None = None

    @property
    def enhanced_spouse(self) -> bool:
        return bool(self.spouse_birth_date or self.spouse_death_date)

    @property
    def enhanced(self) -> bool:
        return self.enhanced_death or self.enhanced_marriage or self.enhanced_spouse

    def _spouse_dates(self) -> str | None:
        if self.spouse_birth_date and self.spouse_death_date:
            return f"[{self.spouse_birth_date}-{self.spouse_death_date}]"
        if self.spouse_birth_date:
            return f"[b {self.spouse_birth_date}]"
        if self.spouse_death_date:
            return f"[d. {self.spouse_death_date}]"
        return None

    def render(self) -> str:
        parts = [self.person.name]
        if self.birth_date:
            parts.append(f"b {self.birth_date}")

        if self.spouse or self.marriage_date:
            marriage = ["m"]
            if self.spouse:
                marriage.append(self.spouse)
            spouse_dates = self._spouse_dates()
            if spouse_dates:
                marriage.append(spouse_dates)
            if self.marriage_date:
                marriage.append(
                    f"[{self.marriage_date}]" if self.enhanced_marriage else self.marriage_date
                )
            parts.append(" ".join(marriage))

        if self.death_date:
            parts.append(f"d [{self.death_date}]" if self.enhanced_death else f"d {self.death_date}")

        marker = TARGET_MARKER if self.is_target else PLAIN_MARKER
        return marker + ", ".join(parts)


def format_parent(person: Person) -> str:
    parts = [person.display_name]
    if person.birth_date:
        parts.append(f"b {normalize_date(person.birth_date)}")
    if person.death_date:
        parts.append(f"d {normalize_date(person.death_date)}")
    return ", ".join(parts)


def _join_kinds(kinds: list[str]) -> str:
    if len(kinds) == 1:
        return kinds[0]
    return " and ".join(kinds)


class CitationGenerator:
    """Render citation text for families and the people in them."""

    def __init__(self, matcher: NameEquivalenceMatcher | None = None):
        self.matcher = matcher or NameEquivalenceMatcher()

    # Entry points

    def generate_citation(self, person: Person, network: FamilyNetwork) -> str:
        """Citation for a person of a resolved network, chosen by the person's role.

        Parents with a resolved birth family get that family's citation,
        spouses of children get their own birth family's citation, everyone
        else the nuclear family's citation with the person highlighted.
        """
        family = network.main_family
        if person in family.all_parents:
            as_child_family = network.get_as_child_family(person)
            if as_child_family is not None:
                return self.generate_as_child_citation(person, as_child_family, network)

        for key in (person.display_name, person.name):
            spouse_family = network.spouse_as_child_families.get(key)
            if spouse_family is not None:
                return self.generate_spouse_citation(key, spouse_family)

        return self.generate_main_family_citation(family, target=person, network=network)

    def generate_main_family_citation(
        self,
        family: Family,
        target: Person | None = None,
        network: FamilyNetwork | None = None,
    ) -> str:
        """Citation for a nuclear family.

        Args:
            family: The family to describe
            target: Optional person to highlight among the children
            network: Optional resolved network used to enhance married children

        Returns:
            Citation text
        """
        lines = [f"Information on {family.page_reference_string} includes:"]
        if not family.couples:
            return lines[0] + "\n"

        lines.extend(self._couple_lines(family))

        entries = self.child_entries(family, network, target)
        for index, couple in enumerate(family.couples):
            couple_entries = [e for e in entries if e.person in couple.children]
            if not couple_entries:
                continue
            heading = "Children:" if index == 0 else f"Children with spouse {index + 1}:"
            lines.extend(["", heading])
            lines.extend(entry.render() for entry in couple_entries)

        lines.extend(self._closing_lines(family))

        additional = self._additional_information(entries)
        if additional:
            lines.extend(["", "Additional information:"])
            lines.extend(additional)
        return "\n".join(lines) + "\n"

    def generate_as_child_citation(
        self,
        person: Person,
        as_child_family: Family,
        network: FamilyNetwork | None = None,
    ) -> str:
        """Citation for a person's birth family, marking the person among the children.

        When the network holds the family the person founded, the person's
        entry is enhanced from it.
        """
        lines = [f"Information on {as_child_family.page_reference_string} includes:"]
        if not as_child_family.couples:
            return lines[0] + "\n"

        lines.extend(self._couple_lines(as_child_family))

        founded = self._founded_family(person, network)
        entries = []
        marked = False
        for couple in as_child_family.couples:
            for child in couple.children:
                is_target = not marked and self._is_target(child, person)
                marked = marked or is_target
                entries.append(
                    self._child_entry(
                        child,
                        couple,
                        as_parent_family=founded if is_target else None,
                        network=network if is_target else None,
                        is_target=is_target,
                    )
                )

        if entries:
            lines.extend(["", "Children:"])
            lines.extend(entry.render() for entry in entries)

        lines.extend(self._closing_lines(as_child_family))

        additional = self._additional_information([e for e in entries if e.is_target])
        if additional:
            lines.extend(["", "Additional information:"])
            lines.extend(additional)
        return "\n".join(lines) + "\n"

    def generate_spouse_citation(self, spouse_name: str, spouse_family: Family) -> str:
        """Citation for a child's spouse in the spouse's birth family."""
        spouse = self._find_child(spouse_family, spouse_name)
        if spouse is None:
            logger.debug("%s not found among children of %s", spouse_name, spouse_family.family_id)
            return self.generate_main_family_citation(spouse_family)
        return self.generate_as_child_citation(spouse, spouse_family)

    # Children

    def child_entries(
        self,
        family: Family,
        network: FamilyNetwork | None = None,
        target: Person | None = None,
    ) -> list[ChildEntry]:
        """Build the displayed entries for every child of a family.

        The stored Person records are never modified; enhanced values only
        exist on the returned entries.
        """
        entries = []
        for couple in family.couples:
            for child in couple.children:
                as_parent_family = None
                if network is not None and child.is_married:
                    as_parent_family = network.get_as_parent_family(child)
                entries.append(
                    self._child_entry(
                        child,
                        couple,
                        as_parent_family=as_parent_family,
                        network=network,
                        is_target=target is not None and self._is_target(child, target),
                    )
                )
        return entries

    def _child_entry(
        self,
        child: Person,
        couple: Couple,
        as_parent_family: Family | None,
        network: FamilyNetwork | None,
        is_target: bool,
    ) -> ChildEntry:
        entry = ChildEntry(
            person=child,
            birth_date=normalize_date(child.birth_date) if child.birth_date else None,
            death_date=normalize_date(child.death_date) if child.death_date else None,
            marriage_date=format_marriage_date(
                child.marriage_date, child.full_marriage_date, couple.older_parent_birth_year
            ),
            spouse=child.spouse.strip() if child.spouse and child.spouse.strip() else None,
            is_target=is_target,
        )

        if as_parent_family is not None:
            self._enhance_from_own_family(entry, child, as_parent_family)
        if network is not None and entry.spouse:
            self._enhance_spouse(entry, child, network)
        return entry

    def _enhance_from_own_family(self, entry: ChildEntry, child: Person, family: Family) -> None:
        matched, matched_couple = self._match_in_family(child, family)
        if matched is None:
            logger.debug("%s not found as a parent in %s", child.name, family.family_id)
            return
        entry.as_parent_family = family

        if matched.death_date and matched.death_date != child.death_date:
            entry.death_date = normalize_date(matched.death_date)
            entry.enhanced_death = True

        full_date = next(
            (
                date
                for date in (
                    matched.full_marriage_date,
                    matched_couple.full_marriage_date,
                    matched_couple.marriage_date,
                    matched.marriage_date,
                )
                if is_full_date(date)
            ),
            None,
        )
        if full_date and full_date != child.full_marriage_date:
            entry.marriage_date = normalize_date(full_date)
            entry.enhanced_marriage = True

        if not entry.spouse:
            partner = matched_couple.wife if matched == matched_couple.husband else matched_couple.husband
            if partner.name.strip():
                entry.spouse = partner.display_name

    def _enhance_spouse(self, entry: ChildEntry, child: Person, network: FamilyNetwork) -> None:
        spouse_family = network.get_spouse_as_child_family(entry.spouse)
        if spouse_family is None:
            return
        spouse = None
        if child.spouse_birth_date:
            spouse = next(
                (c for c in spouse_family.all_children if c.birth_date == child.spouse_birth_date),
                None,
            )
        if spouse is None:
            spouse = self._find_child(spouse_family, entry.spouse)
        if spouse is None:
            return
        entry.spouse_family = spouse_family
        entry.spouse_birth_date = normalize_date(spouse.birth_date) if spouse.birth_date else None
        entry.spouse_death_date = normalize_date(spouse.death_date) if spouse.death_date else None

    # Matching

    def _match_in_family(
        self, person: Person, family: Family
    ) -> tuple[Person | None, Couple | None]:
        """Find a person among a family's parents, by birth date first, then by name."""
        if person.birth_date:
            for couple in family.couples:
                for parent in (couple.husband, couple.wife):
                    if parent.birth_date == person.birth_date:
                        return parent, couple
        for couple in family.couples:
            for parent in (couple.husband, couple.wife):
                if self.matcher.are_names_equivalent(parent.name, person.name):
                    return parent, couple
        return None, None

    def _find_child(self, family: Family, name: str) -> Person | None:
        for child in family.all_children:
            if self.matcher.are_names_equivalent(child.name, name):
                return child
        return None

    def _is_target(self, child: Person, target: Person) -> bool:
        """Same record, or same name and birth date.

        Without any birth date, namesakes (a later child named after one
        who died) only match when their other recorded facts agree.
        """
        if child == target:
            return True
        if child.name.strip().lower() != target.name.strip().lower():
            return False
        if child.birth_date or target.birth_date:
            return child.birth_date == target.birth_date
        return (child.death_date, child.spouse, child.as_parent) == (
            target.death_date,
            target.spouse,
            target.as_parent,
        )

    def _founded_family(self, person: Person, network: FamilyNetwork | None) -> Family | None:
        if network is None:
            return None
        if person in network.main_family.all_parents:
            return network.main_family
        return network.get_as_parent_family(person)

    # Shared sections

    def _couple_lines(self, family: Family) -> list[str]:
        primary = family.primary_couple
        lines = [format_parent(primary.husband), format_parent(primary.wife)]
        marriage = format_marriage_date(
            primary.marriage_date, primary.full_marriage_date, primary.older_parent_birth_year
        )
        if marriage:
            lines.append(f"m {marriage}")

        for couple in family.couples[1:]:
            spouse = couple.husband if couple.husband != primary.husband else couple.wife
            lines.extend(["", "Additional spouse:", format_parent(spouse)])
            marriage = format_marriage_date(
                couple.marriage_date, couple.full_marriage_date, couple.older_parent_birth_year
            )
            if marriage:
                lines.append(f"m {marriage}")
        return lines

    def _closing_lines(self, family: Family) -> list[str]:
        lines = []
        notes = list(family.notes)
        for couple in family.couples:
            notes.extend(note for note in couple.couple_notes if note not in notes)
        if notes:
            lines.extend(["", "Notes:"])
            lines.extend(f"• {note}" for note in notes)
        died = family.total_children_died_infancy
        if died:
            lines.extend(["", f"Children died in infancy: {died}"])
        return lines

    def _additional_information(self, entries: list[ChildEntry]) -> list[str]:
        lines = []
        for entry in entries:
            kinds = []
            if entry.enhanced_death:
                kinds.append("death date")
            if entry.enhanced_marriage:
                kinds.append("marriage date")
            if kinds and entry.as_parent_family is not None:
                verb = "is" if len(kinds) == 1 else "are"
                lines.append(
                    f"{entry.person.name}'s {_join_kinds(kinds)} {verb} on "
                    f"{entry.as_parent_family.page_reference_string}"
                )
            if entry.enhanced_spouse and entry.spouse_family is not None:
                lines.append(
                    f"{entry.spouse}'s dates are on {entry.spouse_family.page_reference_string}"
                )
        return lines
