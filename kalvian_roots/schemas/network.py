"""Family network schema.

A network is one nuclear family plus the families its members are linked to
through asChild and asParent references.
"""

from pydantic import BaseModel, Field

from kalvian_roots.schemas.family import Family, Person


class FamilyNetwork(BaseModel):
    """A nuclear family together with its resolved cross-referenced families."""

    main_family: Family = Field(description="The nuclear family that was requested")
    as_child_families: dict[str, Family] = Field(
        default_factory=dict, description="Parent display name to the parent's birth family"
    )
    as_parent_families: dict[str, Family] = Field(
        default_factory=dict, description="Child display name to the child's own family"
    )
    spouse_as_child_families: dict[str, Family] = Field(
        default_factory=dict, description="Spouse name to the spouse's birth family"
    )

    @property
    def family_id(self) -> str:
        return self.main_family.family_id

    @property
    def total_resolved_families(self) -> int:
        return (
            len(self.as_child_families)
            + len(self.as_parent_families)
            + len(self.spouse_as_child_families)
        )

    def get_as_child_family(self, person: Person) -> Family | None:
        return _lookup(self.as_child_families, person)

    def get_as_parent_family(self, person: Person) -> Family | None:
        return _lookup(self.as_parent_families, person)

    def get_spouse_as_child_family(self, spouse_name: str) -> Family | None:
        return self.spouse_as_child_families.get(spouse_name.strip())

    def all_families(self) -> list[Family]:
        """Every distinct family in the network, nuclear family first."""
        families = [self.main_family]
        seen = {self.main_family.family_id.upper()}
        for mapping in (
            self.as_child_families,
            self.as_parent_families,
            self.spouse_as_child_families,
        ):
            for family in mapping.values():
                key = family.family_id.upper()
                if key not in seen:
                    seen.add(key)
                    families.append(family)
        return families

    def enhanced_family(self) -> Family:
        """Copy of the nuclear family with spouse data from resolved families.

        Married children whose spouse birth family was resolved get
        ``spouse_parents_family_id`` and, when the spouse can be found among
        that family's children, ``spouse_birth_date``. The stored records are
        left untouched.
        """
        couples = []
        for couple in self.main_family.couples:
            children = []
            for child in couple.children:
                spouse_family = (
                    self.get_spouse_as_child_family(child.spouse) if child.spouse else None
                )
                if spouse_family is None:
                    children.append(child)
                    continue
                update = {"spouse_parents_family_id": spouse_family.family_id}
                given_name = child.spouse.split()[0].lower()
                for candidate in spouse_family.all_children:
                    if candidate.name.lower() == given_name and candidate.birth_date:
                        update["spouse_birth_date"] = candidate.birth_date
                        break
                children.append(child.model_copy(update=update))
            couples.append(couple.model_copy(update={"children": children}))
        return self.main_family.model_copy(update={"couples": couples})


def _lookup(mapping: dict[str, Family], person: Person) -> Family | None:
    return mapping.get(person.display_name) or mapping.get(person.name)
