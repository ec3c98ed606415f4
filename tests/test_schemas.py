"""Tests for family and network schemas."""

import pytest
from pydantic import ValidationError

from kalvian_roots.schemas import Couple, Family, FamilyNetwork, Person, year_of


def test_person_derived_fields():
    person = Person(name="Matti", patronymic="Erikinp.", birth_date="15.03.1723", marriage_date="50")
    assert person.display_name == "Matti Erikinp."
    assert person.best_marriage_date == "50"
    assert person.is_married
    assert person.birth_year == 1723

    child = Person(name="Anna")
    assert child.display_name == "Anna"
    assert not child.is_married
    assert child.birth_year is None


def test_person_is_frozen_and_structurally_equal():
    person = Person(name="Anna", birth_date="1755")
    with pytest.raises(ValidationError):
        person.death_date = "1800"
    assert person == Person(name="Anna", birth_date="1755")
    assert person != Person(name="Anna", birth_date="1755", death_date="")


def test_year_of():
    assert year_of("n 1666") == 1666
    assert year_of("03.05.1809") == 1809
    assert year_of("78") is None
    assert year_of(None) is None


def test_family_accessors(families):
    family = families["KORPI 6"]
    assert family.father.display_name == "Matti Erikinp."
    assert family.mother.name == "Brita"
    assert [c.name for c in family.children] == ["Magdalena", "Erik", "Anna", "Liisa"]
    assert [c.name for c in family.married_children] == ["Magdalena", "Erik", "Liisa"]
    assert family.total_children_died_infancy == 2
    assert family.page_reference_string == "pages 105, 106"
    assert family.is_valid
    assert family.find_person("matti erikinp.") == family.father
    assert family.find_couple_for_child(family.children[0]) is family.primary_couple
    assert family.primary_couple.older_parent_birth_year == 1723


def test_page_reference_string_variants():
    single = Family(family_id="RITA 9", page_references=["410"])
    assert single.page_reference_string == "page 410"
    assert Family(family_id="RITA 9").page_reference_string == "RITA 9"


def test_remarriage_parents_are_not_repeated():
    matti = Person(name="Matti")
    family = Family(
        family_id="KORPI 1",
        couples=[
            Couple(husband=matti, wife=Person(name="Brita"), children=[Person(name="Anna")]),
            Couple(husband=matti, wife=Person(name="Liisa"), children=[Person(name="Erik")]),
        ],
    )
    assert [p.name for p in family.all_parents] == ["Matti", "Brita", "Liisa"]
    assert [c.name for c in family.children] == ["Anna"]
    assert [c.name for c in family.all_children] == ["Anna", "Erik"]


def test_validity_and_structure_warnings():
    family = Family(
        family_id="KORPI 1",
        couples=[Couple(husband=Person(name="Matti"), wife=Person(name=" "))],
    )
    assert not family.is_valid
    warnings = family.validate_structure()
    assert "Couple 1 is missing a husband or wife name" in warnings
    assert "No page references" in warnings
    assert not Family(family_id="KORPI 1").is_valid


def test_undefined_note_marker_is_reported():
    family = Family(
        family_id="KORPI 1",
        page_references=["1"],
        couples=[
            Couple(
                husband=Person(name="Matti", note_markers=["*"]),
                wife=Person(name="Brita"),
            )
        ],
    )
    assert family.validate_structure() == ["Note marker '*' has no definition"]


def test_network_json_round_trip(families):
    network = FamilyNetwork(
        main_family=families["KORPI 6"],
        as_parent_families={"Magdalena": families["KORVELA 3"]},
    )
    restored = FamilyNetwork.model_validate_json(network.model_dump_json())
    assert restored == network


def test_network_lookups_and_enhanced_family(families):
    main = families["KORPI 6"]
    network = FamilyNetwork(
        main_family=main,
        as_child_families={"Matti Erikinp.": families["KORPI 5"]},
        as_parent_families={"Magdalena": families["KORVELA 3"]},
        spouse_as_child_families={"Juho Juhonp.": families["HYYPPÄ 5"]},
    )
    assert network.get_as_child_family(main.father).family_id == "KORPI 5"
    assert network.get_as_parent_family(main.children[0]).family_id == "KORVELA 3"
    assert network.total_resolved_families == 3
    assert [f.family_id for f in network.all_families()] == [
        "KORPI 6",
        "KORPI 5",
        "KORVELA 3",
        "HYYPPÄ 5",
    ]

    enhanced = network.enhanced_family()
    magdalena = enhanced.children[0]
    assert magdalena.spouse_birth_date == "10.01.1748"
    assert magdalena.spouse_parents_family_id == "HYYPPÄ 5"
    assert main.children[0].spouse_birth_date is None
