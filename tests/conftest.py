"""
Pytest configuration and fixtures.
"""

import asyncio

import pytest

from kalvian_roots.agents.resolver import FamilyResolver
from kalvian_roots.errors import ParseFailure
from kalvian_roots.ingestion import CorpusFile
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.registry import FamilyIDRegistry, default_registry
from kalvian_roots.schemas import Couple, Family, Person
from kalvian_roots.storage import FamilyNetworkCache

SAMPLE_CORPUS = """JUURET KÄLVIÄLLÄ

HERLEVI 1, page 12
★ 1705 Jaakko Jaakonp. † 1770
★ 1708 Kaisa Matint.
Lapset
★ 22.08.1731 Brita

HYYPPÄ 5, page 301
★ 1720 Juho Matinp.
★ 1724 Kaisa Erikint.
Lapset
★ 10.01.1748 Juho † 03.05.1809

KORPELA 2, page 180
★ 03.09.1753 Erik Matinp. {Korpi 6}
★ 1757 Maria Antint. {Rita 9}
∞ 78

KORPI 5, page 101
★ 1690 Erik Erikinp.
★ 1695 Anna Juhont.
Lapset
★ 15.03.1723 Matti

KORPI 6, pages 105-106
★ 15.03.1723 Matti Erikinp. {Korpi 5} † 12.11.1798
★ 22.08.1731 Brita Jaakont. {Herlevi 1}
∞ 50
Lapset
★ 18.05.1751 Magdalena ∞ 73 Juho Juhonp. Korvela 3
★ 03.09.1753 Erik ∞ 78 Maria Antint. Korpela 2
★ 1755 Anna Rita 3
★ 1757 Liisa ∞ 80 Antti Matinp. Pseudo 1
Lapsena kuollut 2

KORPI 7, page 107
★ 1730 Antti Matinp.
★ 1734 Kaisa Juhont.

KORVELA 3, page 212
★ 10.01.1748 Juho Juhonp. {Hyyppä 5} † 03.05.1809
★ 18.05.1751 Magdalena Matint. {Korpi 6} † 19.10.1846
∞ 14.10.1773

RITA 9, page 410
★ 1725 Antti Antinp.
★ 1729 Maria Jaakont.
Lapset
★ 1757 Maria
"""


def _person(name: str, patronymic: str | None = None, **fields) -> Person:
    return Person(name=name, patronymic=patronymic, **fields)


def sample_families() -> dict[str, Family]:
    """Parsed versions of the sample corpus entries, keyed by family ID."""
    magdalena = _person(
        "Magdalena",
        birth_date="18.05.1751",
        marriage_date="73",
        spouse="Juho Juhonp.",
        as_parent="Korvela 3",
    )
    erik = _person(
        "Erik",
        birth_date="03.09.1753",
        marriage_date="78",
        spouse="Maria Antint.",
        as_parent="KORPELA 2",
    )
    anna = _person("Anna", birth_date="1755", as_parent="RITA 3")
    liisa = _person(
        "Liisa", birth_date="1757", marriage_date="80", spouse="Antti Matinp.", as_parent="PSEUDO 1"
    )

    return {
        "KORPI 6": Family(
            family_id="KORPI 6",
            page_references=["105", "106"],
            couples=[
                Couple(
                    husband=_person(
                        "Matti",
                        "Erikinp.",
                        birth_date="15.03.1723",
                        death_date="12.11.1798",
                        as_child="KORPI 5",
                    ),
                    wife=_person(
                        "Brita", "Jaakont.", birth_date="22.08.1731", as_child="HERLEVI 1"
                    ),
                    marriage_date="50",
                    children=[magdalena, erik, anna, liisa],
                    children_died_infancy=2,
                )
            ],
            notes=["Matti oli lautamies."],
        ),
        "KORPI 5": Family(
            family_id="KORPI 5",
            page_references=["101"],
            couples=[
                Couple(
                    husband=_person("Erik", "Erikinp.", birth_date="1690"),
                    wife=_person("Anna", "Juhont.", birth_date="1695"),
                    children=[_person("Matti", birth_date="15.03.1723")],
                )
            ],
        ),
        "HERLEVI 1": Family(
            family_id="HERLEVI 1",
            page_references=["12"],
            couples=[
                Couple(
                    husband=_person("Jaakko", "Jaakonp.", birth_date="1705", death_date="1770"),
                    wife=_person("Kaisa", "Matint.", birth_date="1708"),
                    children=[_person("Brita", birth_date="22.08.1731")],
                )
            ],
        ),
        "KORVELA 3": Family(
            family_id="KORVELA 3",
            page_references=["212"],
            couples=[
                Couple(
                    husband=_person(
                        "Juho",
                        "Juhonp.",
                        birth_date="10.01.1748",
                        death_date="03.05.1809",
                        as_child="HYYPPÄ 5",
                    ),
                    wife=_person(
                        "Magdalena",
                        "Matint.",
                        birth_date="18.05.1751",
                        death_date="19.10.1846",
                        as_child="KORPI 6",
                    ),
                    full_marriage_date="14.10.1773",
                )
            ],
        ),
        "HYYPPÄ 5": Family(
            family_id="HYYPPÄ 5",
            page_references=["301"],
            couples=[
                Couple(
                    husband=_person("Juho", "Matinp.", birth_date="1720"),
                    wife=_person("Kaisa", "Erikint.", birth_date="1724"),
                    children=[
                        _person("Juho", birth_date="10.01.1748", death_date="03.05.1809")
                    ],
                )
            ],
        ),
        "KORPELA 2": Family(
            family_id="KORPELA 2",
            page_references=["180"],
            couples=[
                Couple(
                    husband=_person(
                        "Erik", "Matinp.", birth_date="03.09.1753", as_child="KORPI 6"
                    ),
                    wife=_person("Maria", "Antint.", birth_date="1757", as_child="RITA 9"),
                    marriage_date="78",
                )
            ],
        ),
        "RITA 9": Family(
            family_id="RITA 9",
            page_references=["410"],
            couples=[
                Couple(
                    husband=_person("Antti", "Antinp.", birth_date="1725"),
                    wife=_person("Maria", "Jaakont.", birth_date="1729"),
                    children=[_person("Maria", birth_date="1757")],
                )
            ],
        ),
        "KORPI 7": Family(
            family_id="KORPI 7",
            page_references=["107"],
            couples=[
                Couple(
                    husband=_person("Antti", "Matinp.", birth_date="1730"),
                    wife=_person("Kaisa", "Juhont.", birth_date="1734"),
                )
            ],
        ),
    }


class FakeParser:
    """Parsing service returning prebuilt families instead of calling an LLM."""

    def __init__(
        self,
        families: dict[str, Family],
        failing: set[str] | None = None,
        delay: float = 0.0,
        slow: dict[str, float] | None = None,
    ):
        self.families = families
        self.failing = failing or set()
        self.delay = delay
        self.slow = slow or {}
        self.calls: list[str] = []

    async def parse_family(self, family_id: str, raw_text: str) -> Family:
        key = FamilyIDRegistry.normalize(family_id)
        self.calls.append(key)
        await asyncio.sleep(self.slow.get(key, self.delay))
        if key in self.failing or key not in self.families:
            raise ParseFailure(family_id, "unparseable test entry")
        assert raw_text.upper().startswith(key)
        return self.families[key].model_copy(update={"family_id": family_id})


@pytest.fixture
def families() -> dict[str, Family]:
    return sample_families()


@pytest.fixture
def corpus() -> CorpusFile:
    return CorpusFile(SAMPLE_CORPUS)


@pytest.fixture
def registry() -> FamilyIDRegistry:
    return default_registry()


@pytest.fixture
def matcher() -> NameEquivalenceMatcher:
    return NameEquivalenceMatcher()


@pytest.fixture
def parser(families) -> FakeParser:
    return FakeParser(families)


@pytest.fixture
def resolver(registry, corpus, parser, matcher) -> FamilyResolver:
    return FamilyResolver(registry=registry, locator=corpus, parser=parser, matcher=matcher)


@pytest.fixture
def cache(resolver, corpus) -> FamilyNetworkCache:
    return FamilyNetworkCache(resolver=resolver, locator=corpus)
