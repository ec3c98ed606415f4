"""Name equivalence matching for Finnish, Swedish and Latin name forms.

Parish records spell the same person's given name in several languages
(Juho / Johan / Johannes, Magdalena / Malin). The matcher decides whether
two given names refer to the same name, using fixed variant tables plus a
runtime overlay of custom equivalences.
"""

import logging
from enum import Enum
from types import MappingProxyType

from rapidfuzz import fuzz

logger = logging.getLogger(__name__)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


MALE_NAME_VARIANTS = MappingProxyType(
    {
        "aabraham": frozenset({"abram", "abraham", "abrahammus"}),
        "aaron": frozenset({"aron", "aaron"}),
        "antti": frozenset({"anders", "andreas", "andrej"}),
        "david": frozenset({"dawid", "taavetti"}),
        "eerik": frozenset({"erik", "eric", "erich", "erkki"}),
        "elias": frozenset({"elijs", "elis"}),
        "gabriel": frozenset({"gabril"}),
        "gustaf": frozenset({"kustaa", "kusataa", "gustav", "kustavi"}),
        "henrik": frozenset({"hendrich", "heikki"}),
        "jaakko": frozenset({"jacob", "jakob", "jacobus", "jaako", "jacop"}),
        "jean": frozenset({"johan", "johannes", "johanne", "juho", "jöns", "hans"}),
        "juho": frozenset({"johan", "johannes", "johann"}),
        "kalle": frozenset({"carl", "karl"}),
        "kristian": frozenset({"christian"}),
        "lauri": frozenset({"lars", "laurentius", "laurent"}),
        "markus": frozenset({"marcus", "marx"}),
        "martti": frozenset({"martin", "martinus", "mårten"}),
        "matias": frozenset({"mathias", "matthias", "mats", "matts", "matti", "matin"}),
        "mikael": frozenset({"mickel", "michel", "mikko"}),
        "niilo": frozenset({"nicolaus", "nils", "niklas"}),
        "olavi": frozenset({"olof", "olaus", "ole"}),
        "paavali": frozenset({"paul", "pauli", "påhl", "pål"}),
        "petteri": frozenset({"petter", "peter", "pietari", "petrus"}),
        "sakari": frozenset({"sakarias", "zacharias"}),
        "simo": frozenset({"simon", "simen"}),
        "tuomas": frozenset({"thomas", "tomas"}),
    }
)

FEMALE_NAME_VARIANTS = MappingProxyType(
    {
        "agneta": frozenset({"agnete", "aune"}),
        "anna": frozenset({"anne", "arna", "annika", "annikki"}),
        "brita": frozenset({"briita", "brigitta", "brit", "bridget", "birgit"}),
        "catharina": frozenset({"katariina", "kaarin", "kaarina", "katarina", "carin", "karin"}),
        "elisabet": frozenset({"elisabeth", "lisa", "liisa", "betta", "elisabeta"}),
        "elin": frozenset({"elena", "elina", "helen"}),
        "eva": frozenset({"eeva"}),
        "greta": frozenset(
            {"kreta", "kreeta", "margareta", "margeta", "magareta", "margaretha", "marketta"}
        ),
        "helena": frozenset({"helga", "elena", "leena"}),
        "johanna": frozenset({"johana"}),
        "kristina": frozenset({"kristiina", "christina", "stiina", "stina", "kirstine"}),
        "liisa": frozenset({"elisabet", "lisa", "elisabeth"}),
        "magdalena": frozenset({"magdaleena", "malin", "malen", "malena"}),
        "maria": frozenset({"marie", "marja"}),
        "sofia": frozenset({"sophie"}),
        "susanna": frozenset({"susana", "susanne"}),
    }
)

FEMALE_SUFFIXES = frozenset({"tytär", "dotter", "t.", "dtr"})
MALE_SUFFIXES = frozenset({"p.", "poika", "son", "sson"})

# Longest first; stripped from a patronymic to leave the father's name
PATRONYMIC_ENDINGS = ("dotter", "poika", "tytär", "son", "dtr", "p", "t")
VOWELS = "aeiouyäö"


def _bases(name: str, table) -> set[str]:
    """Base names a lower-cased given name belongs to in one table."""
    return {base for base, variants in table.items() if name == base or name in variants}


def _normalize(name: str) -> str:
    return " ".join(name.lower().split())


def _father_name_forms(patronymic: str) -> set[str]:
    """Possible father's names behind a patronymic.

    "Juhonp." gives juhon, juho; "Matinp." gives matin, mati, matti;
    "Eriksson" gives eriks, erik.
    """
    stem = patronymic.rstrip(".")
    for ending in PATRONYMIC_ENDINGS:
        if stem.endswith(ending) and len(stem) - len(ending) >= 2:
            stem = stem[: -len(ending)]
            break

    forms = {stem}
    if stem.endswith("n") or stem.endswith("s"):
        genitive = stem[:-1]
        forms.add(genitive)
        if genitive.endswith("i"):
            forms.add(genitive[:-1])
        # Finnish consonant gradation: Matin -> Matti, Jaakon -> Jaakko
        if len(genitive) >= 3 and genitive[-1] in VOWELS and genitive[-2] not in VOWELS:
            forms.add(genitive[:-1] + genitive[-2] + genitive[-1])
    return forms


class NameEquivalenceMatcher:
    """Decide whether two given names denote the same name.

    The variant tables are shared immutable data. Custom pairs added at
    runtime live in a per-instance overlay and are bidirectional and
    transitive.
    """

    def __init__(self, custom_pairs: list[tuple[str, str]] | None = None):
        self._custom: dict[str, set[str]] = {}
        for first, second in custom_pairs or []:
            self.add_equivalence(first, second)

    # Custom overlay

    def add_equivalence(self, first: str, second: str) -> None:
        """Record that two names are equivalent, joining their existing groups."""
        a, b = _normalize(first), _normalize(second)
        if not a or not b or a == b:
            return
        group = self._custom_group(a) | self._custom_group(b) | {a, b}
        for name in group:
            self._custom[name] = group - {name}
        logger.debug("Added name equivalence %s = %s", a, b)

    def remove_equivalence(self, first: str, second: str) -> None:
        """Remove a custom pair; other equivalences of each name are kept."""
        a, b = _normalize(first), _normalize(second)
        self._custom.get(a, set()).discard(b)
        self._custom.get(b, set()).discard(a)
        for name in (a, b):
            if name in self._custom and not self._custom[name]:
                del self._custom[name]

    def clear_custom_equivalences(self) -> None:
        self._custom.clear()

    @property
    def custom_equivalences(self) -> list[tuple[str, str]]:
        """Custom pairs, each listed once in sorted order."""
        pairs = {tuple(sorted((a, b))) for a, others in self._custom.items() for b in others}
        return sorted(pairs)

    def _custom_group(self, name: str) -> set[str]:
        return set(self._custom.get(name, set()))

    # Matching

    def are_names_equivalent(self, first: str, second: str) -> bool:
        """Check whether two names denote the same given name.

        Full names are compared as a whole first, then by their leading
        given-name token. When both names carry a patronymic, the
        patronymics must name the same father as well.

        Args:
            first: A given name or full name
            second: Another given name or full name

        Returns:
            True if the names are identical or variants of one base name
        """
        a, b = _normalize(first), _normalize(second)
        if a == b:
            return True
        if self._given_names_equivalent(a, b):
            return True
        a_tokens, b_tokens = a.split(), b.split()
        if not a_tokens or not b_tokens or (len(a_tokens), len(b_tokens)) == (1, 1):
            return False
        a_first, b_first = a_tokens[0], b_tokens[0]
        if a_first != b_first and not self._given_names_equivalent(a_first, b_first):
            return False
        if len(a_tokens) > 1 and len(b_tokens) > 1:
            return self.are_patronymics_equivalent(a_tokens[1], b_tokens[1])
        return True

    def are_patronymics_equivalent(self, first: str, second: str) -> bool:
        """Check whether two patronymics name the same father.

        Finnish ("Juhonp.", "Jaakont.") and Swedish ("Johansson",
        "Eriksdotter") forms are compared through the father's given name.
        """
        a, b = _normalize(first), _normalize(second)
        if a == b:
            return True
        a_forms, b_forms = _father_name_forms(a), _father_name_forms(b)
        if a_forms & b_forms:
            return True
        return any(
            self._given_names_equivalent(x, y) for x in a_forms for y in b_forms
        )

    def equivalent_names(self, name: str) -> set[str]:
        """All lower-cased given names equivalent to a name, itself included."""
        given = _normalize(name).split()
        if not given:
            return set()
        first = given[0]
        names = {first} | self._custom_group(first)
        for table in (MALE_NAME_VARIANTS, FEMALE_NAME_VARIANTS):
            for base in _bases(first, table):
                names |= {base} | table[base]
        return names

    def _given_names_equivalent(self, a: str, b: str) -> bool:
        if b in self._custom.get(a, ()):
            return True
        for table in (MALE_NAME_VARIANTS, FEMALE_NAME_VARIANTS):
            if _bases(a, table) & _bases(b, table):
                return True
        return False

    def determine_gender(self, full_name: str) -> Gender:
        """Guess gender from patronymic suffixes, then from the given name."""
        tokens = _normalize(full_name).split()
        if not tokens:
            return Gender.UNKNOWN

        for token in reversed(tokens[1:]):
            if any(token.endswith(suffix) for suffix in FEMALE_SUFFIXES):
                return Gender.FEMALE
            if any(token.endswith(suffix) for suffix in MALE_SUFFIXES):
                return Gender.MALE

        if _bases(tokens[0], MALE_NAME_VARIANTS):
            return Gender.MALE
        if _bases(tokens[0], FEMALE_NAME_VARIANTS):
            return Gender.FEMALE
        return Gender.UNKNOWN

    def similarity(self, first: str, second: str) -> float:
        """Spelling similarity score from 0 to 100 (informational only)."""
        return fuzz.ratio(_normalize(first), _normalize(second))
