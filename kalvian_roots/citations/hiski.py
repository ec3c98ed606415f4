"""HisKi church record lookups.

HisKi (hiski.genealogia.fi) indexes the baptism, burial and marriage books
of Finnish parishes. A lookup searches the Kälviä area parishes for the
event date, picks the result row printed with the same date and follows it
to the record's permanent citation link.

Dates follow the citation rules: leading zeros are dropped and two-digit
years are expanded from the parent's birth year. Names are searched in the
Swedish or Latin form the church books were written in.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, urlencode

import aiohttp
from pydantic import BaseModel, Field

from kalvian_roots.citations.dates import TWO_DIGIT_YEAR, expand_two_digit_year
from kalvian_roots.errors import HiskiError, HiskiRecordNotFound
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.schemas import Person

logger = logging.getLogger(__name__)

HISKI_HOST = "https://hiski.genealogia.fi"
HISKI_URL = f"{HISKI_HOST}/hiski"

# Kälviä and the neighbouring parishes
PARISHES = "0053,0093,0165,0183,0218,0172,0265,0295,0301,0386,0555,0581,0614"
MAX_RESULTS = "15"

# Checked in order; the first one equivalent to the searched name wins
SWEDISH_PREFERRED = (
    "Petrus", "Pehr", "Johannes", "Henricus", "Henrik", "Ericus", "Erik",
    "Matthias", "Matts", "Mats", "Elisabet", "Birgitta", "Brita",
)

YEARS_LINE = re.compile(r"<LI>\s*Years\s+([0-9.]+)\s*-\s*([0-9.]+)", re.IGNORECASE)
RESULT_LINK = re.compile(
    r'<a\s+href="([^"]+)">\s*<img[^>]+src="/historia/sl\.gif"[^>]*>\s*</a>\s*([0-9.]+)',
    re.IGNORECASE,
)
CITATION_LINK = re.compile(r'HREF="(/hiski\?en\+t\d+)"', re.IGNORECASE)


class EventType(str, Enum):
    BIRTH = "birth"
    DEATH = "death"
    MARRIAGE = "marriage"
    BAPTISM = "baptism"
    BURIAL = "burial"


# Church book searched for each event
RECORD_BOOKS = {
    EventType.BIRTH: "kastetut",
    EventType.BAPTISM: "kastetut",
    EventType.DEATH: "haudatut",
    EventType.BURIAL: "haudatut",
    EventType.MARRIAGE: "vihityt",
}


class HiskiCitation(BaseModel):
    """A citation link to one HisKi record."""

    record_type: EventType = Field(description="Kind of church record")
    person_name: str = Field(description="Person the record was looked up for")
    date: str = Field(description="Event date as printed in the family entry")
    url: str = Field(description="Permanent HisKi link to the record")
    record_id: str = Field(description="HisKi record number from the link")
    spouse: str | None = Field(default=None, description="Wife's name for marriage records")


@dataclass(frozen=True)
class HiskiQuery:
    """A record query for one event of one person."""

    event_type: EventType
    person_name: str
    date: str
    spouse_name: str | None = None
    father_name: str | None = None
    mother_name: str | None = None

    @property
    def query_url(self) -> str:
        params: list[tuple[str, str]] = [("et", self.event_type.value)]
        if self.event_type is EventType.MARRIAGE:
            params += [("spouse1", self.person_name), ("spouse2", self.spouse_name or "")]
        elif self.event_type in (EventType.BIRTH, EventType.BAPTISM):
            params.append(("child", self.person_name))
        else:
            params.append(("person", self.person_name))
        params.append(("date", self.date))
        if self.father_name:
            params.append(("father", self.father_name))
        if self.mother_name:
            params.append(("mother", self.mother_name))
        return f"{HISKI_URL}?{urlencode(params, quote_via=quote)}"

    @property
    def description(self) -> str:
        kind = self.event_type.value.capitalize()
        if self.event_type is EventType.MARRIAGE:
            return f"{kind} record for {self.person_name} and {self.spouse_name} on {self.date}"
        return f"{kind} record for {self.person_name} on {self.date}"

    @classmethod
    def from_person(cls, person: Person, event_type: EventType) -> "HiskiQuery | None":
        """Build the query for an event of a person.

        Returns:
            The query, or None if the person lacks the date (or, for a
            marriage, the spouse) the event needs
        """
        if event_type in (EventType.BIRTH, EventType.BAPTISM):
            if not person.birth_date:
                return None
            return cls(
                event_type,
                person.name,
                person.birth_date,
                father_name=person.father_name,
                mother_name=person.mother_name,
            )
        if event_type in (EventType.DEATH, EventType.BURIAL):
            if not person.death_date:
                return None
            return cls(event_type, person.display_name, person.death_date)
        if not person.best_marriage_date or not person.spouse:
            return None
        return cls(
            event_type,
            person.display_name,
            person.best_marriage_date,
            spouse_name=person.spouse,
        )


def format_date_for_hiski(date: str, parent_birth_year: int | None = None) -> str:
    """Format a printed date the way HisKi prints it.

    "03.09.1753" becomes "3.9.1753"; a two-digit year, alone or in a full
    date, is expanded from the parent's birth year; "n 1666" searches 1666.
    """
    cleaned = date.strip()
    if cleaned.startswith("n "):
        cleaned = cleaned[2:].strip()
    if TWO_DIGIT_YEAR.match(cleaned):
        return expand_two_digit_year(cleaned, parent_birth_year)

    parts = cleaned.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return cleaned
    day, month, year = parts
    if len(year) == 2:
        year = expand_two_digit_year(year, parent_birth_year)
    return f"{int(day)}.{int(month)}.{year}"


def swedish_equivalent(name: str, matcher: NameEquivalenceMatcher) -> str:
    """Swedish or Latin form of a given name for searching the church books.

    Only the given name is kept. Names without a preferred form are
    returned as they are.
    """
    tokens = name.split()
    if not tokens:
        return name
    equivalents = matcher.equivalent_names(tokens[0])
    for preferred in SWEDISH_PREFERRED:
        if preferred.lower() in equivalents:
            logger.debug("Searching HisKi for %r as %r", name, preferred)
            return preferred
    return tokens[0]


def build_search_url(
    event_type: EventType,
    name: str,
    date: str,
    spouse_name: str | None = None,
    father_name: str | None = None,
) -> str:
    """Build the HisKi search for one event in the Kälviä area parishes.

    Args:
        event_type: Event to search; selects the church book
        name: Given name searched (the husband's for a marriage)
        date: Date in HisKi form, used as first and last search date
        spouse_name: Wife's given name for a marriage
        father_name: Father's given name for a birth or baptism

    Returns:
        The search URL, with the ISO-8859-1 encoding HisKi expects
    """
    params: list[tuple[str, str]] = [
        ("komento", "haku"),
        ("srk", PARISHES),
        ("kirja", RECORD_BOOKS[event_type]),
        ("kieli", "en"),
        ("alkuvuosi", date),
        ("loppuvuosi", date),
        ("maxkpl", MAX_RESULTS),
    ]
    if event_type in (EventType.BIRTH, EventType.BAPTISM):
        params += [("etunimi", name), ("ietunimi", father_name or ""), ("aetunimi", "")]
    elif event_type is EventType.MARRIAGE:
        params += [("ietunimi", name), ("aetunimi", spouse_name or "")]
    else:
        params += [("ietunimi", name), ("aetunimi", ""), ("ssuhde", "ei väliä")]
    return f"{HISKI_URL}?{urlencode(params, encoding='iso-8859-1')}"


def find_matching_record_url(html: str) -> str | None:
    """Find the result row printed with the searched date.

    The search page repeats the searched range in its "Years" line; the
    row whose date equals the first date of that range is the record.

    Returns:
        The record path, or None if no row carries that date
    """
    years = YEARS_LINE.search(html)
    if years is None:
        logger.warning("HisKi search page has no Years line")
        return None
    wanted = years.group(1)
    for match in RESULT_LINK.finditer(html):
        if match.group(2).strip() == wanted:
            return match.group(1)
    logger.warning("No HisKi result row dated %s", wanted)
    return None


def extract_citation_url(html: str) -> str | None:
    """Permanent citation link on a HisKi record page."""
    match = CITATION_LINK.search(html)
    if match is None:
        return None
    return HISKI_HOST + match.group(1)


def record_id_of(citation_url: str) -> str:
    return citation_url.rsplit("+t", 1)[-1]


class HiskiService:
    """Look up church records on HisKi and return their citation links."""

    def __init__(self, matcher: NameEquivalenceMatcher | None = None, timeout: float = 30.0):
        self.matcher = matcher or NameEquivalenceMatcher()
        self.timeout = timeout

    async def _fetch_text(self, url: str) -> str:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    raise HiskiError(f"HisKi error {response.status} for {url}")
                return await response.text(encoding="iso-8859-1")

    async def _lookup(self, search_url: str, date: str) -> str:
        try:
            search_html = await self._fetch_text(search_url)
            record_path = find_matching_record_url(search_html)
            if record_path is None:
                raise HiskiRecordNotFound(search_url, date)

            logger.debug("Found HisKi record %s", record_path)
            record_html = await self._fetch_text(HISKI_HOST + record_path)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HiskiError(f"HisKi request failed: {e!s}") from e

        citation_url = extract_citation_url(record_html)
        if citation_url is None:
            raise HiskiError(f"No citation link on HisKi record page {record_path}")
        return citation_url

    def search_url(self, query: HiskiQuery, parent_birth_year: int | None = None) -> str:
        """The HisKi search page a lookup for the query starts from."""
        hiski_date = format_date_for_hiski(query.date, parent_birth_year)
        spouse, father = query.spouse_name, query.father_name
        return build_search_url(
            query.event_type,
            swedish_equivalent(query.person_name, self.matcher),
            hiski_date,
            spouse_name=swedish_equivalent(spouse, self.matcher) if spouse else None,
            father_name=swedish_equivalent(father, self.matcher) if father else None,
        )

    async def query(
        self, query: HiskiQuery, parent_birth_year: int | None = None
    ) -> HiskiCitation:
        """Look up the record of a query built with HiskiQuery.from_person.

        Baptisms are searched in the same book as births and burials in the
        same book as deaths.

        Raises:
            HiskiRecordNotFound: If no record carries the event date
            HiskiError: If HisKi cannot be reached or the record page has
                no citation link
        """
        hiski_date = format_date_for_hiski(query.date, parent_birth_year)
        logger.info("HisKi search: %s", query.description)
        url = await self._lookup(self.search_url(query, parent_birth_year), hiski_date)
        return HiskiCitation(
            record_type=query.event_type,
            person_name=query.person_name,
            date=query.date,
            url=url,
            record_id=record_id_of(url),
            spouse=query.spouse_name,
        )

    async def query_birth(
        self,
        name: str,
        date: str,
        father_name: str | None = None,
        parent_birth_year: int | None = None,
    ) -> HiskiCitation:
        """Find the baptism record of a child."""
        query = HiskiQuery(EventType.BIRTH, name, date, father_name=father_name)
        return await self.query(query, parent_birth_year)

    async def query_death(self, name: str, date: str) -> HiskiCitation:
        """Find the burial record of a person."""
        return await self.query(HiskiQuery(EventType.DEATH, name, date))

    async def query_marriage(
        self,
        husband_name: str,
        wife_name: str,
        date: str,
        parent_birth_year: int | None = None,
    ) -> HiskiCitation:
        """Find the marriage record of a couple."""
        query = HiskiQuery(EventType.MARRIAGE, husband_name, date, spouse_name=wife_name)
        return await self.query(query, parent_birth_year)
