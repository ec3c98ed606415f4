"""Cross-reference resolution for family entries.

Given a nuclear family, the resolver fetches the families its members are
linked to: each parent's birth family, each married child's own family and
each married child's spouse's birth family. Exactly one hop is taken per
category; linked families are never expanded further.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from kalvian_roots.errors import (
    InvalidIdentifier,
    NotFound,
    ParseFailure,
    RootsError,
    Unresolvable,
)
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.protocols import FamilyParsingService, FamilyTextLocator
from kalvian_roots.registry import FamilyIDRegistry
from kalvian_roots.schemas import Family, FamilyNetwork, Person

logger = logging.getLogger(__name__)

PARENT_AS_CHILD = "parent_as_child"
CHILD_AS_PARENT = "child_as_parent"
SPOUSE_AS_CHILD = "spouse_as_child"
CATEGORIES = (PARENT_AS_CHILD, CHILD_AS_PARENT, SPOUSE_AS_CHILD)


@dataclass
class CategoryStatistics:
    """Counters for one cross-reference category."""

    attempted: int = 0
    resolved: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class ResolutionStatistics:
    """Counters for every cross-reference category."""

    categories: dict[str, CategoryStatistics] = field(
        default_factory=lambda: {name: CategoryStatistics() for name in CATEGORIES}
    )

    def __getitem__(self, category: str) -> CategoryStatistics:
        return self.categories[category]

    @property
    def total_resolved(self) -> int:
        return sum(stats.resolved for stats in self.categories.values())

    @property
    def total_failed(self) -> int:
        return sum(stats.failed for stats in self.categories.values())

    def merge(self, other: "ResolutionStatistics") -> None:
        for name, stats in other.categories.items():
            mine = self.categories[name]
            mine.attempted += stats.attempted
            mine.resolved += stats.resolved
            mine.failed += stats.failed
            mine.skipped += stats.skipped

    def reset(self) -> None:
        self.categories = {name: CategoryStatistics() for name in CATEGORIES}

    def summary(self) -> str:
        return ", ".join(
            f"{name}: {stats.resolved}/{stats.attempted}"
            for name, stats in self.categories.items()
        )


@dataclass
class _ResolutionRun:
    network: FamilyNetwork
    statistics: ResolutionStatistics = field(default_factory=ResolutionStatistics)
    fetches: dict[str, asyncio.Future] = field(default_factory=dict)


class FamilyResolver:
    """Resolve the cross-referenced families of a nuclear family."""

    def __init__(
        self,
        registry: FamilyIDRegistry,
        locator: FamilyTextLocator,
        parser: FamilyParsingService,
        matcher: NameEquivalenceMatcher | None = None,
        parse_timeout: float | None = None,
        cached_family: Callable[[str], Family | None] | None = None,
    ):
        """Initialize the resolver.

        Args:
            registry: Catalog used to validate every family reference
            locator: Source of raw family text
            parser: Service turning family text into Family records
            matcher: Name matcher for finding a spouse inside a linked family
            parse_timeout: Seconds allowed per parse call (None for no limit)
            cached_family: Optional lookup of already parsed families by ID
        """
        self.registry = registry
        self.locator = locator
        self.parser = parser
        self.matcher = matcher or NameEquivalenceMatcher()
        self.parse_timeout = parse_timeout
        self.cached_family = cached_family
        self.statistics = ResolutionStatistics()

    async def load_family(self, family_id: str) -> Family:
        """Locate and parse a single family.

        Args:
            family_id: Family identifier, in any case and spacing

        Returns:
            The parsed Family

        Raises:
            InvalidIdentifier: If the ID is not in the registry
            NotFound: If the corpus has no text for the ID
            ParseFailure: If parsing fails or times out
        """
        reference = " ".join(family_id.split())
        if not self.registry.is_valid(reference):
            raise InvalidIdentifier(family_id)

        text = self.locator.extract_family_text(reference)
        if not text:
            raise NotFound(reference)

        try:
            return await asyncio.wait_for(
                self.parser.parse_family(reference, text), timeout=self.parse_timeout
            )
        except asyncio.TimeoutError as e:
            raise ParseFailure(reference, f"timed out after {self.parse_timeout}s") from e

    async def resolve_network(
        self, family_id: str, resolve_cross_references: bool = True
    ) -> FamilyNetwork:
        """Load a family and resolve its cross-references."""
        family = await self.load_family(family_id)
        return await self.resolve(family, resolve_cross_references)

    async def resolve(
        self, family: Family, resolve_cross_references: bool = True
    ) -> FamilyNetwork:
        """Build the network around a nuclear family.

        Failures of individual linked families are logged and leave that
        entry out of the network.

        Args:
            family: The nuclear family
            resolve_cross_references: False returns a network with only the
                nuclear family

        Returns:
            The best-effort FamilyNetwork
        """
        run = _ResolutionRun(network=FamilyNetwork(main_family=family))
        if not resolve_cross_references:
            return run.network

        logger.info("Resolving cross-references for %s", family.family_id)
        children = [child for child in family.all_children if child.as_parent and child.spouse]
        await asyncio.gather(
            self._resolve_parents(family, run),
            *(self._resolve_child(child, run) for child in children),
        )

        self.statistics.merge(run.statistics)
        logger.info(
            "Resolved %d linked families for %s (%s)",
            run.network.total_resolved_families,
            family.family_id,
            run.statistics.summary(),
        )
        return run.network

    async def _resolve_parents(self, family: Family, run: _ResolutionRun) -> None:
        couple = family.primary_couple
        if couple is None:
            return

        async def resolve_parent(parent: Person) -> None:
            linked = await self._fetch_linked(parent.as_child, PARENT_AS_CHILD, run)
            if linked is not None:
                run.network.as_child_families[parent.display_name] = linked

        await asyncio.gather(
            *(resolve_parent(p) for p in (couple.husband, couple.wife) if p.as_child)
        )

    async def _resolve_child(self, child: Person, run: _ResolutionRun) -> None:
        as_parent_family = await self._fetch_linked(child.as_parent, CHILD_AS_PARENT, run)
        if as_parent_family is not None:
            run.network.as_parent_families[child.display_name] = as_parent_family

        spouse_reference = child.spouse_parents_family_id
        if as_parent_family is not None:
            spouse = self.find_spouse(as_parent_family, child)
            if spouse is not None and spouse.as_child:
                spouse_reference = spouse.as_child
        if not spouse_reference:
            return

        spouse_family = await self._fetch_linked(spouse_reference, SPOUSE_AS_CHILD, run)
        if spouse_family is not None:
            run.network.spouse_as_child_families[child.spouse.strip()] = spouse_family

    def find_spouse(self, as_parent_family: Family, child: Person) -> Person | None:
        """Find a married child's spouse among the parents of the child's own family."""
        for candidate in as_parent_family.all_parents:
            if self._is_same_person(candidate, child):
                continue
            if self.matcher.are_names_equivalent(candidate.display_name, child.spouse or ""):
                return candidate
        return None

    def _is_same_person(self, candidate: Person, person: Person) -> bool:
        if candidate.birth_date and person.birth_date:
            return candidate.birth_date == person.birth_date
        return self.matcher.are_names_equivalent(candidate.name, person.name)

    async def _fetch_linked(
        self, reference: str | None, category: str, run: _ResolutionRun
    ) -> Family | None:
        reference = " ".join((reference or "").split())
        if not reference:
            return None

        stats = run.statistics[category]
        stats.attempted += 1
        if not self.registry.is_valid(reference):
            logger.debug("Skipping %s reference %r: not a registered family", category, reference)
            stats.skipped += 1
            return None

        key = self.registry.normalize(reference)
        fetch = run.fetches.get(key)
        if fetch is None:
            fetch = asyncio.ensure_future(self._load_linked(reference))
            run.fetches[key] = fetch

        try:
            family = await fetch
        except Unresolvable as e:
            logger.warning("%s", e)
            stats.failed += 1
            return None

        stats.resolved += 1
        return family

    async def _load_linked(self, reference: str) -> Family:
        if self.cached_family is not None:
            cached = self.cached_family(reference)
            if cached is not None:
                logger.debug("Using cached family for %s", reference)
                return cached
        try:
            return await self.load_family(reference)
        except RootsError as e:
            raise Unresolvable(reference, e) from e
