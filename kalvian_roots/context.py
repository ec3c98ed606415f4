"""Wiring of the resolver, cache and citation generator from settings."""

import logging
from dataclasses import dataclass

from kalvian_roots.agents import FamilyResolver, LLMFamilyParser
from kalvian_roots.citations import CitationGenerator, HiskiService
from kalvian_roots.config import Settings, settings
from kalvian_roots.ingestion import CorpusFile
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.protocols import FamilyParsingService, FamilyTextLocator
from kalvian_roots.registry import FamilyIDRegistry, default_registry
from kalvian_roots.storage import FamilyNetworkCache, SQLiteNetworkStore

logger = logging.getLogger(__name__)


@dataclass
class RootsContext:
    """Components serving one corpus."""

    registry: FamilyIDRegistry
    matcher: NameEquivalenceMatcher
    locator: FamilyTextLocator
    resolver: FamilyResolver
    cache: FamilyNetworkCache
    citations: CitationGenerator
    hiski: HiskiService


def build_context(
    config: Settings | None = None,
    locator: FamilyTextLocator | None = None,
    parser: FamilyParsingService | None = None,
    registry: FamilyIDRegistry | None = None,
) -> RootsContext:
    """Create the components for a corpus.

    Args:
        config: Settings to use (default: global settings)
        locator: Text locator (default: the corpus file from settings)
        parser: Parsing service (default: LLMFamilyParser)
        registry: Family ID registry (default: catalog file from settings,
            or the built-in catalog)

    Returns:
        A RootsContext whose resolver reads linked families from the cache
    """
    config = config or settings

    if registry is None:
        if config.family_ids_path:
            registry = FamilyIDRegistry.from_file(config.family_ids_path)
        else:
            registry = default_registry()

    if locator is None:
        locator = CorpusFile.from_path(config.corpus_path)

    if parser is None:
        parser = LLMFamilyParser(config=config)

    matcher = NameEquivalenceMatcher()
    resolver = FamilyResolver(
        registry=registry,
        locator=locator,
        parser=parser,
        matcher=matcher,
        parse_timeout=config.parse_timeout,
    )

    store = SQLiteNetworkStore(config.cache_db_path) if config.cache_db_path else None
    cache = FamilyNetworkCache(
        resolver=resolver,
        locator=locator,
        store=store,
        prefetch_limit=config.prefetch_limit,
        prefetch_delay=config.prefetch_delay,
    )
    if store is not None:
        cache.load_persisted()
    resolver.cached_family = cache.get_cached_nuclear_family

    logger.debug("Built context with %d registered families", len(registry))
    return RootsContext(
        registry=registry,
        matcher=matcher,
        locator=locator,
        resolver=resolver,
        cache=cache,
        citations=CitationGenerator(matcher),
        hiski=HiskiService(matcher, timeout=config.hiski_timeout),
    )
