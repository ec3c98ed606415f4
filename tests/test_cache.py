"""Tests for the family network cache and its prefetch worker."""

import asyncio

import pytest

from conftest import FakeParser
from kalvian_roots.agents.resolver import FamilyResolver
from kalvian_roots.errors import InvalidIdentifier, ParseFailure
from kalvian_roots.schemas import FamilyNetwork
from kalvian_roots.storage import FamilyNetworkCache


def _cache(registry, corpus, parser, **kwargs) -> FamilyNetworkCache:
    resolver = FamilyResolver(registry=registry, locator=corpus, parser=parser)
    return FamilyNetworkCache(resolver=resolver, locator=corpus, **kwargs)


class TestEntries:
    """Storing, replacing and removing entries."""

    def test_overwrite_keeps_one_entry(self, cache, families):
        network = FamilyNetwork(main_family=families["KORPI 7"])

        cache.cache_network(network, 1.0)
        cache.cache_network(network, 2.5)

        assert cache.cached_family_count == 1
        assert cache.get_cached_entry("korpi 7").extraction_time == 2.5

    def test_lookup_by_any_spelling(self, cache, families):
        cache.cache_network(FamilyNetwork(main_family=families["KORPI 7"]), 1.0)

        assert cache.is_cached("Korpi  7")
        assert cache.get_cached_nuclear_family("korpi 7") == families["KORPI 7"]
        assert cache.get_cached_network("KORPI 8") is None

    def test_remove_and_clear(self, cache, families):
        for family_id in ("KORPI 7", "RITA 9"):
            cache.cache_network(FamilyNetwork(main_family=families[family_id]), 1.0)

        cache.remove_from_cache("korpi 7")
        assert cache.cached_family_ids() == ["RITA 9"]

        cache.clear_cache()
        assert cache.cached_family_count == 0
        assert cache.status_message == "Cache cleared"

    def test_cached_ids_in_corpus_order(self, cache, families):
        for family_id in ("RITA 9", "HERLEVI 1", "KORPI 7"):
            cache.cache_network(FamilyNetwork(main_family=families[family_id]), 1.0)

        assert cache.cached_family_ids() == ["HERLEVI 1", "KORPI 7", "RITA 9"]


class TestGetOrResolve:
    """Foreground resolution through the cache."""

    @pytest.mark.asyncio
    async def test_miss_resolves_and_caches(self, cache, parser):
        network = await cache.get_or_resolve("korpi 6")

        assert network.total_resolved_families == 6
        assert cache.is_cached("KORPI 6")
        assert cache.get_cached_entry("KORPI 6").extraction_time >= 0

        again = await cache.get_or_resolve("KORPI 6")
        assert again is network
        assert parser.calls.count("KORPI 6") == 1

    @pytest.mark.asyncio
    async def test_preview_is_not_cached(self, cache):
        network = await cache.get_or_resolve("KORPI 6", resolve_cross_references=False)

        assert network.total_resolved_families == 0
        assert not cache.is_cached("KORPI 6")

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_resolution(self, registry, corpus, families):
        parser = FakeParser(families, delay=0.02)
        cache = _cache(registry, corpus, parser)

        first, second = await asyncio.gather(
            cache.get_or_resolve("KORPI 7"), cache.get_or_resolve("korpi 7")
        )

        assert first is second
        assert parser.calls.count("KORPI 7") == 1
        assert not cache.is_resolving("KORPI 7")

    @pytest.mark.asyncio
    async def test_invalid_identifier(self, cache):
        with pytest.raises(InvalidIdentifier):
            await cache.get_or_resolve("NOWHERE 1")

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, registry, corpus, families):
        cache = _cache(registry, corpus, FakeParser(families, failing={"KORPI 7"}))

        with pytest.raises(ParseFailure):
            await cache.get_or_resolve("KORPI 7")

        assert not cache.is_cached("KORPI 7")
        assert not cache.is_resolving("KORPI 7")


class TestBackgroundProcessing:
    """The prefetch worker."""

    @pytest.mark.asyncio
    async def test_limited_session(self, registry, corpus, families):
        cache = _cache(registry, corpus, FakeParser(families), prefetch_limit=1)

        worker = cache.start_background_processing("KORPI 6")
        assert cache.next_family_id == "KORPI 7"
        assert not cache.next_family_ready

        await worker

        status = cache.status()
        assert status.family_id == "KORPI 7"
        assert status.ready
        assert status.status == "ready"
        assert status.processed_in_session == 1
        assert cache.cached_family_ids() == ["KORPI 7"]
        assert "limit" in status.message

    @pytest.mark.asyncio
    async def test_unlimited_session_runs_to_the_end(self, cache):
        await cache.start_background_processing("KORPI 6")

        assert cache.cached_family_ids() == ["KORPI 7", "KORVELA 3", "RITA 9"]
        assert cache.families_processed_in_session == 3
        assert cache.status_message == "All families processed"
        assert not cache.is_processing

    @pytest.mark.asyncio
    async def test_cached_families_are_skipped(self, cache, parser, families):
        cache.cache_network(FamilyNetwork(main_family=families["KORVELA 3"]), 1.0)

        await cache.start_background_processing("KORPI 6")

        assert "KORVELA 3" not in parser.calls
        assert cache.families_processed_in_session == 2

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_session(self, registry, corpus, families):
        cache = _cache(registry, corpus, FakeParser(families, failing={"KORPI 7"}))

        await cache.start_background_processing("KORPI 6")

        assert "KORPI 7" in cache.background_error
        assert cache.cached_family_ids() == ["KORVELA 3", "RITA 9"]
        assert cache.families_processed_in_session == 2

    @pytest.mark.asyncio
    async def test_stop(self, registry, corpus, families):
        cache = _cache(registry, corpus, FakeParser(families, delay=0.05))

        cache.start_background_processing("HERLEVI 1")
        await asyncio.sleep(0.01)
        cache.stop_background_processing()
        await cache.wait_for_background()

        assert not cache.is_processing
        assert cache.families_processed_in_session == 0
        assert not cache.is_cached("KORPELA 2")

    @pytest.mark.asyncio
    async def test_restart_replaces_the_previous_session(self, cache):
        first = cache.start_background_processing("HERLEVI 1")
        second = cache.start_background_processing("KORPI 7")

        await second

        assert first.done()
        assert not cache.is_cached("HYYPPÄ 5")
        assert cache.cached_family_ids() == ["KORVELA 3", "RITA 9"]
        assert cache.families_processed_in_session == 2

    @pytest.mark.asyncio
    async def test_foreground_request_joins_prefetch(self, registry, corpus, families):
        parser = FakeParser(families, delay=0.05)
        cache = _cache(registry, corpus, parser, prefetch_limit=1)

        worker = cache.start_background_processing("KORPI 6")
        await asyncio.sleep(0.01)
        assert cache.is_resolving("KORPI 7")
        assert cache.family_status("korpi 7").status == "processing"

        network = await cache.get_or_resolve("KORPI 7")
        await worker

        assert network.family_id == "KORPI 7"
        assert parser.calls.count("KORPI 7") == 1
        assert cache.family_status("KORPI 7").status == "ready"

    @pytest.mark.asyncio
    async def test_last_family_has_no_next(self, cache):
        await cache.start_background_processing("RITA 9")

        assert cache.next_family_id is None
        assert cache.status_message == "All families processed"
        assert cache.status().status == "idle"
