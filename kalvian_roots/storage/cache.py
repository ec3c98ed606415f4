"""Family network cache with background prefetching.

Resolving a network takes several parse calls, so resolved networks are kept
in memory (optionally backed by a persistent store). While one family is on
screen a background task resolves the families that follow it in corpus
order, making forward navigation instant.

All state belongs to one asyncio event loop. The background worker is a
single task; cancelling it is cooperative and takes effect between families.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from kalvian_roots.agents.resolver import FamilyResolver
from kalvian_roots.errors import InvalidIdentifier, RootsError
from kalvian_roots.protocols import FamilyTextLocator
from kalvian_roots.registry import FamilyIDRegistry
from kalvian_roots.schemas import Family, FamilyNetwork
from kalvian_roots.storage.base import CachedFamily, InMemoryNetworkStore, NetworkStore

logger = logging.getLogger(__name__)

normalize = FamilyIDRegistry.normalize


@dataclass
class CacheStatus:
    """Snapshot of the cache and its background worker."""

    family_id: str | None
    processing: bool
    ready: bool
    message: str
    cached_count: int
    processed_in_session: int
    error: str | None = None

    @property
    def status(self) -> str:
        if self.ready:
            return "ready"
        if self.processing:
            return "processing"
        return "idle"

    def to_dict(self) -> dict:
        return {
            "family_id": self.family_id,
            "processing": self.processing,
            "ready": self.ready,
            "status": self.status,
            "message": self.message,
            "cached_count": self.cached_count,
            "processed_in_session": self.processed_in_session,
            "error": self.error,
        }


class _PrefetchSession:
    def __init__(self, start_after: str):
        self.start_after = start_after
        self.cancelled = False


class FamilyNetworkCache:
    """Keyed store of resolved family networks with a prefetching worker."""

    def __init__(
        self,
        resolver: FamilyResolver,
        locator: FamilyTextLocator,
        store: NetworkStore | None = None,
        prefetch_limit: int | None = None,
        prefetch_delay: float = 0.0,
    ):
        """Initialize the cache.

        Args:
            resolver: Resolver used for cache misses and prefetching
            locator: Corpus locator giving the order of families
            store: Persistence for entries (default: in memory only)
            prefetch_limit: Maximum families resolved per prefetch session
            prefetch_delay: Seconds to yield between prefetched families
        """
        self.resolver = resolver
        self.locator = locator
        self.store = store or InMemoryNetworkStore()
        self.prefetch_limit = prefetch_limit
        self.prefetch_delay = prefetch_delay

        self._entries: dict[str, CachedFamily] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self._worker: asyncio.Task | None = None
        self._session: _PrefetchSession | None = None

        self.next_family_id: str | None = None
        self.next_family_ready = False
        self.status_message = ""
        self.families_processed_in_session = 0
        self.background_error: str | None = None

    # Entries

    def load_persisted(self) -> int:
        """Load every entry from the store into memory.

        Returns:
            Number of entries loaded
        """
        entries = self.store.load_all()
        self._entries.update(entries)
        logger.info("Loaded %d cached networks", len(entries))
        return len(entries)

    def cache_network(self, network: FamilyNetwork, extraction_time: float) -> CachedFamily:
        """Store a network under its main family ID, replacing any previous entry."""
        return self._store(normalize(network.family_id), network, extraction_time)

    def _store(self, key: str, network: FamilyNetwork, extraction_time: float) -> CachedFamily:
        entry = CachedFamily(network=network, extraction_time=extraction_time)
        self._entries[key] = entry
        self.store.save(key, entry)
        if key == self.next_family_id:
            self.next_family_ready = True
        logger.debug("Cached %s (%.2fs)", key, extraction_time)
        return entry

    def get_cached_entry(self, family_id: str) -> CachedFamily | None:
        return self._entries.get(normalize(family_id))

    def get_cached_network(self, family_id: str) -> FamilyNetwork | None:
        entry = self.get_cached_entry(family_id)
        return entry.network if entry else None

    def get_cached_nuclear_family(self, family_id: str) -> Family | None:
        network = self.get_cached_network(family_id)
        return network.main_family if network else None

    def is_cached(self, family_id: str) -> bool:
        return normalize(family_id) in self._entries

    def is_resolving(self, family_id: str) -> bool:
        return normalize(family_id) in self._in_flight

    @property
    def cached_family_count(self) -> int:
        return len(self._entries)

    def cached_family_ids(self) -> list[str]:
        """Cached IDs in corpus order; IDs unknown to the registry sort last."""
        registry = self.resolver.registry
        return sorted(
            self._entries,
            key=lambda key: (registry.index_of(key) is None, registry.index_of(key) or 0, key),
        )

    def remove_from_cache(self, family_id: str) -> None:
        key = normalize(family_id)
        self._entries.pop(key, None)
        self.store.delete(key)
        if key == self.next_family_id:
            self.next_family_ready = False
        logger.info("Removed %s from cache", key)

    def clear_cache(self) -> None:
        """Drop every entry and stop any running prefetch."""
        self.stop_background_processing()
        self._entries.clear()
        self.store.clear()
        self.next_family_id = None
        self.next_family_ready = False
        self.families_processed_in_session = 0
        self.background_error = None
        self.status_message = "Cache cleared"
        logger.info("Cache cleared")

    # Resolution

    async def get_or_resolve(
        self, family_id: str, resolve_cross_references: bool = True
    ) -> FamilyNetwork:
        """Return the network for a family, resolving it on a cache miss.

        A resolution already running for the same family, in the foreground
        or in the prefetch worker, is awaited instead of started again.

        Args:
            family_id: Family identifier
            resolve_cross_references: False returns an uncached preview
                network with only the nuclear family

        Returns:
            The family's network

        Raises:
            InvalidIdentifier: If the ID is not in the registry
            NotFound: If the corpus has no text for the family
            ParseFailure: If the family text cannot be parsed
        """
        if not self.resolver.registry.is_valid(family_id):
            raise InvalidIdentifier(family_id)
        key = normalize(family_id)

        entry = self._entries.get(key)
        if entry is not None:
            return entry.network

        if not resolve_cross_references and key not in self._in_flight:
            return await self.resolver.resolve_network(family_id, resolve_cross_references=False)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._resolve_and_cache(family_id, key))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._finish_in_flight(key, done))
        else:
            logger.debug("Joining in-flight resolution of %s", key)
        return await asyncio.shield(task)

    async def _resolve_and_cache(self, family_id: str, key: str) -> FamilyNetwork:
        started = time.perf_counter()
        network = await self.resolver.resolve_network(family_id)
        self._store(key, network, time.perf_counter() - started)
        return network

    def _finish_in_flight(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    # Background prefetch

    @property
    def is_processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start_background_processing(self, current_id: str) -> asyncio.Task:
        """Start prefetching the families after ``current_id``.

        Any running prefetch is asked to stop; the new worker waits for it
        to finish its current family before starting.

        Args:
            current_id: The family currently being displayed

        Returns:
            The worker task
        """
        previous = self._worker if self.is_processing else None
        if self._session is not None:
            self._session.cancelled = True

        session = _PrefetchSession(start_after=current_id)
        self._session = session
        self.families_processed_in_session = 0
        self.background_error = None

        next_id = self.locator.find_next_family_id(current_id)
        self.next_family_id = normalize(next_id) if next_id else None
        self.next_family_ready = bool(next_id) and self.is_cached(next_id)
        self.status_message = f"Preparing {self.next_family_id}" if next_id else "No next family"

        self._worker = asyncio.create_task(self._run_prefetch(session, previous))
        logger.info("Started background processing after %s", normalize(current_id))
        return self._worker

    def stop_background_processing(self) -> None:
        """Ask the worker to stop before its next family."""
        if self._session is not None:
            self._session.cancelled = True
        if self.is_processing:
            self.status_message = "Stopping background processing"

    async def wait_for_background(self) -> None:
        """Wait until the current worker has exited."""
        if self._worker is not None:
            await asyncio.wait({self._worker})

    async def _run_prefetch(
        self, session: _PrefetchSession, previous: asyncio.Task | None
    ) -> None:
        if previous is not None:
            await asyncio.wait({previous})

        current = session.start_after
        while not session.cancelled:
            if self.prefetch_limit and self.families_processed_in_session >= self.prefetch_limit:
                self.status_message = f"Session limit of {self.prefetch_limit} families reached"
                break

            next_id = self.locator.find_next_family_id(current)
            if next_id is None:
                self.status_message = "All families processed"
                break
            current = next_id
            key = normalize(next_id)
            self.next_family_id = key
            self.next_family_ready = self.is_cached(key)

            if self.next_family_ready:
                self.status_message = f"{key} ready"
            elif not self.resolver.registry.is_valid(key):
                logger.debug("Skipping unregistered family %s", key)
            else:
                await self._prefetch_one(session, key)

            await asyncio.sleep(self.prefetch_delay)

        if session.cancelled:
            logger.info("Background processing cancelled after %s", current)
        else:
            logger.info(
                "Background processing finished: %d families resolved",
                self.families_processed_in_session,
            )

    async def _prefetch_one(self, session: _PrefetchSession, key: str) -> None:
        self.status_message = f"Processing {key}"
        try:
            await self.get_or_resolve(key)
        except RootsError as e:
            if session.cancelled:
                return
            self.background_error = str(e)
            self.status_message = f"Failed to process {key}"
            logger.warning("Background processing of %s failed: %s", key, e)
            return
        if session.cancelled:
            return
        self.families_processed_in_session += 1
        self.status_message = f"{key} ready"

    def status(self) -> CacheStatus:
        return CacheStatus(
            family_id=self.next_family_id,
            processing=self.is_processing,
            ready=self.next_family_ready,
            message=self.status_message,
            cached_count=self.cached_family_count,
            processed_in_session=self.families_processed_in_session,
            error=self.background_error,
        )

    def family_status(self, family_id: str) -> CacheStatus:
        """Status of one family: ready if cached, processing if being resolved."""
        key = normalize(family_id)
        return CacheStatus(
            family_id=key,
            processing=key in self._in_flight,
            ready=key in self._entries,
            message=f"{key} ready" if key in self._entries else "",
            cached_count=self.cached_family_count,
            processed_in_session=self.families_processed_in_session,
            error=self.background_error,
        )
