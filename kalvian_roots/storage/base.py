"""Cached entries and the persistence interface for resolved networks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from kalvian_roots.schemas import FamilyNetwork


@dataclass
class CachedFamily:
    """A resolved network together with how long it took to resolve."""

    network: FamilyNetwork
    extraction_time: float
    cached_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def family_id(self) -> str:
        return self.network.family_id


class NetworkStore(Protocol):
    """Persistence for cached networks, keyed by normalized family ID."""

    def load_family(self, family_id: str) -> CachedFamily | None: ...

    def load_all(self) -> dict[str, CachedFamily]: ...

    def save(self, family_id: str, entry: CachedFamily) -> None: ...

    def delete(self, family_id: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryNetworkStore:
    """Store that keeps entries for the lifetime of the process only."""

    def __init__(self):
        self._entries: dict[str, CachedFamily] = {}

    def load_family(self, family_id: str) -> CachedFamily | None:
        return self._entries.get(family_id)

    def load_all(self) -> dict[str, CachedFamily]:
        return dict(self._entries)

    def save(self, family_id: str, entry: CachedFamily) -> None:
        self._entries[family_id] = entry

    def delete(self, family_id: str) -> None:
        self._entries.pop(family_id, None)

    def clear(self) -> None:
        self._entries.clear()
