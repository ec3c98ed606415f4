"""Family ID catalog and navigation."""

from kalvian_roots.registry.family_ids import (
    ClanGroup,
    FamilyIDRegistry,
    default_registry,
    split_clan,
    suffix_sort_key,
)

__all__ = [
    "ClanGroup",
    "FamilyIDRegistry",
    "default_registry",
    "split_clan",
    "suffix_sort_key",
]
