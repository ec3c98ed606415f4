"""Given-name equivalence and gender detection."""

from kalvian_roots.names.equivalence import Gender, NameEquivalenceMatcher

__all__ = ["Gender", "NameEquivalenceMatcher"]
