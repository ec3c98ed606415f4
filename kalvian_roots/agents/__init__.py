"""Agents for parsing family entries and resolving their cross-references."""

from kalvian_roots.agents.parse_family import LLMFamilyParser
from kalvian_roots.agents.resolver import FamilyResolver, ResolutionStatistics

__all__ = ["LLMFamilyParser", "FamilyResolver", "ResolutionStatistics"]
