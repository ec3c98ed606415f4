"""Corpus access: locating family text blocks."""

from kalvian_roots.ingestion.corpus import CorpusFile, FamilyBlock, split_family_blocks

__all__ = ["CorpusFile", "FamilyBlock", "split_family_blocks"]
