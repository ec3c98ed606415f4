"""Interfaces of the collaborators the resolver and cache depend on."""

from typing import Protocol

from kalvian_roots.schemas import Family


class FamilyTextLocator(Protocol):
    """Finds raw family text in the corpus. Returns None/empty instead of raising."""

    def extract_family_text(self, family_id: str) -> str | None: ...

    def find_next_family_id(self, after: str) -> str | None: ...

    def get_all_family_ids(self) -> list[str]: ...


class FamilyParsingService(Protocol):
    """Turns a raw family text block into a Family.

    Implementations raise ParseFailure when the text cannot be structured.
    """

    async def parse_family(self, family_id: str, raw_text: str) -> Family: ...
