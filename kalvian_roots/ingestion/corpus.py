"""Family text location in the corpus file.

The corpus is a plain-text transcription of Juuret Kälviällä. Each family
entry is a block of lines separated from its neighbours by a blank line and
starting with the family identifier, e.g. ``KORPI 6, page 105``.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

FAMILY_HEADER = re.compile(r"^([A-ZÄÖÅ-]+(?:\s+[IVX]+)?\s+\d+[A-Z]?)(?=$|[,\s])")


def _normalize(family_id: str) -> str:
    return " ".join(family_id.split()).upper()


@dataclass
class FamilyBlock:
    """The raw text of one family entry with its position in the corpus."""

    family_id: str
    text: str
    line_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "family_id": self.family_id,
            "text": self.text,
            "line_number": self.line_number,
        }


def split_family_blocks(content: str) -> list[FamilyBlock]:
    """Split corpus text into family blocks in corpus order.

    Blocks whose first line does not start with a family identifier
    (chapter titles, introductions) are skipped.

    Args:
        content: Full corpus text

    Returns:
        List of FamilyBlock objects
    """
    blocks: list[FamilyBlock] = []
    current: list[str] = []
    start = 0

    def flush() -> None:
        if not current:
            return
        header = FAMILY_HEADER.match(current[0].strip().upper())
        if header:
            blocks.append(
                FamilyBlock(
                    family_id=_normalize(header.group(1)),
                    text="\n".join(current).strip(),
                    line_number=start,
                )
            )

    for line_number, line in enumerate(content.splitlines(), start=1):
        if line.strip():
            if not current:
                start = line_number
            current.append(line)
        else:
            flush()
            current = []
    flush()
    return blocks


class CorpusFile:
    """Family text locator backed by a UTF-8 corpus text file."""

    def __init__(self, content: str, source: Path | None = None):
        """Index the corpus content.

        Args:
            content: Full corpus text
            source: Path the content was read from (for messages only)
        """
        self.source = source
        self.blocks = split_family_blocks(content)
        self._positions: dict[str, int] = {}
        for position, block in enumerate(self.blocks):
            if block.family_id in self._positions:
                logger.warning("Duplicate family %s at line %d", block.family_id, block.line_number)
                continue
            self._positions[block.family_id] = position
        logger.debug("Indexed %d family blocks", len(self.blocks))

    @classmethod
    def from_path(cls, path: Path) -> "CorpusFile":
        """Read and index a corpus file."""
        logger.info("Loading corpus from %s", path)
        return cls(path.read_text(encoding="utf-8"), source=path)

    def extract_family_text(self, family_id: str) -> str | None:
        """Return the raw text block for a family, or None if absent."""
        position = self._positions.get(_normalize(family_id))
        if position is None:
            logger.debug("No text block for %s", family_id)
            return None
        return self.blocks[position].text

    def find_next_family_id(self, after: str) -> str | None:
        """Return the identifier of the block following ``after``, or None at the end."""
        position = self._positions.get(_normalize(after))
        if position is None or position + 1 >= len(self.blocks):
            return None
        return self.blocks[position + 1].family_id

    def get_all_family_ids(self) -> list[str]:
        return [block.family_id for block in self.blocks]
