"""Family parsing agent.

This module uses an LLM to turn the raw text block of one family entry
into a structured Family record.
"""

import logging
from pathlib import Path

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from kalvian_roots.config import Settings, settings
from kalvian_roots.errors import ParseFailure
from kalvian_roots.schemas import Family

logger = logging.getLogger(__name__)

PROMPT_PATH = Path(__file__).parent / "prompts" / "family_parsing.md"


class LLMFamilyParser:
    """Parse family entries with an LLM using structured output."""

    def __init__(
        self,
        model_name: str | None = None,
        temperature: float = 0.0,
        config: Settings | None = None,
    ):
        """Initialize the family parser.

        Args:
            model_name: Optional model name override
            temperature: LLM temperature (0.0 for deterministic output)
            config: Settings to use instead of the global settings
        """
        self.config = config or settings
        self.model_name = model_name or self.config.openai_model
        self.temperature = temperature

        self.system_prompt = PROMPT_PATH.read_text(encoding="utf-8")

        # Initialize LLM based on provider
        if self.config.llm_provider == "openai":
            self.llm = ChatOpenAI(
                model=self.model_name,
                temperature=self.temperature,
                api_key=self.config.get_api_key(),
                timeout=self.config.parse_timeout,
            )
        else:
            raise NotImplementedError(
                f"LLM provider {self.config.llm_provider} not yet implemented. "
                "Currently only 'openai' is supported."
            )

        self.prompt = ChatPromptTemplate.from_messages(
            [
                # Literal braces in the prompt mark asChild references, not template variables
                ("system", self.system_prompt.replace("{", "{{").replace("}", "}}")),
                (
                    "human",
                    "Parse the following family entry.\n\n"
                    "Family ID: {family_id}\n\n"
                    "Text:\n{text}",
                ),
            ]
        )

        self.chain = self.prompt | self.llm.with_structured_output(Family)

    async def parse_family(self, family_id: str, raw_text: str) -> Family:
        """Parse one family entry.

        Args:
            family_id: Identifier the text was located by
            raw_text: The family's text block

        Returns:
            The structured Family

        Raises:
            ParseFailure: If the text is empty, the LLM call fails, or the
                result has no complete couple
        """
        if not raw_text or not raw_text.strip():
            raise ParseFailure(family_id, "empty family text")

        logger.debug("Parsing %s (%d chars)", family_id, len(raw_text))
        try:
            family = await self.chain.ainvoke({"family_id": family_id, "text": raw_text})
        except Exception as e:
            raise ParseFailure(family_id, str(e)) from e

        if family is None:
            raise ParseFailure(family_id, "model returned no family")
        if not family.family_id.strip():
            family = family.model_copy(update={"family_id": family_id})
        if not family.is_valid:
            raise ParseFailure(family_id, "; ".join(family.validate_structure()))
        return family
