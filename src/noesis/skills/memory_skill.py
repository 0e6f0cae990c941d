"""Memory skill — save and recall text through the kernel's semantic memory.

Built-in skill, always registered. Lets prompt templates pull relevant
memories in with ``{{memory.recall $input}}`` and lets callers store new
ones with ``memory.save``.
"""

from __future__ import annotations

import logging
import uuid

from noesis.kernel.skills import skill_function

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "generic"
DEFAULT_RELEVANCE = 0.75
DEFAULT_LIMIT = 1


def _as_float(value: str | float, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be a number, got '{value}'")


def _as_int(value: str | int, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be a whole number, got '{value}'")


class MemorySkill:
    """Semantic save / recall / remove over named collections."""

    @skill_function(description="Recall the memories most relevant to the input")
    async def recall(
        self,
        kernel,
        input: str,
        collection: str = DEFAULT_COLLECTION,
        relevance: str = str(DEFAULT_RELEVANCE),
        limit: str = str(DEFAULT_LIMIT),
    ) -> str:
        query = input.strip()
        if not query:
            return ""

        results = await kernel.memory.search(
            collection,
            query,
            limit=_as_int(limit, "limit"),
            min_relevance_score=_as_float(relevance, "relevance"),
        )
        if not results:
            logger.debug(f"No memories in '{collection}' for: {query[:60]}")
            return ""
        return "\n".join(r.metadata.text for r in results)

    @skill_function(description="Save the input to long-term memory")
    async def save(
        self,
        kernel,
        input: str,
        collection: str = DEFAULT_COLLECTION,
        key: str = "",
    ) -> str:
        text = input.strip()
        if not text:
            raise ValueError("Cannot save empty memory")
        key = key or str(uuid.uuid4())
        saved = await kernel.memory.save_information(collection, text, id=key)
        logger.info(f"Saved memory {saved} in '{collection}': {text[:80]}")
        return saved

    @skill_function(description="Remove a memory by key")
    async def remove(self, kernel, key: str, collection: str = DEFAULT_COLLECTION) -> str:
        await kernel.memory.remove(collection, key)
        return ""
