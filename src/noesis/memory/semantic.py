"""
Semantic Text Memory — embeddings + a vector store = save / recall by meaning.

The façade the kernel and skills use. Callers speak text; this class
embeds it with the EmbeddingBackend and reads/writes MemoryRecords in the
VectorStore. Collections are created on first save.
"""

from __future__ import annotations

import logging

from noesis.memory.base import MemoryQueryResult, MemoryRecord, VectorStore
from noesis.providers.base import EmbeddingBackend

logger = logging.getLogger(__name__)


class SemanticTextMemory:
    def __init__(self, storage: VectorStore, embedder: EmbeddingBackend):
        self._storage = storage
        self._embedder = embedder

    @property
    def storage(self) -> VectorStore:
        return self._storage

    @property
    def embedder(self) -> EmbeddingBackend:
        return self._embedder

    async def _embed_one(self, text: str) -> list[float]:
        vectors = await self._embedder.embed([text])
        return vectors[0]

    async def _ensure_collection(self, collection: str) -> None:
        if not await self._storage.does_collection_exist(collection):
            await self._storage.create_collection(collection)

    async def save_information(
        self,
        collection: str,
        text: str,
        id: str,
        description: str = "",
        additional_metadata: str = "",
    ) -> str:
        """Embed ``text`` and store it under ``id``. Returns the record key."""
        embedding = await self._embed_one(text)
        record = MemoryRecord.local_record(
            id=id,
            text=text,
            embedding=embedding,
            description=description,
            additional_metadata=additional_metadata,
        )
        await self._ensure_collection(collection)
        key = await self._storage.upsert(collection, record)
        logger.debug(f"Saved memory {key} in {collection}")
        return key

    async def save_reference(
        self,
        collection: str,
        text: str,
        external_id: str,
        external_source_name: str,
        description: str = "",
        additional_metadata: str = "",
    ) -> str:
        """Store a pointer to external content, embedded by ``text``."""
        embedding = await self._embed_one(text)
        record = MemoryRecord.reference_record(
            external_id=external_id,
            source_name=external_source_name,
            embedding=embedding,
            description=description,
            additional_metadata=additional_metadata,
        )
        await self._ensure_collection(collection)
        return await self._storage.upsert(collection, record)

    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryQueryResult | None:
        record = await self._storage.get(collection, key, with_embedding)
        if record is None:
            return None
        return MemoryQueryResult.from_record(record, 1.0, with_embedding)

    async def remove(self, collection: str, key: str) -> None:
        await self._storage.remove(collection, key)

    async def search(
        self,
        collection: str,
        query: str,
        limit: int = 1,
        min_relevance_score: float = 0.7,
        with_embeddings: bool = False,
    ) -> list[MemoryQueryResult]:
        """Records in ``collection`` most similar to ``query``, best first."""
        query_embedding = await self._embed_one(query)
        matches = await self._storage.get_nearest_matches(
            collection,
            query_embedding,
            limit,
            min_relevance_score,
            with_embeddings,
        )
        return [
            MemoryQueryResult.from_record(record, relevance, with_embeddings)
            for record, relevance in matches
        ]

    async def get_collections(self) -> list[str]:
        return await self._storage.get_collections()
