"""
Volatile Memory Store — in-process, non-persistent.

Plain dicts of records per collection; similarity is numpy cosine over
every record in the collection. Everything is lost when the process exits.
Good for development and tests, not for real memory.
"""

from __future__ import annotations

import logging

import numpy as np

from noesis.memory.base import MemoryRecord, VectorStore

logger = logging.getLogger(__name__)


class VolatileMemoryStore(VectorStore):
    def __init__(self) -> None:
        self._collections: dict[str, dict[str, MemoryRecord]] = {}

    async def create_collection(self, collection: str) -> None:
        if collection not in self._collections:
            self._collections[collection] = {}
            logger.debug(f"Created volatile collection: {collection}")

    async def get_collections(self) -> list[str]:
        return list(self._collections.keys())

    async def does_collection_exist(self, collection: str) -> bool:
        return collection in self._collections

    async def delete_collection(self, collection: str) -> None:
        self._collections.pop(collection, None)

    async def upsert(self, collection: str, record: MemoryRecord) -> str:
        if collection not in self._collections:
            raise KeyError(f"Collection does not exist: {collection}")
        key = record.key or record.metadata.id
        self._collections[collection][key] = record.with_key(key).stamped()
        return key

    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryRecord | None:
        return self._collections.get(collection, {}).get(key)

    async def remove(self, collection: str, key: str) -> None:
        self._collections.get(collection, {}).pop(key, None)

    async def get_nearest_matches(
        self,
        collection: str,
        embedding: list[float],
        limit: int,
        min_relevance_score: float = 0.0,
        with_embeddings: bool = False,
    ) -> list[tuple[MemoryRecord, float]]:
        records = list(self._collections.get(collection, {}).values())
        if limit <= 0 or not records:
            return []

        query_vec = np.asarray(embedding, dtype=float)
        matrix = np.asarray([r.embedding for r in records], dtype=float)
        if matrix.ndim != 2 or matrix.shape[1] != query_vec.shape[0]:
            raise ValueError(
                f"Embedding size mismatch in collection '{collection}': "
                f"query has {query_vec.shape[0]} dimensions"
            )

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query_vec / norms, 0.0)

        ranked = sorted(
            (
                (record, float(score))
                for record, score in zip(records, scores)
                if score >= min_relevance_score
            ),
            key=lambda pair: pair[1],
            reverse=True,
        )
        return ranked[:limit]

    def __len__(self) -> int:
        return sum(len(records) for records in self._collections.values())
