"""
Chroma Memory Store — Chroma REST API (v1) over httpx.

Collections are created with cosine space, so a query distance converts
to relevance as ``1 - distance``. Chroma addresses records inside a
collection by its id, which we look up by name on each call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from noesis.memory.base import MemoryRecord, MemoryRecordMetadata
from noesis.memory.http import HttpVectorStore

logger = logging.getLogger(__name__)

_INCLUDE_ALL = ["metadatas", "documents", "embeddings"]


class ChromaMemoryStore(HttpVectorStore):
    backend_name = "chroma"

    def __init__(self, http_client: httpx.AsyncClient, endpoint: str):
        super().__init__(http_client, endpoint)

    # --- Collections ---

    async def _collection_id(self, collection: str) -> str | None:
        body = await self._request(
            "GET", f"api/v1/collections/{collection}", allow_not_found=True
        )
        if not body:
            return None
        return body.get("id")

    async def create_collection(self, collection: str) -> None:
        await self._request(
            "POST",
            "api/v1/collections",
            json={
                "name": collection,
                "get_or_create": True,
                "metadata": {"hnsw:space": "cosine"},
            },
        )
        logger.info(f"Ensured Chroma collection: {collection}")

    async def get_collections(self) -> list[str]:
        body = await self._request("GET", "api/v1/collections")
        return [c["name"] for c in (body or [])]

    async def does_collection_exist(self, collection: str) -> bool:
        return await self._collection_id(collection) is not None

    async def delete_collection(self, collection: str) -> None:
        await self._request(
            "DELETE", f"api/v1/collections/{collection}", allow_not_found=True
        )

    # --- Records ---

    @staticmethod
    def _metadata_for(record: MemoryRecord) -> dict[str, Any]:
        record = record.stamped()
        meta = record.metadata.to_dict()
        meta["timestamp"] = record.timestamp
        # Chroma rejects null metadata values
        return {k: v for k, v in meta.items() if v is not None}

    @staticmethod
    def _to_record(key: str, metadata: dict | None, embedding: list | None) -> MemoryRecord:
        meta = dict(metadata or {})
        timestamp = meta.pop("timestamp", None)
        return MemoryRecord(
            metadata=MemoryRecordMetadata.from_dict(meta),
            embedding=list(embedding or []),
            key=key,
            timestamp=timestamp,
        )

    async def upsert(self, collection: str, record: MemoryRecord) -> str:
        keys = await self.upsert_batch(collection, [record])
        return keys[0]

    async def upsert_batch(
        self, collection: str, records: list[MemoryRecord]
    ) -> list[str]:
        if not records:
            return []
        collection_id = await self._require_collection(collection)
        keys = [r.key or r.metadata.id for r in records]
        await self._request(
            "POST",
            f"api/v1/collections/{collection_id}/upsert",
            json={
                "ids": keys,
                "embeddings": [list(r.embedding) for r in records],
                "metadatas": [self._metadata_for(r) for r in records],
                "documents": [r.metadata.text for r in records],
            },
        )
        return keys

    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryRecord | None:
        collection_id = await self._collection_id(collection)
        if collection_id is None:
            return None
        body = await self._request(
            "POST",
            f"api/v1/collections/{collection_id}/get",
            json={"ids": [key], "include": _INCLUDE_ALL},
        )
        ids = (body or {}).get("ids") or []
        if not ids:
            return None
        embeddings = body.get("embeddings") or [None]
        return self._to_record(
            ids[0],
            (body.get("metadatas") or [None])[0],
            embeddings[0] if with_embedding else None,
        )

    async def remove(self, collection: str, key: str) -> None:
        collection_id = await self._collection_id(collection)
        if collection_id is None:
            return
        await self._request(
            "POST",
            f"api/v1/collections/{collection_id}/delete",
            json={"ids": [key]},
        )

    async def get_nearest_matches(
        self,
        collection: str,
        embedding: list[float],
        limit: int,
        min_relevance_score: float = 0.0,
        with_embeddings: bool = False,
    ) -> list[tuple[MemoryRecord, float]]:
        if limit <= 0:
            return []
        collection_id = await self._collection_id(collection)
        if collection_id is None:
            return []

        body = await self._request(
            "POST",
            f"api/v1/collections/{collection_id}/query",
            json={
                "query_embeddings": [list(embedding)],
                "n_results": limit,
                "include": _INCLUDE_ALL + ["distances"],
            },
        )
        body = body or {}
        # Chroma answers one row per query embedding; we only send one
        ids = (body.get("ids") or [[]])[0]
        distances = (body.get("distances") or [[]])[0]
        metadatas = (body.get("metadatas") or [[None] * len(ids)])[0]
        embeddings = (body.get("embeddings") or [[None] * len(ids)])[0]

        results = []
        for i, key in enumerate(ids):
            relevance = 1.0 - float(distances[i])
            if relevance < min_relevance_score:
                continue
            record = self._to_record(
                key,
                metadatas[i] if metadatas else None,
                embeddings[i] if (with_embeddings and embeddings) else None,
            )
            results.append((record, relevance))
        results.sort(key=lambda pair: pair[1], reverse=True)
        return results

    async def _require_collection(self, collection: str) -> str:
        collection_id = await self._collection_id(collection)
        if collection_id is None:
            raise KeyError(f"Collection does not exist: {collection}")
        return collection_id
