"""
Qdrant Memory Store — Qdrant REST API over httpx.

One Qdrant collection per memory collection, cosine distance, fixed vector
size. Qdrant point ids must be UUIDs or integers, so each record key is
mapped to a deterministic uuid5 and the original key rides in the payload.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx

from noesis.memory.base import MemoryRecord, MemoryRecordMetadata
from noesis.memory.http import HttpVectorStore

logger = logging.getLogger(__name__)

# Stable namespace so the same key always maps to the same point id
_POINT_NAMESPACE = uuid.UUID("6f1c4b8e-3d2a-5e7f-9a0b-1c2d3e4f5a6b")


def point_id(key: str) -> str:
    """Deterministic Qdrant point id for a record key."""
    try:
        return str(uuid.UUID(key))
    except ValueError:
        return str(uuid.uuid5(_POINT_NAMESPACE, key))


class QdrantMemoryStore(HttpVectorStore):
    backend_name = "qdrant"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        vector_size: int,
        endpoint: str,
    ):
        super().__init__(http_client, endpoint)
        if vector_size <= 0:
            raise ValueError(f"Qdrant vector size must be positive, got {vector_size}")
        self.vector_size = vector_size

    # --- Collections ---

    async def create_collection(self, collection: str) -> None:
        if await self.does_collection_exist(collection):
            return
        await self._request(
            "PUT",
            f"collections/{collection}",
            json={"vectors": {"size": self.vector_size, "distance": "Cosine"}},
        )
        logger.info(f"Created Qdrant collection: {collection} (size={self.vector_size})")

    async def get_collections(self) -> list[str]:
        body = await self._request("GET", "collections")
        collections = (body or {}).get("result", {}).get("collections", [])
        return [c["name"] for c in collections]

    async def does_collection_exist(self, collection: str) -> bool:
        body = await self._request(
            "GET", f"collections/{collection}", allow_not_found=True
        )
        return body is not None

    async def delete_collection(self, collection: str) -> None:
        await self._request("DELETE", f"collections/{collection}", allow_not_found=True)

    # --- Records ---

    def _to_point(self, record: MemoryRecord) -> dict[str, Any]:
        if len(record.embedding) != self.vector_size:
            raise ValueError(
                f"Embedding has {len(record.embedding)} dimensions, "
                f"Qdrant collection expects {self.vector_size}"
            )
        key = record.key or record.metadata.id
        record = record.stamped()
        payload = record.metadata.to_dict()
        payload["key"] = key
        payload["timestamp"] = record.timestamp
        return {"id": point_id(key), "vector": list(record.embedding), "payload": payload}

    @staticmethod
    def _from_point(point: dict[str, Any]) -> MemoryRecord:
        payload = dict(point.get("payload") or {})
        key = payload.pop("key", str(point.get("id", "")))
        timestamp = payload.pop("timestamp", None)
        vector = point.get("vector") or []
        if isinstance(vector, dict):  # named vectors
            vector = next(iter(vector.values()), [])
        return MemoryRecord(
            metadata=MemoryRecordMetadata.from_dict(payload),
            embedding=list(vector),
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
        points = [self._to_point(r) for r in records]
        await self._request(
            "PUT",
            f"collections/{collection}/points",
            params={"wait": "true"},
            json={"points": points},
        )
        return [p["payload"]["key"] for p in points]

    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryRecord | None:
        body = await self._request(
            "POST",
            f"collections/{collection}/points",
            json={
                "ids": [point_id(key)],
                "with_payload": True,
                "with_vector": with_embedding,
            },
            allow_not_found=True,
        )
        points = (body or {}).get("result") or []
        return self._from_point(points[0]) if points else None

    async def remove(self, collection: str, key: str) -> None:
        await self._request(
            "POST",
            f"collections/{collection}/points/delete",
            params={"wait": "true"},
            json={"points": [point_id(key)]},
            allow_not_found=True,
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
        body = await self._request(
            "POST",
            f"collections/{collection}/points/search",
            json={
                "vector": list(embedding),
                "limit": limit,
                "with_payload": True,
                "with_vector": with_embeddings,
                "score_threshold": min_relevance_score,
            },
            allow_not_found=True,
        )
        hits = (body or {}).get("result") or []
        return [(self._from_point(hit), float(hit.get("score", 0.0))) for hit in hits]
