"""
Azure Cognitive Search Memory Store — search REST API over httpx.

Each memory collection is a search index. The index needs the vector
dimension up front, so it is created on the first upsert rather than in
create_collection. Record keys are base64url-encoded because index keys
only allow letters, digits, ``_``, ``-`` and ``=``.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import Any

import httpx

from noesis.memory.base import MemoryRecord, MemoryRecordMetadata
from noesis.memory.http import HttpVectorStore, build_endpoint, build_http_client

logger = logging.getLogger(__name__)

API_VERSION = "2023-11-01"
_INVALID_INDEX_CHARS = re.compile(r"[^a-z0-9-]+")
_SELECT = "Id,Key,Text,Description,AdditionalMetadata,ExternalSourceName,IsReference,Timestamp"


def normalize_index_name(collection: str) -> str:
    """Index names: lowercase letters, digits and dashes, max 128 chars."""
    name = _INVALID_INDEX_CHARS.sub("-", collection.strip().lower()).strip("-")
    if not name:
        raise ValueError(f"Collection name '{collection}' has no usable characters")
    return name[:128]


def encode_key(key: str) -> str:
    return base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii")


def decode_key(encoded: str) -> str:
    return base64.urlsafe_b64decode(encoded.encode("ascii")).decode("utf-8")


def _index_definition(name: str, dimensions: int) -> dict[str, Any]:
    return {
        "name": name,
        "fields": [
            {"name": "Id", "type": "Edm.String", "key": True, "filterable": True},
            {"name": "Key", "type": "Edm.String", "filterable": True},
            {"name": "Text", "type": "Edm.String", "searchable": True},
            {"name": "Description", "type": "Edm.String", "searchable": True},
            {"name": "AdditionalMetadata", "type": "Edm.String", "filterable": True},
            {"name": "ExternalSourceName", "type": "Edm.String", "filterable": True},
            {"name": "IsReference", "type": "Edm.Boolean", "filterable": True},
            {"name": "Timestamp", "type": "Edm.Double", "sortable": True},
            {
                "name": "Embedding",
                "type": "Collection(Edm.Single)",
                "searchable": True,
                "dimensions": dimensions,
                "vectorSearchProfile": "noesis-vector-profile",
            },
        ],
        "vectorSearch": {
            "algorithms": [
                {
                    "name": "noesis-hnsw",
                    "kind": "hnsw",
                    "hnswParameters": {"metric": "cosine"},
                }
            ],
            "profiles": [{"name": "noesis-vector-profile", "algorithm": "noesis-hnsw"}],
        },
    }


class AzureCognitiveSearchMemoryStore(HttpVectorStore):
    backend_name = "azure_cognitive_search"

    def __init__(
        self,
        endpoint: str,
        key: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(http_client or build_http_client(api_key=key), build_endpoint(endpoint))

    def _params(self, **extra: Any) -> dict[str, Any]:
        return {"api-version": API_VERSION, **extra}

    # --- Collections ---

    async def create_collection(self, collection: str) -> None:
        # Index is created with the right dimensions on first upsert
        normalize_index_name(collection)

    async def get_collections(self) -> list[str]:
        body = await self._request("GET", "indexes", params=self._params(**{"$select": "name"}))
        return [idx["name"] for idx in (body or {}).get("value", [])]

    async def does_collection_exist(self, collection: str) -> bool:
        body = await self._request(
            "GET",
            f"indexes/{normalize_index_name(collection)}",
            params=self._params(),
            allow_not_found=True,
        )
        return body is not None

    async def delete_collection(self, collection: str) -> None:
        await self._request(
            "DELETE",
            f"indexes/{normalize_index_name(collection)}",
            params=self._params(),
            allow_not_found=True,
        )

    async def _ensure_index(self, index: str, dimensions: int) -> None:
        exists = await self._request(
            "GET", f"indexes/{index}", params=self._params(), allow_not_found=True
        )
        if exists is None:
            await self._request(
                "PUT",
                f"indexes/{index}",
                params=self._params(),
                json=_index_definition(index, dimensions),
            )
            logger.info(f"Created search index: {index} (dimensions={dimensions})")

    # --- Records ---

    @staticmethod
    def _to_document(record: MemoryRecord) -> dict[str, Any]:
        key = record.key or record.metadata.id
        record = record.stamped()
        meta = record.metadata
        return {
            "@search.action": "mergeOrUpload",
            "Id": encode_key(key),
            "Key": key,
            "Text": meta.text,
            "Description": meta.description,
            "AdditionalMetadata": meta.additional_metadata,
            "ExternalSourceName": meta.external_source_name,
            "IsReference": meta.is_reference,
            "Timestamp": record.timestamp,
            "Embedding": list(record.embedding),
        }

    @staticmethod
    def _from_document(doc: dict[str, Any]) -> MemoryRecord:
        key = doc.get("Key") or decode_key(doc["Id"])
        return MemoryRecord(
            metadata=MemoryRecordMetadata(
                id=key,
                text=doc.get("Text") or "",
                description=doc.get("Description") or "",
                external_source_name=doc.get("ExternalSourceName") or "",
                is_reference=bool(doc.get("IsReference", False)),
                additional_metadata=doc.get("AdditionalMetadata") or "",
            ),
            embedding=list(doc.get("Embedding") or []),
            key=key,
            timestamp=doc.get("Timestamp"),
        )

    async def upsert(self, collection: str, record: MemoryRecord) -> str:
        keys = await self.upsert_batch(collection, [record])
        return keys[0]

    async def upsert_batch(
        self, collection: str, records: list[MemoryRecord]
    ) -> list[str]:
        if not records:
            return []
        index = normalize_index_name(collection)
        await self._ensure_index(index, len(records[0].embedding))
        docs = [self._to_document(r) for r in records]
        await self._request(
            "POST", f"indexes/{index}/docs/index", params=self._params(), json={"value": docs}
        )
        return [d["Key"] for d in docs]

    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryRecord | None:
        select = f"{_SELECT},Embedding" if with_embedding else _SELECT
        doc = await self._request(
            "GET",
            f"indexes/{normalize_index_name(collection)}/docs/{encode_key(key)}",
            params=self._params(**{"$select": select}),
            allow_not_found=True,
        )
        return self._from_document(doc) if doc else None

    async def remove(self, collection: str, key: str) -> None:
        await self._request(
            "POST",
            f"indexes/{normalize_index_name(collection)}/docs/index",
            params=self._params(),
            json={"value": [{"@search.action": "delete", "Id": encode_key(key)}]},
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
        select = f"{_SELECT},Embedding" if with_embeddings else _SELECT
        body = await self._request(
            "POST",
            f"indexes/{normalize_index_name(collection)}/docs/search",
            params=self._params(),
            json={
                "select": select,
                "top": limit,
                "vectorQueries": [
                    {
                        "kind": "vector",
                        "vector": list(embedding),
                        "fields": "Embedding",
                        "k": limit,
                    }
                ],
            },
            allow_not_found=True,
        )

        results = []
        for doc in (body or {}).get("value", []):
            relevance = self._score_to_relevance(float(doc.get("@search.score", 0.0)))
            if relevance < min_relevance_score:
                continue
            results.append((self._from_document(doc), relevance))
        results.sort(key=lambda pair: pair[1], reverse=True)
        return results

    @staticmethod
    def _score_to_relevance(score: float) -> float:
        # cosine: score = 1 / (1 + distance), distance = 1 - similarity
        if score <= 0:
            return 0.0
        return 2.0 - 1.0 / score
