"""
Memory base classes — records and the VectorStore contract.

Every store (volatile, Qdrant, Azure Cognitive Search, Chroma) implements
VectorStore. The semantic memory façade only ever talks to this interface.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np


@dataclass(frozen=True)
class MemoryRecordMetadata:
    """What a memory is about. Stored next to the embedding."""

    id: str
    text: str = ""
    description: str = ""
    external_source_name: str = ""
    is_reference: bool = False
    additional_metadata: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "external_source_name": self.external_source_name,
            "is_reference": self.is_reference,
            "additional_metadata": self.additional_metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryRecordMetadata:
        return cls(
            id=str(data.get("id", "")),
            text=data.get("text", "") or "",
            description=data.get("description", "") or "",
            external_source_name=data.get("external_source_name", "") or "",
            is_reference=bool(data.get("is_reference", False)),
            additional_metadata=data.get("additional_metadata", "") or "",
        )


@dataclass(frozen=True)
class MemoryRecord:
    """A single memory: metadata + embedding, addressed by ``key``."""

    metadata: MemoryRecordMetadata
    embedding: list[float] = field(repr=False)
    key: str = ""
    timestamp: float | None = None

    @classmethod
    def local_record(
        cls,
        id: str,
        text: str,
        embedding: list[float],
        description: str = "",
        additional_metadata: str = "",
        key: str | None = None,
        timestamp: float | None = None,
    ) -> MemoryRecord:
        """A memory whose text lives in the store itself."""
        return cls(
            metadata=MemoryRecordMetadata(
                id=id,
                text=text,
                description=description,
                additional_metadata=additional_metadata,
            ),
            embedding=list(embedding),
            key=key or id,
            timestamp=timestamp,
        )

    @classmethod
    def reference_record(
        cls,
        external_id: str,
        source_name: str,
        embedding: list[float],
        description: str = "",
        additional_metadata: str = "",
        key: str | None = None,
    ) -> MemoryRecord:
        """A pointer to content held elsewhere (e.g. a document URL)."""
        return cls(
            metadata=MemoryRecordMetadata(
                id=external_id,
                description=description,
                external_source_name=source_name,
                is_reference=True,
                additional_metadata=additional_metadata,
            ),
            embedding=list(embedding),
            key=key or external_id,
        )

    def with_key(self, key: str) -> MemoryRecord:
        return replace(self, key=key)

    def stamped(self) -> MemoryRecord:
        """Return a copy with a timestamp, keeping an existing one."""
        if self.timestamp is not None:
            return self
        return replace(self, timestamp=time.time())


@dataclass(frozen=True)
class MemoryQueryResult:
    """A recall hit, as returned by the semantic memory façade."""

    metadata: MemoryRecordMetadata
    relevance: float
    embedding: list[float] | None = field(default=None, repr=False)

    @classmethod
    def from_record(
        cls, record: MemoryRecord, relevance: float, with_embedding: bool = False
    ) -> MemoryQueryResult:
        return cls(
            metadata=record.metadata,
            relevance=relevance,
            embedding=record.embedding if with_embedding else None,
        )


def cosine_similarity(a: Any, b: Any) -> float:
    """Cosine similarity of two vectors; 0.0 when either is all zeros."""
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    if vec_a.shape != vec_b.shape:
        raise ValueError(
            f"Embedding size mismatch: {vec_a.shape[0]} vs {vec_b.shape[0]}"
        )
    denom = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if denom == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / denom)


class VectorStore(ABC):
    """Vector store interface.

    Methods are async. Implementations must not hold per-call mutable
    state: one instance is shared by every kernel in the process.
    """

    @abstractmethod
    async def create_collection(self, collection: str) -> None:
        ...

    @abstractmethod
    async def get_collections(self) -> list[str]:
        ...

    @abstractmethod
    async def does_collection_exist(self, collection: str) -> bool:
        ...

    @abstractmethod
    async def delete_collection(self, collection: str) -> None:
        ...

    @abstractmethod
    async def upsert(self, collection: str, record: MemoryRecord) -> str:
        """Insert or replace a record. Returns its key."""
        ...

    async def upsert_batch(
        self, collection: str, records: list[MemoryRecord]
    ) -> list[str]:
        """Insert or replace several records. Default: one upsert each."""
        keys = []
        for record in records:
            keys.append(await self.upsert(collection, record))
        return keys

    @abstractmethod
    async def get(
        self, collection: str, key: str, with_embedding: bool = False
    ) -> MemoryRecord | None:
        ...

    @abstractmethod
    async def remove(self, collection: str, key: str) -> None:
        ...

    @abstractmethod
    async def get_nearest_matches(
        self,
        collection: str,
        embedding: list[float],
        limit: int,
        min_relevance_score: float = 0.0,
        with_embeddings: bool = False,
    ) -> list[tuple[MemoryRecord, float]]:
        """Records most similar to ``embedding``, best first."""
        ...

    async def get_nearest_match(
        self,
        collection: str,
        embedding: list[float],
        min_relevance_score: float = 0.0,
        with_embedding: bool = False,
    ) -> tuple[MemoryRecord, float] | None:
        matches = await self.get_nearest_matches(
            collection, embedding, 1, min_relevance_score, with_embedding
        )
        return matches[0] if matches else None

    async def close(self) -> None:
        """Release network resources. No-op for in-process stores."""
        return None
