"""
Noesis Memory — vector stores and the semantic memory façade.

VectorStore is the contract; VolatileMemoryStore, QdrantMemoryStore,
AzureCognitiveSearchMemoryStore and ChromaMemoryStore implement it.
Pick one with build_memory_store(config).
"""

from noesis.memory.base import (
    MemoryQueryResult,
    MemoryRecord,
    MemoryRecordMetadata,
    VectorStore,
)
from noesis.memory.registry import build_memory_store, validate_memory_store
from noesis.memory.semantic import SemanticTextMemory
from noesis.memory.volatile import VolatileMemoryStore

__all__ = [
    "MemoryRecord",
    "MemoryRecordMetadata",
    "MemoryQueryResult",
    "VectorStore",
    "VolatileMemoryStore",
    "SemanticTextMemory",
    "build_memory_store",
    "validate_memory_store",
]
