"""
Noesis Providers — completion and embedding backends.

Each interface defines the contract; OpenAI and Azure OpenAI
implementations live alongside. Swap providers by changing config.
"""

from noesis.providers.base import CompletionBackend, CompletionSettings, EmbeddingBackend
from noesis.providers.registry import (
    build_completion_backend,
    build_embedding_backend,
    validate_ai_service,
)

__all__ = [
    "CompletionBackend",
    "CompletionSettings",
    "EmbeddingBackend",
    "build_completion_backend",
    "build_embedding_backend",
    "validate_ai_service",
]
