"""Shared fakes: deterministic embeddings and a recording completion backend."""

from __future__ import annotations

import hashlib

import numpy as np
import pytest

from noesis.kernel.core import Kernel
from noesis.memory.semantic import SemanticTextMemory
from noesis.memory.volatile import VolatileMemoryStore
from noesis.providers.base import CompletionBackend, CompletionSettings, EmbeddingBackend

DIMENSIONS = 16


def fake_embedding(text: str, dimensions: int = DIMENSIONS) -> list[float]:
    """Deterministic unit vector from a hash of the text."""
    seed = int(hashlib.sha256(text.encode()).hexdigest(), 16) % (2**32)
    rng = np.random.RandomState(seed)
    vec = rng.randn(dimensions)
    return (vec / np.linalg.norm(vec)).tolist()


class FakeEmbeddingBackend(EmbeddingBackend):
    model_id = "fake-embedding"

    def __init__(self, dimensions: int = DIMENSIONS):
        self.dimensions = dimensions
        self.calls: list[list[str]] = []
        self.closed = False

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [fake_embedding(t, self.dimensions) for t in texts]

    async def close(self) -> None:
        self.closed = True


class FakeCompletionBackend(CompletionBackend):
    model_id = "fake-completion"

    def __init__(self, reply: str | None = None):
        self.reply = reply
        self.prompts: list[str] = []
        self.settings: list[CompletionSettings | None] = []
        self.closed = False

    async def complete(self, prompt: str, settings: CompletionSettings | None = None) -> str:
        self.prompts.append(prompt)
        self.settings.append(settings)
        return self.reply if self.reply is not None else f"echo: {prompt}"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def embedder():
    return FakeEmbeddingBackend()


@pytest.fixture
def completion():
    return FakeCompletionBackend()


@pytest.fixture
def volatile_store():
    return VolatileMemoryStore()


@pytest.fixture
def memory(volatile_store, embedder):
    return SemanticTextMemory(volatile_store, embedder)


@pytest.fixture
def kernel(completion, memory):
    return Kernel(completion, memory)
