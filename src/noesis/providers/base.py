"""
Provider base classes — the completion and embedding boundaries.

These abstract classes define what it means to be a completion or an
embedding backend. The kernel and the memory façade only see these.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncGenerator


@dataclass(frozen=True)
class CompletionSettings:
    """Per-request generation parameters."""

    max_tokens: int = 256
    temperature: float = 0.0
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    stop_sequences: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CompletionSettings:
        """Build from a semantic skill ``config.json`` completion block."""
        return cls(
            max_tokens=int(data.get("max_tokens", 256)),
            temperature=float(data.get("temperature", 0.0)),
            top_p=float(data.get("top_p", 1.0)),
            presence_penalty=float(data.get("presence_penalty", 0.0)),
            frequency_penalty=float(data.get("frequency_penalty", 0.0)),
            stop_sequences=list(data.get("stop_sequences", []) or []),
        )


class CompletionBackend(ABC):
    """Text completion backend interface."""

    model_id: str = ""

    @abstractmethod
    async def complete(
        self, prompt: str, settings: CompletionSettings | None = None
    ) -> str:
        """Generate a completion for ``prompt``."""
        ...

    async def complete_stream(
        self, prompt: str, settings: CompletionSettings | None = None
    ) -> AsyncGenerator[str, None]:
        """Stream a completion. Default: one chunk with the whole answer."""
        yield await self.complete(prompt, settings)

    async def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.model_id}>"


class EmbeddingBackend(ABC):
    """Text embedding backend interface."""

    model_id: str = ""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """One vector per input text, in order."""
        ...

    async def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.model_id}>"
