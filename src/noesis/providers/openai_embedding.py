"""
OpenAI embedding backends — text-embedding models on OpenAI or Azure OpenAI.
"""

from __future__ import annotations

import logging

import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from noesis.core.errors import BackendError
from noesis.providers.base import EmbeddingBackend
from noesis.providers.openai_llm import AZURE_API_VERSION

logger = logging.getLogger(__name__)


class _EmbeddingsBackend(EmbeddingBackend):
    backend_name = "openai"

    def __init__(self, model_id: str, client: AsyncOpenAI):
        self.model_id = model_id
        self.client = client

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            response = await self.client.embeddings.create(
                model=self.model_id,
                input=list(texts),
            )
        except openai.OpenAIError as e:
            logger.error(f"{self.backend_name} embedding failed (model={self.model_id}): {e}")
            raise BackendError(
                f"{self.backend_name} embedding failed: {e}",
                backend=self.backend_name,
                status_code=getattr(e, "status_code", None),
            ) from e

        # The API may return items out of order; index is authoritative
        items = sorted(response.data, key=lambda item: getattr(item, "index", 0))
        return [list(item.embedding) for item in items]

    async def close(self) -> None:
        await self.client.close()


class OpenAIEmbeddingBackend(_EmbeddingsBackend):
    backend_name = "openai"

    def __init__(self, model_id: str, api_key: str, client: AsyncOpenAI | None = None):
        super().__init__(model_id, client or AsyncOpenAI(api_key=api_key))


class AzureOpenAIEmbeddingBackend(_EmbeddingsBackend):
    backend_name = "azure_openai"

    def __init__(
        self,
        deployment_name: str,
        endpoint: str,
        api_key: str,
        api_version: str = AZURE_API_VERSION,
        client: AsyncAzureOpenAI | None = None,
    ):
        super().__init__(
            deployment_name,
            client
            or AsyncAzureOpenAI(
                azure_endpoint=endpoint, api_key=api_key, api_version=api_version
            ),
        )
        self.endpoint = endpoint
