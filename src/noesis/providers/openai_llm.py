"""
OpenAI completion backends — chat completions on OpenAI or Azure OpenAI.

Both flavours share the request code; they only differ in how the client
is built. Azure addresses a deployment by name where OpenAI takes a model id.
Client construction does no network I/O. API failures surface at call
time as BackendError.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator

import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from noesis.core.errors import BackendError
from noesis.providers.base import CompletionBackend, CompletionSettings

logger = logging.getLogger(__name__)

AZURE_API_VERSION = "2024-02-01"


class _ChatCompletionBackend(CompletionBackend):
    backend_name = "openai"

    def __init__(self, model_id: str, client: AsyncOpenAI):
        self.model_id = model_id
        self.client = client

    def _request_kwargs(
        self, prompt: str, settings: CompletionSettings | None
    ) -> dict[str, Any]:
        settings = settings or CompletionSettings()
        kwargs: dict[str, Any] = {
            "model": self.model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": settings.max_tokens,
            "temperature": settings.temperature,
            "top_p": settings.top_p,
            "presence_penalty": settings.presence_penalty,
            "frequency_penalty": settings.frequency_penalty,
        }
        if settings.stop_sequences:
            kwargs["stop"] = settings.stop_sequences
        return kwargs

    async def complete(
        self, prompt: str, settings: CompletionSettings | None = None
    ) -> str:
        try:
            response = await self.client.chat.completions.create(
                **self._request_kwargs(prompt, settings)
            )
        except openai.OpenAIError as e:
            logger.error(f"{self.backend_name} completion failed (model={self.model_id}): {e}")
            raise BackendError(
                f"{self.backend_name} completion failed: {e}",
                backend=self.backend_name,
                status_code=getattr(e, "status_code", None),
            ) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def complete_stream(
        self, prompt: str, settings: CompletionSettings | None = None
    ) -> AsyncGenerator[str, None]:
        try:
            stream = await self.client.chat.completions.create(
                **self._request_kwargs(prompt, settings), stream=True
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    yield delta.content
        except openai.OpenAIError as e:
            raise BackendError(
                f"{self.backend_name} streaming completion failed: {e}",
                backend=self.backend_name,
                status_code=getattr(e, "status_code", None),
            ) from e

    async def close(self) -> None:
        await self.client.close()


class OpenAICompletionBackend(_ChatCompletionBackend):
    """Chat completions straight from api.openai.com."""

    backend_name = "openai"

    def __init__(self, model_id: str, api_key: str, client: AsyncOpenAI | None = None):
        super().__init__(model_id, client or AsyncOpenAI(api_key=api_key))


class AzureOpenAICompletionBackend(_ChatCompletionBackend):
    """Chat completions from an Azure OpenAI deployment."""

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
