"""
Provider Registry — factory functions that pick the backend by config.

Add a new provider? Add an AIServiceType member and an elif in both
builders. No plugin systems, no metaclasses.

Completion and embedding always share the service type, endpoint and key
of one AIServiceOptions block; only the model names differ.
"""

from __future__ import annotations

import logging

from noesis.core.config import AIServiceOptions, AIServiceType
from noesis.core.errors import ConfigurationError
from noesis.providers.base import CompletionBackend, EmbeddingBackend

logger = logging.getLogger(__name__)


def _invalid_type(options: AIServiceOptions) -> ConfigurationError:
    return ConfigurationError(
        f"Invalid type value in '{AIServiceOptions.PROPERTY_NAME}' settings: "
        f"'{options.type_name}'.",
        field="AIService.Type",
    )


def _require_key(options: AIServiceOptions) -> None:
    if not options.key or not options.key.strip():
        raise ConfigurationError(
            f"'{AIServiceOptions.PROPERTY_NAME}' key is empty for type "
            f"'{options.type_name}'.",
            field="AIService.Key",
        )


def _require_endpoint(options: AIServiceOptions) -> None:
    if not options.endpoint or not options.endpoint.strip():
        raise ConfigurationError(
            f"'{AIServiceOptions.PROPERTY_NAME}' endpoint is required for type "
            f"'{options.type_name}'.",
            field="AIService.Endpoint",
        )


def validate_ai_service(options: AIServiceOptions) -> None:
    """Raise the ConfigurationError either builder would, building nothing."""
    if options.type == AIServiceType.AZURE_OPENAI:
        _require_endpoint(options)
        _require_key(options)
    elif options.type == AIServiceType.OPENAI:
        _require_key(options)
    else:
        raise _invalid_type(options)


def build_completion_backend(options: AIServiceOptions) -> CompletionBackend:
    """Construct the completion backend for ``options.type``."""
    if options.type == AIServiceType.AZURE_OPENAI:
        _require_endpoint(options)
        _require_key(options)
        from noesis.providers.openai_llm import AzureOpenAICompletionBackend

        logger.info(
            f"Completion backend: Azure OpenAI (deployment={options.models.completion})"
        )
        return AzureOpenAICompletionBackend(
            options.models.completion, options.endpoint, options.key
        )

    elif options.type == AIServiceType.OPENAI:
        _require_key(options)
        from noesis.providers.openai_llm import OpenAICompletionBackend

        logger.info(f"Completion backend: OpenAI (model={options.models.completion})")
        return OpenAICompletionBackend(options.models.completion, options.key)

    raise _invalid_type(options)


def build_embedding_backend(options: AIServiceOptions) -> EmbeddingBackend:
    """Construct the embedding backend for ``options.type``."""
    if options.type == AIServiceType.AZURE_OPENAI:
        _require_endpoint(options)
        _require_key(options)
        from noesis.providers.openai_embedding import AzureOpenAIEmbeddingBackend

        logger.info(
            f"Embedding backend: Azure OpenAI (deployment={options.models.embedding})"
        )
        return AzureOpenAIEmbeddingBackend(
            options.models.embedding, options.endpoint, options.key
        )

    elif options.type == AIServiceType.OPENAI:
        _require_key(options)
        from noesis.providers.openai_embedding import OpenAIEmbeddingBackend

        logger.info(f"Embedding backend: OpenAI (model={options.models.embedding})")
        return OpenAIEmbeddingBackend(options.models.embedding, options.key)

    raise _invalid_type(options)
