"""
Memory Store Registry — build the right VectorStore from config.

Add a new store? Add a MemoriesStoreType member and an elif in both
functions here. The exhaustiveness test in tests/test_memory_registry.py
fails until you do.
"""

from __future__ import annotations

import logging

from noesis.core.config import MemoriesStoreOptions, MemoriesStoreType, ServiceOptions
from noesis.core.errors import ConfigurationError
from noesis.memory.base import VectorStore
from noesis.memory.http import build_endpoint, build_http_client

logger = logging.getLogger(__name__)


def _missing_block(store_type: str, block: str, alias: str) -> ConfigurationError:
    return ConfigurationError(
        f"MemoriesStore type is {store_type} and {store_type} configuration is null. "
        f"Provide a '{block}' (or '{alias}') block.",
        field=store_type,
    )


def validate_memory_store(options: MemoriesStoreOptions) -> None:
    """Raise the ConfigurationError build_memory_store would, building nothing.

    Raises:
        ConfigurationError: the matching sub-block is None or unusable, or
            the type is not a known MemoriesStoreType.
    """
    store_type = options.type

    if store_type == MemoriesStoreType.VOLATILE:
        return

    elif store_type == MemoriesStoreType.QDRANT:
        if options.qdrant is None:
            raise _missing_block("Qdrant", "qdrant", "vectorDbA")
        build_endpoint(options.qdrant.host, options.qdrant.port)

    elif store_type == MemoriesStoreType.AZURE_COGNITIVE_SEARCH:
        azure = options.azure_cognitive_search
        if azure is None:
            raise _missing_block("AzureCognitiveSearch", "azureCognitiveSearch", "vectorDbB")
        if not azure.endpoint.strip():
            raise ConfigurationError(
                "AzureCognitiveSearch endpoint is empty.", field="AzureCognitiveSearch.Endpoint"
            )

    elif store_type == MemoriesStoreType.CHROMA:
        if options.chroma is None:
            raise _missing_block("Chroma", "chroma", "vectorDbC")
        build_endpoint(options.chroma.host, options.chroma.port)

    else:
        raise ConfigurationError(
            f"Invalid '{MemoriesStoreOptions.PROPERTY_NAME}' type '{options.type_name}'.",
            field="MemoriesStore.Type",
        )


def build_memory_store(
    options: MemoriesStoreOptions, service: ServiceOptions | None = None
) -> VectorStore:
    """Construct the vector store selected by ``options.type``.

    Only the sub-block that matches the type is read. No network I/O
    happens here; remote stores connect on first use. The options are
    fully validated before any HTTP client is created.

    Raises:
        ConfigurationError: the matching sub-block is None, or the type
            is not a known MemoriesStoreType.
    """
    validate_memory_store(options)
    service = service or ServiceOptions()
    store_type = options.type

    if store_type == MemoriesStoreType.VOLATILE:
        from noesis.memory.volatile import VolatileMemoryStore

        logger.info("Memory store: volatile (in-process, not persisted)")
        return VolatileMemoryStore()

    elif store_type == MemoriesStoreType.QDRANT:
        from noesis.memory.qdrant import QdrantMemoryStore

        qdrant = options.qdrant
        endpoint = build_endpoint(qdrant.host, qdrant.port)
        http_client = build_http_client(
            api_key=qdrant.key,
            check_certificate_revocation=service.check_certificate_revocation,
            crl_file=service.crl_file,
        )
        logger.info(f"Memory store: Qdrant at {endpoint} (vector_size={qdrant.vector_size})")
        return QdrantMemoryStore(
            http_client=http_client,
            vector_size=qdrant.vector_size,
            endpoint=endpoint,
        )

    elif store_type == MemoriesStoreType.AZURE_COGNITIVE_SEARCH:
        from noesis.memory.azure_search import AzureCognitiveSearchMemoryStore

        azure = options.azure_cognitive_search
        http_client = build_http_client(
            api_key=azure.key,
            check_certificate_revocation=service.check_certificate_revocation,
            crl_file=service.crl_file,
        )
        logger.info(f"Memory store: Azure Cognitive Search at {azure.endpoint}")
        return AzureCognitiveSearchMemoryStore(
            azure.endpoint, azure.key, http_client=http_client
        )

    elif store_type == MemoriesStoreType.CHROMA:
        from noesis.memory.chroma import ChromaMemoryStore

        chroma = options.chroma
        endpoint = build_endpoint(chroma.host, chroma.port)
        http_client = build_http_client(
            check_certificate_revocation=service.check_certificate_revocation,
            crl_file=service.crl_file,
        )
        logger.info(f"Memory store: Chroma at {endpoint}")
        return ChromaMemoryStore(http_client=http_client, endpoint=endpoint)

    raise ConfigurationError(
        f"Invalid '{MemoriesStoreOptions.PROPERTY_NAME}' type '{options.type_name}'.",
        field="MemoriesStore.Type",
    )
