"""
Noesis Configuration — single source of truth for all settings.

Two ways in:
- Environment variables (and a .env file), via ``NoesisConfig.from_env()``
- A JSON document with ``aiService`` and ``memoryStore`` blocks, via
  ``load_config(path)`` / ``NoesisConfig.from_dict(doc)``

Everything is a frozen dataclass. Loaded once at startup, immutable after.
Type tags that don't match a known enum member are kept as the raw string;
the factories reject them with a ConfigurationError naming the value.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from noesis.core.errors import ConfigurationError

load_dotenv()


class AIServiceType(str, Enum):
    """Which hosting flavour serves completions and embeddings."""

    AZURE_OPENAI = "AzureOpenAI"
    OPENAI = "OpenAI"


class MemoriesStoreType(str, Enum):
    """Which vector store backs long-term memory."""

    VOLATILE = "Volatile"
    QDRANT = "Qdrant"
    AZURE_COGNITIVE_SEARCH = "AzureCognitiveSearch"
    CHROMA = "Chroma"


# Abstract tags used by deployment documents, mapped onto concrete members.
AI_SERVICE_ALIASES: dict[str, AIServiceType] = {
    "azurehosted": AIServiceType.AZURE_OPENAI,
    "directhosted": AIServiceType.OPENAI,
}

MEMORIES_STORE_ALIASES: dict[str, MemoriesStoreType] = {
    "vectordba": MemoriesStoreType.QDRANT,
    "vectordbb": MemoriesStoreType.AZURE_COGNITIVE_SEARCH,
    "vectordbc": MemoriesStoreType.CHROMA,
}


def parse_type(
    enum_cls: type[Enum], value: Any, aliases: Mapping[str, Enum] | None = None
) -> Any:
    """Map a config value onto an enum member, or return it unchanged.

    Matches member values and names case-insensitively, so "OpenAI",
    "openai" and "OPENAI" all resolve. ``aliases`` maps extra lower-case
    tags onto members. Unknown values pass through so the caller can
    report them.
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return value
    wanted = value.strip().lower()
    for member in enum_cls:
        if wanted in (str(member.value).lower(), member.name.lower()):
            return member
    if aliases and wanted in aliases:
        return aliases[wanted]
    return value


def _type_name(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _get(block: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """First present key among camelCase / PascalCase / snake_case spellings."""
    for name in names:
        if name in block:
            return block[name]
    return default


_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUE_STRINGS


def _as_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        if wanted in _TRUE_STRINGS:
            return True
        if wanted in _FALSE_STRINGS:
            return False
    raise ConfigurationError(
        f"'{field_name}' must be a boolean, got {value!r}.", field=field_name
    )


def _as_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"'{field_name}' must be an integer, got {value!r}.", field=field_name
        ) from e


# --- AI service ---


@dataclass(frozen=True)
class AIModels:
    """Model (or Azure deployment) names for each capability."""

    completion: str = "gpt-4o"
    embedding: str = "text-embedding-ada-002"


@dataclass(frozen=True)
class AIServiceOptions:
    """Completion + embedding provider settings.

    Both capabilities share one ``type``, ``endpoint`` and ``key``; only the
    model names differ.
    """

    PROPERTY_NAME = "AIService"

    type: AIServiceType | str = AIServiceType.OPENAI
    endpoint: str = ""
    key: str = field(default="", repr=False)
    models: AIModels = field(default_factory=AIModels)

    @classmethod
    def from_env(cls) -> AIServiceOptions:
        return cls(
            type=parse_type(
                AIServiceType, os.getenv("NOESIS_AI_SERVICE_TYPE", "OpenAI"), AI_SERVICE_ALIASES
            ),
            endpoint=os.getenv("NOESIS_AI_ENDPOINT", ""),
            key=os.getenv("NOESIS_AI_KEY") or os.getenv("OPENAI_API_KEY", ""),
            models=AIModels(
                completion=os.getenv("NOESIS_COMPLETION_MODEL", "gpt-4o"),
                embedding=os.getenv("NOESIS_EMBEDDING_MODEL", "text-embedding-ada-002"),
            ),
        )

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> AIServiceOptions:
        models = _get(block, "models", "Models", default={}) or {}
        return cls(
            type=parse_type(
                AIServiceType,
                _get(block, "serviceType", "type", "Type", default="OpenAI"),
                AI_SERVICE_ALIASES,
            ),
            endpoint=_get(block, "endpoint", "Endpoint", default="") or "",
            key=_get(block, "apiKey", "key", "Key", default="") or "",
            models=AIModels(
                completion=_get(block, "completionModelId", default=None)
                or _get(models, "completion", "Completion", default="gpt-4o"),
                embedding=_get(block, "embeddingModelId", default=None)
                or _get(models, "embedding", "Embedding", default="text-embedding-ada-002"),
            ),
        )

    @property
    def type_name(self) -> str:
        return _type_name(self.type)


# --- Memory store ---


@dataclass(frozen=True)
class QdrantOptions:
    """Qdrant vector database connection."""

    host: str
    port: int = 6333
    key: str = field(default="", repr=False)
    vector_size: int = 1536

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> QdrantOptions:
        return cls(
            host=_get(block, "host", "Host", default=""),
            port=_as_int(_get(block, "port", "Port", default=6333), "Qdrant.Port"),
            key=_get(block, "apiKey", "key", "Key", default="") or "",
            vector_size=_as_int(
                _get(block, "vectorSize", "VectorSize", "vector_size", default=1536),
                "Qdrant.VectorSize",
            ),
        )


@dataclass(frozen=True)
class AzureCognitiveSearchOptions:
    """Azure Cognitive Search service."""

    endpoint: str
    key: str = field(default="", repr=False)

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> AzureCognitiveSearchOptions:
        return cls(
            endpoint=_get(block, "endpoint", "Endpoint", "host", default=""),
            key=_get(block, "apiKey", "key", "Key", default="") or "",
        )


@dataclass(frozen=True)
class ChromaOptions:
    """Chroma server connection."""

    host: str
    port: int = 8000

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> ChromaOptions:
        return cls(
            host=_get(block, "host", "Host", default=""),
            port=_as_int(_get(block, "port", "Port", default=8000), "Chroma.Port"),
        )


def _sub_block(doc: Mapping[str, Any], *names: str) -> Mapping[str, Any] | None:
    block = _get(doc, *names, default=None)
    return block if isinstance(block, Mapping) else None


@dataclass(frozen=True)
class MemoriesStoreOptions:
    """Long-term memory store settings.

    Only the sub-block matching ``type`` is ever read; the others may be None.
    """

    PROPERTY_NAME = "MemoriesStore"

    type: MemoriesStoreType | str = MemoriesStoreType.VOLATILE
    qdrant: QdrantOptions | None = None
    azure_cognitive_search: AzureCognitiveSearchOptions | None = None
    chroma: ChromaOptions | None = None

    @classmethod
    def from_env(cls) -> MemoriesStoreOptions:
        qdrant = None
        if os.getenv("NOESIS_QDRANT_HOST"):
            qdrant = QdrantOptions(
                host=os.getenv("NOESIS_QDRANT_HOST", ""),
                port=_as_int(os.getenv("NOESIS_QDRANT_PORT", "6333"), "NOESIS_QDRANT_PORT"),
                key=os.getenv("NOESIS_QDRANT_KEY", ""),
                vector_size=_as_int(
                    os.getenv("NOESIS_QDRANT_VECTOR_SIZE", "1536"), "NOESIS_QDRANT_VECTOR_SIZE"
                ),
            )

        azure = None
        if os.getenv("NOESIS_AZURE_SEARCH_ENDPOINT"):
            azure = AzureCognitiveSearchOptions(
                endpoint=os.getenv("NOESIS_AZURE_SEARCH_ENDPOINT", ""),
                key=os.getenv("NOESIS_AZURE_SEARCH_KEY", ""),
            )

        chroma = None
        if os.getenv("NOESIS_CHROMA_HOST"):
            chroma = ChromaOptions(
                host=os.getenv("NOESIS_CHROMA_HOST", ""),
                port=_as_int(os.getenv("NOESIS_CHROMA_PORT", "8000"), "NOESIS_CHROMA_PORT"),
            )

        return cls(
            type=parse_type(
                MemoriesStoreType,
                os.getenv("NOESIS_MEMORY_STORE_TYPE", "Volatile"),
                MEMORIES_STORE_ALIASES,
            ),
            qdrant=qdrant,
            azure_cognitive_search=azure,
            chroma=chroma,
        )

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> MemoriesStoreOptions:
        qdrant = _sub_block(block, "qdrant", "Qdrant", "vectorDbA")
        azure = _sub_block(
            block, "azureCognitiveSearch", "AzureCognitiveSearch", "azure_cognitive_search", "vectorDbB"
        )
        chroma = _sub_block(block, "chroma", "Chroma", "vectorDbC")
        return cls(
            type=parse_type(
                MemoriesStoreType,
                _get(block, "storeType", "type", "Type", default="Volatile"),
                MEMORIES_STORE_ALIASES,
            ),
            qdrant=QdrantOptions.from_dict(qdrant) if qdrant is not None else None,
            azure_cognitive_search=(
                AzureCognitiveSearchOptions.from_dict(azure) if azure is not None else None
            ),
            chroma=ChromaOptions.from_dict(chroma) if chroma is not None else None,
        )

    @property
    def type_name(self) -> str:
        return _type_name(self.type)


# --- Service ---


@dataclass(frozen=True)
class ServiceOptions:
    """Process-level settings: skills directory and TLS policy for store clients."""

    semantic_skills_directory: str = ""
    check_certificate_revocation: bool = True
    crl_file: str = ""

    @classmethod
    def from_env(cls) -> ServiceOptions:
        return cls(
            semantic_skills_directory=os.getenv("NOESIS_SEMANTIC_SKILLS_DIR", ""),
            check_certificate_revocation=_env_bool("NOESIS_CHECK_CRL", True),
            crl_file=os.getenv("NOESIS_CRL_FILE", ""),
        )

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> ServiceOptions:
        return cls(
            semantic_skills_directory=_get(
                block, "semanticSkillsDirectory", "SemanticSkillsDirectory", default=""
            )
            or "",
            check_certificate_revocation=_as_bool(
                _get(block, "checkCertificateRevocation", default=True),
                "Service.CheckCertificateRevocation",
            ),
            crl_file=_get(block, "crlFile", default="") or "",
        )


@dataclass(frozen=True)
class NoesisConfig:
    """Root configuration — one object for the whole process."""

    ai_service: AIServiceOptions = field(default_factory=AIServiceOptions)
    memories_store: MemoriesStoreOptions = field(default_factory=MemoriesStoreOptions)
    service: ServiceOptions = field(default_factory=ServiceOptions)

    @classmethod
    def from_env(cls) -> NoesisConfig:
        return cls(
            ai_service=AIServiceOptions.from_env(),
            memories_store=MemoriesStoreOptions.from_env(),
            service=ServiceOptions.from_env(),
        )

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> NoesisConfig:
        ai_block = _sub_block(doc, "aiService", AIServiceOptions.PROPERTY_NAME)
        if ai_block is None:
            raise ConfigurationError(
                "Configuration document has no 'aiService' block.", field="aiService"
            )
        memory_block = _sub_block(doc, "memoryStore", MemoriesStoreOptions.PROPERTY_NAME)
        if memory_block is None:
            raise ConfigurationError(
                "Configuration document has no 'memoryStore' block.", field="memoryStore"
            )
        service_block = _sub_block(doc, "service", "Service") or {}
        return cls(
            ai_service=AIServiceOptions.from_dict(ai_block),
            memories_store=MemoriesStoreOptions.from_dict(memory_block),
            service=ServiceOptions.from_dict(service_block),
        )


def load_config(path: str | Path) -> NoesisConfig:
    """Read a JSON configuration document."""
    path = Path(path)
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e
    if not isinstance(doc, Mapping):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object.")
    return NoesisConfig.from_dict(doc)


# Singleton — import this wherever you need config
config = NoesisConfig.from_env()


def reload_config() -> NoesisConfig:
    """Re-read the environment and replace the module-level singleton."""
    global config
    config = NoesisConfig.from_env()
    return config
