"""Tests for the config system."""

import json

import pytest

import noesis.core.config as config_module
from noesis.core.config import (
    AI_SERVICE_ALIASES,
    MEMORIES_STORE_ALIASES,
    AIServiceOptions,
    AIServiceType,
    MemoriesStoreOptions,
    MemoriesStoreType,
    NoesisConfig,
    QdrantOptions,
    ServiceOptions,
    load_config,
    parse_type,
    reload_config,
)
from noesis.core.errors import ConfigurationError


def test_ai_service_defaults():
    cfg = AIServiceOptions()
    assert cfg.type == AIServiceType.OPENAI
    assert cfg.endpoint == ""
    assert cfg.models.completion == "gpt-4o"
    assert cfg.models.embedding == "text-embedding-ada-002"


def test_memories_store_defaults_to_volatile():
    cfg = MemoriesStoreOptions()
    assert cfg.type == MemoriesStoreType.VOLATILE
    assert cfg.qdrant is None
    assert cfg.azure_cognitive_search is None
    assert cfg.chroma is None


def test_service_defaults():
    cfg = ServiceOptions()
    assert cfg.semantic_skills_directory == ""
    assert cfg.check_certificate_revocation is True


def test_config_is_frozen():
    cfg = NoesisConfig()
    with pytest.raises(AttributeError):
        cfg.ai_service = AIServiceOptions()  # type: ignore[misc]


def test_key_not_in_repr():
    cfg = AIServiceOptions(key="sk-secret")
    assert "sk-secret" not in repr(cfg)


def test_parse_type_is_case_insensitive():
    assert parse_type(AIServiceType, "openai") is AIServiceType.OPENAI
    assert parse_type(AIServiceType, "AZURE_OPENAI") is AIServiceType.AZURE_OPENAI
    assert parse_type(MemoriesStoreType, "azurecognitivesearch") is (
        MemoriesStoreType.AZURE_COGNITIVE_SEARCH
    )


def test_parse_type_keeps_unknown_values():
    assert parse_type(MemoriesStoreType, "Pinecone") == "Pinecone"
    assert parse_type(AIServiceType, None) is None


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("VectorDbA", MemoriesStoreType.QDRANT),
        ("vectordbb", MemoriesStoreType.AZURE_COGNITIVE_SEARCH),
        ("VECTORDBC", MemoriesStoreType.CHROMA),
    ],
)
def test_store_type_aliases(tag, expected):
    assert parse_type(MemoriesStoreType, tag, MEMORIES_STORE_ALIASES) is expected


def test_service_type_aliases():
    assert parse_type(AIServiceType, "DirectHosted", AI_SERVICE_ALIASES) is AIServiceType.OPENAI
    assert parse_type(AIServiceType, "AzureHosted", AI_SERVICE_ALIASES) is (
        AIServiceType.AZURE_OPENAI
    )
    assert parse_type(AIServiceType, "DirectHosted") == "DirectHosted"


def test_from_dict_reads_abstract_names():
    cfg = NoesisConfig.from_dict(
        {
            "aiService": {
                "serviceType": "DirectHosted",
                "apiKey": "k",
                "completionModelId": "c1",
                "embeddingModelId": "e1",
            },
            "memoryStore": {
                "storeType": "VectorDbA",
                "vectorDbA": {"host": "localhost", "port": 6333},
            },
        }
    )
    assert cfg.ai_service.type is AIServiceType.OPENAI
    assert cfg.ai_service.models.completion == "c1"
    assert cfg.ai_service.models.embedding == "e1"
    assert cfg.memories_store.type is MemoriesStoreType.QDRANT
    assert cfg.memories_store.qdrant == QdrantOptions(host="localhost", port=6333)


def test_store_type_alias_from_env(monkeypatch):
    monkeypatch.setenv("NOESIS_MEMORY_STORE_TYPE", "VectorDbC")
    monkeypatch.setenv("NOESIS_AI_SERVICE_TYPE", "AzureHosted")
    assert MemoriesStoreOptions.from_env().type is MemoriesStoreType.CHROMA
    assert AIServiceOptions.from_env().type is AIServiceType.AZURE_OPENAI


def test_ai_service_from_env(monkeypatch):
    monkeypatch.setenv("NOESIS_AI_SERVICE_TYPE", "AzureOpenAI")
    monkeypatch.setenv("NOESIS_AI_ENDPOINT", "https://example.openai.azure.com/")
    monkeypatch.setenv("NOESIS_AI_KEY", "azure-key")
    monkeypatch.setenv("NOESIS_COMPLETION_MODEL", "gpt-35-turbo")
    cfg = AIServiceOptions.from_env()
    assert cfg.type == AIServiceType.AZURE_OPENAI
    assert cfg.endpoint == "https://example.openai.azure.com/"
    assert cfg.key == "azure-key"
    assert cfg.models.completion == "gpt-35-turbo"


def test_ai_key_falls_back_to_openai_api_key(monkeypatch):
    monkeypatch.delenv("NOESIS_AI_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-fallback")
    assert AIServiceOptions.from_env().key == "sk-fallback"


def test_memory_store_from_env_only_builds_configured_blocks(monkeypatch):
    monkeypatch.setenv("NOESIS_MEMORY_STORE_TYPE", "Qdrant")
    monkeypatch.setenv("NOESIS_QDRANT_HOST", "qdrant.local")
    monkeypatch.setenv("NOESIS_QDRANT_PORT", "7000")
    monkeypatch.delenv("NOESIS_CHROMA_HOST", raising=False)
    monkeypatch.delenv("NOESIS_AZURE_SEARCH_ENDPOINT", raising=False)
    cfg = MemoriesStoreOptions.from_env()
    assert cfg.type == MemoriesStoreType.QDRANT
    assert cfg.qdrant == QdrantOptions(host="qdrant.local", port=7000)
    assert cfg.chroma is None
    assert cfg.azure_cognitive_search is None


def test_bad_port_in_env_is_configuration_error(monkeypatch):
    monkeypatch.setenv("NOESIS_QDRANT_HOST", "qdrant.local")
    monkeypatch.setenv("NOESIS_QDRANT_PORT", "not-a-port")
    with pytest.raises(ConfigurationError):
        MemoriesStoreOptions.from_env()


def test_check_crl_env_flag(monkeypatch):
    monkeypatch.setenv("NOESIS_CHECK_CRL", "false")
    assert ServiceOptions.from_env().check_certificate_revocation is False


@pytest.mark.parametrize(
    "value, expected",
    [
        (False, False),
        (True, True),
        ("false", False),
        ("0", False),
        ("No", False),
        ("off", False),
        ("true", True),
        (" yes ", True),
        ("1", True),
    ],
)
def test_check_crl_from_document(value, expected):
    cfg = ServiceOptions.from_dict({"checkCertificateRevocation": value})
    assert cfg.check_certificate_revocation is expected


def test_check_crl_defaults_to_true_in_document():
    assert ServiceOptions.from_dict({}).check_certificate_revocation is True


@pytest.mark.parametrize("value", ["maybe", "", 0, None, [True]])
def test_check_crl_rejects_non_booleans(value):
    with pytest.raises(ConfigurationError, match="boolean") as exc_info:
        ServiceOptions.from_dict({"checkCertificateRevocation": value})
    assert exc_info.value.field == "Service.CheckCertificateRevocation"


def test_from_dict_reads_document():
    cfg = NoesisConfig.from_dict(
        {
            "aiService": {
                "serviceType": "OpenAI",
                "apiKey": "sk-test",
                "completionModelId": "gpt-4o-mini",
                "embeddingModelId": "text-embedding-3-small",
            },
            "memoryStore": {
                "storeType": "Chroma",
                "chroma": {"host": "chroma.local", "port": 9000},
            },
            "service": {"semanticSkillsDirectory": "skills"},
        }
    )
    assert cfg.ai_service.type == AIServiceType.OPENAI
    assert cfg.ai_service.key == "sk-test"
    assert cfg.ai_service.models.completion == "gpt-4o-mini"
    assert cfg.ai_service.models.embedding == "text-embedding-3-small"
    assert cfg.memories_store.type == MemoriesStoreType.CHROMA
    assert cfg.memories_store.chroma.host == "chroma.local"
    assert cfg.memories_store.chroma.port == 9000
    assert cfg.service.semantic_skills_directory == "skills"


def test_from_dict_null_sub_block_stays_none():
    cfg = NoesisConfig.from_dict(
        {"aiService": {"apiKey": "k"}, "memoryStore": {"storeType": "Qdrant", "qdrant": None}}
    )
    assert cfg.memories_store.type == MemoriesStoreType.QDRANT
    assert cfg.memories_store.qdrant is None


def test_from_dict_keeps_unknown_store_type_raw():
    cfg = NoesisConfig.from_dict({"aiService": {}, "memoryStore": {"storeType": "Pinecone"}})
    assert cfg.memories_store.type == "Pinecone"
    assert cfg.memories_store.type_name == "Pinecone"


def test_from_dict_requires_both_blocks():
    with pytest.raises(ConfigurationError, match="aiService"):
        NoesisConfig.from_dict({"memoryStore": {}})
    with pytest.raises(ConfigurationError, match="memoryStore"):
        NoesisConfig.from_dict({"aiService": {}})


def test_load_config(tmp_path):
    path = tmp_path / "noesis.json"
    path.write_text(
        json.dumps(
            {
                "aiService": {"serviceType": "OpenAI", "apiKey": "sk-file"},
                "memoryStore": {"storeType": "Volatile"},
            }
        )
    )
    cfg = load_config(path)
    assert cfg.ai_service.key == "sk-file"
    assert cfg.memories_store.type == MemoriesStoreType.VOLATILE


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_config(path)


def test_reload_config_replaces_singleton(monkeypatch):
    # monkeypatch puts the original singleton back at teardown
    monkeypatch.setattr(config_module, "config", config_module.config)
    monkeypatch.setenv("NOESIS_MEMORY_STORE_TYPE", "Chroma")
    cfg = reload_config()
    assert config_module.config is cfg
    assert cfg.memories_store.type == MemoriesStoreType.CHROMA
