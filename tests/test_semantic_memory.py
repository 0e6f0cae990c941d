"""Tests for SemanticTextMemory over the volatile store."""

import pytest

from conftest import fake_embedding


@pytest.mark.asyncio
async def test_save_creates_collection(memory, volatile_store):
    key = await memory.save_information("facts", "The sky is blue", id="sky")
    assert key == "sky"
    assert await volatile_store.does_collection_exist("facts")
    assert await memory.get_collections() == ["facts"]


@pytest.mark.asyncio
async def test_save_embeds_text(memory, embedder, volatile_store):
    await memory.save_information("facts", "The sky is blue", id="sky")
    assert embedder.calls == [["The sky is blue"]]
    record = await volatile_store.get("facts", "sky")
    assert record.embedding == fake_embedding("The sky is blue")


@pytest.mark.asyncio
async def test_search_finds_exact_text_first(memory):
    await memory.save_information("facts", "The sky is blue", id="sky")
    await memory.save_information("facts", "Grass is green", id="grass")

    results = await memory.search("facts", "Grass is green", limit=2, min_relevance_score=-1.0)
    assert results[0].metadata.id == "grass"
    assert results[0].relevance == pytest.approx(1.0)
    assert results[0].embedding is None


@pytest.mark.asyncio
async def test_search_threshold_filters(memory):
    await memory.save_information("facts", "The sky is blue", id="sky")
    results = await memory.search("facts", "completely unrelated", min_relevance_score=0.99)
    assert results == []


@pytest.mark.asyncio
async def test_search_with_embeddings(memory):
    await memory.save_information("facts", "The sky is blue", id="sky")
    results = await memory.search("facts", "The sky is blue", with_embeddings=True)
    assert results[0].embedding == fake_embedding("The sky is blue")


@pytest.mark.asyncio
async def test_search_on_unknown_collection_is_empty(memory):
    assert await memory.search("nothing-here", "anything") == []


@pytest.mark.asyncio
async def test_get_and_remove(memory):
    await memory.save_information(
        "facts", "The sky is blue", id="sky", description="colour", additional_metadata="x"
    )
    result = await memory.get("facts", "sky")
    assert result.metadata.text == "The sky is blue"
    assert result.metadata.description == "colour"
    assert result.relevance == 1.0

    await memory.remove("facts", "sky")
    assert await memory.get("facts", "sky") is None


@pytest.mark.asyncio
async def test_save_reference(memory):
    key = await memory.save_reference(
        "docs", "Quarterly report", external_id="q3", external_source_name="https://intra/q3"
    )
    result = await memory.get("docs", key)
    assert result.metadata.is_reference
    assert result.metadata.external_source_name == "https://intra/q3"
