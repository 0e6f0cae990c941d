"""Tests for the built-in skills and semantic skill loading."""

from datetime import datetime, timezone

import pytest

from noesis.core.errors import SkillRegistrationError, TemplateError
from noesis.kernel.semantic import load_semantic_skill
from noesis.skills.memory_skill import MemorySkill
from noesis.skills.time_skill import TimeSkill

_FIXED = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)


def _write_function(root, skill, function, prompt, config=None):
    folder = root / skill / function
    folder.mkdir(parents=True)
    (folder / "skprompt.txt").write_text(prompt)
    if config is not None:
        (folder / "config.json").write_text(config)
    return folder


# --- TimeSkill ---


@pytest.mark.asyncio
async def test_time_skill_uses_clock(kernel):
    kernel.import_skill(TimeSkill(clock=lambda: _FIXED), "time")
    assert await kernel.run("time", "date") == "Tuesday, 05 March, 2024"
    assert await kernel.run("time", "today") == "Tuesday, 05 March, 2024"
    assert await kernel.run("time", "year") == "2024"
    assert await kernel.run("time", "month") == "March"
    assert await kernel.run("time", "day_of_week") == "Tuesday"
    assert await kernel.run("time", "time") == "02:07 PM"
    assert await kernel.run("time", "timezone_name") == "UTC"


@pytest.mark.asyncio
async def test_time_skill_days_ago(kernel):
    kernel.import_skill(TimeSkill(clock=lambda: _FIXED), "time")
    assert await kernel.run("time", "days_ago", "5") == "Thursday, 29 February, 2024"
    with pytest.raises(ValueError):
        await kernel.run("time", "days_ago", "yesterday")


# --- MemorySkill ---


@pytest.mark.asyncio
async def test_memory_skill_save_and_recall(kernel):
    kernel.import_skill(MemorySkill(), "memory")

    key = await kernel.run("memory", "save", "Ada likes tea", key="pref-1")
    assert key == "pref-1"

    recalled = await kernel.run("memory", "recall", "Ada likes tea")
    assert recalled == "Ada likes tea"
    assert await kernel.memory.storage.does_collection_exist("generic")


@pytest.mark.asyncio
async def test_memory_skill_recall_nothing(kernel):
    kernel.import_skill(MemorySkill(), "memory")
    assert await kernel.run("memory", "recall", "anything at all") == ""
    assert await kernel.run("memory", "recall", "   ") == ""


@pytest.mark.asyncio
async def test_memory_skill_save_generates_key(kernel):
    kernel.import_skill(MemorySkill(), "memory")
    key = await kernel.run("memory", "save", "something", collection="notes")
    assert key
    assert (await kernel.memory.get("notes", key)).metadata.text == "something"


@pytest.mark.asyncio
async def test_memory_skill_rejects_empty_save(kernel):
    kernel.import_skill(MemorySkill(), "memory")
    with pytest.raises(ValueError):
        await kernel.run("memory", "save", "  ")


@pytest.mark.asyncio
async def test_memory_skill_remove(kernel):
    kernel.import_skill(MemorySkill(), "memory")
    await kernel.run("memory", "save", "forget me", key="k1")
    await kernel.run("memory", "remove", key="k1")
    assert await kernel.memory.get("generic", "k1") is None


@pytest.mark.asyncio
async def test_memory_skill_bad_relevance(kernel):
    kernel.import_skill(MemorySkill(), "memory")
    with pytest.raises(ValueError, match="relevance"):
        await kernel.run("memory", "recall", "query", relevance="high")


# --- Semantic skills ---


def test_load_semantic_skill(tmp_path):
    _write_function(
        tmp_path,
        "WriterSkill",
        "Summarize",
        "Summarize: {{$input}}",
        '{"description": "Summarize text", "completion": {"max_tokens": 64, "temperature": 0.2},'
        ' "input": {"parameters": [{"name": "input", "defaultValue": "nothing"}]}}',
    )
    _write_function(tmp_path, "WriterSkill", "Haiku", "A haiku about {{$input}}")
    (tmp_path / "WriterSkill" / "notes").mkdir()  # no prompt, skipped

    functions = load_semantic_skill(tmp_path, "WriterSkill")

    by_name = {fn.name: fn for fn in functions}
    assert sorted(by_name) == ["Haiku", "Summarize"]
    summarize = by_name["Summarize"]
    assert summarize.is_semantic
    assert summarize.description == "Summarize text"
    assert summarize.parameters[0].default == "nothing"


@pytest.mark.asyncio
async def test_semantic_function_uses_config_settings(tmp_path, kernel, completion):
    _write_function(
        tmp_path,
        "WriterSkill",
        "Summarize",
        "Summarize: {{$input}}",
        '{"completion": {"max_tokens": 64, "stop_sequences": ["###"]},'
        ' "input": {"parameters": [{"name": "input", "defaultValue": "nothing"}]}}',
    )
    kernel.import_semantic_skill_from_directory(tmp_path, "WriterSkill")

    assert await kernel.run("WriterSkill", "Summarize") == "echo: Summarize: nothing"
    settings = completion.settings[-1]
    assert settings.max_tokens == 64
    assert settings.stop_sequences == ["###"]


def test_missing_skill_directory(tmp_path):
    with pytest.raises(SkillRegistrationError, match="not found"):
        load_semantic_skill(tmp_path, "Ghost")


def test_malformed_prompt_raises_template_error(tmp_path):
    _write_function(tmp_path, "BadSkill", "Broken", "Hello {{$name")
    with pytest.raises(TemplateError):
        load_semantic_skill(tmp_path, "BadSkill")


def test_invalid_config_json(tmp_path):
    _write_function(tmp_path, "BadSkill", "Broken", "Hello", "{not json")
    with pytest.raises(SkillRegistrationError, match="Invalid"):
        load_semantic_skill(tmp_path, "BadSkill")
