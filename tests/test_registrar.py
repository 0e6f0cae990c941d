"""Tests for the default skill registrar."""

import logging
from pathlib import Path

import pytest

from noesis.kernel.skills import skill_function
from noesis.skills.registrar import RegistrationReport, SkillOutcome, SkillRegistrar


class EchoSkill:
    @skill_function(description="Echo the input")
    def echo(self, input: str) -> str:
        return input


class ExplodingSkill:
    def __dir__(self):
        raise RuntimeError("cannot inspect")


def _semantic_skills(root):
    good = root / "WriterSkill" / "Summarize"
    good.mkdir(parents=True)
    (good / "skprompt.txt").write_text("Summarize: {{$input}}")

    bad = root / "BrokenSkill" / "Oops"
    bad.mkdir(parents=True)
    (bad / "skprompt.txt").write_text("Unclosed {{$input")

    (root / ".hidden").mkdir()
    return root


def test_registers_builtins(kernel):
    report = SkillRegistrar().register(kernel)
    assert report.ok
    assert report.loaded == ["time", "memory"]
    assert kernel.skills.has_function("time", "today")
    assert kernel.skills.has_function("memory", "recall")


def test_builtins_can_be_disabled(kernel):
    report = SkillRegistrar(include_builtins=False).register(kernel)
    assert report.outcomes == []
    assert len(kernel.skills) == 0


def test_registrar_is_callable(kernel):
    report = SkillRegistrar(native_skills={"echo": EchoSkill()})(kernel)
    assert "echo" in report.loaded


@pytest.mark.asyncio
async def test_native_skills_are_registered(kernel):
    SkillRegistrar(native_skills={"echo": EchoSkill()}, include_builtins=False).register(kernel)
    assert await kernel.run("echo", "echo", "hi") == "hi"


def test_partial_success_with_bad_skills(kernel, tmp_path, caplog):
    registrar = SkillRegistrar(
        semantic_skills_directory=_semantic_skills(tmp_path),
        native_skills={"exploding": ExplodingSkill(), "echo": EchoSkill()},
    )
    with caplog.at_level(logging.ERROR, logger="noesis.skills.registrar"):
        report = registrar.register(kernel)

    assert not report.ok
    assert sorted(o.name for o in report.failed) == ["BrokenSkill", "exploding"]
    assert set(report.loaded) == {"time", "memory", "echo", "WriterSkill"}
    assert kernel.skills.has_function("WriterSkill", "Summarize")
    assert not kernel.skills.has_skill("BrokenSkill")
    assert ".hidden" not in [o.name for o in report.outcomes]

    failure = next(o for o in report.failed if o.name == "exploding")
    assert failure.error == "RuntimeError: cannot inspect"
    assert "Could not load skill BrokenSkill" in caplog.text
    assert "Unexpected error loading skill exploding" in caplog.text


def test_missing_semantic_directory_is_not_fatal(kernel, tmp_path):
    report = SkillRegistrar(semantic_skills_directory=tmp_path / "nowhere").register(kernel)
    assert report.ok
    assert report.loaded == ["time", "memory"]


def test_outcome_records_function_names(kernel):
    report = SkillRegistrar(native_skills={"echo": EchoSkill()}, include_builtins=False)(kernel)
    assert report.outcomes == [SkillOutcome(name="echo", ok=True, functions=("echo",))]


def test_report_add():
    report = RegistrationReport()
    report.add(SkillOutcome(name="a", ok=True))
    report.add(SkillOutcome(name="b", ok=False, error="boom"))
    assert report.loaded == ["a"]
    assert [o.name for o in report.failed] == ["b"]
    assert not report.ok


SHIPPED_SKILLS = Path(__file__).resolve().parents[1] / "skills"


@pytest.mark.asyncio
async def test_shipped_skills_load_and_answer_from_memory(kernel, completion):
    report = SkillRegistrar(SHIPPED_SKILLS).register(kernel)
    assert report.ok
    assert {"ChatSkill", "WriterSkill"} <= set(report.loaded)
    assert kernel.skills.has_function("WriterSkill", "Brainstorm")

    await kernel.save_memory("generic", "Ada's favourite tea is oolong", id="tea")
    await kernel.run("ChatSkill", "Answer", "Ada's favourite tea is oolong")

    prompt = completion.prompts[-1]
    assert "Things you remember that may be relevant:\nAda's favourite tea is oolong" in prompt
    assert "Question: Ada's favourite tea is oolong" in prompt
    assert completion.settings[-1].max_tokens == 300


@pytest.mark.asyncio
async def test_shipped_brainstorm_uses_default_count(kernel, completion):
    SkillRegistrar(SHIPPED_SKILLS, include_builtins=False).register(kernel)
    await kernel.run("WriterSkill", "Brainstorm", "tea")
    assert completion.prompts[-1].startswith("Give 5 short, distinct ideas")
