"""
Semantic skill loading — prompt-template functions from the filesystem.

Layout:

    <skills_dir>/
      WriterSkill/              <- one skill
        Summarize/              <- one function
          skprompt.txt          <- the prompt template (required)
          config.json           <- description, completion settings, inputs

config.json (every key optional):

    {
      "description": "Summarize the input",
      "completion": {"max_tokens": 256, "temperature": 0.2},
      "input": {"parameters": [{"name": "input", "defaultValue": ""}]}
    }

Function folders without ``skprompt.txt`` are skipped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from noesis.core.errors import SkillRegistrationError
from noesis.kernel.skills import SkillFunction, SkillParam, validate_name
from noesis.kernel.template import PromptTemplate
from noesis.providers.base import CompletionSettings

if TYPE_CHECKING:
    from noesis.kernel.core import Kernel

logger = logging.getLogger(__name__)

PROMPT_FILE = "skprompt.txt"
CONFIG_FILE = "config.json"


def semantic_function(
    skill_name: str,
    function_name: str,
    template: PromptTemplate,
    description: str = "",
    settings: CompletionSettings | None = None,
    parameters: list[SkillParam] | None = None,
) -> SkillFunction:
    """A SkillFunction that renders ``template`` and sends it for completion."""
    settings = settings or CompletionSettings()
    if parameters is None:
        parameters = [SkillParam(name=name) for name in template.variable_names()]

    async def handler(kernel: Kernel, variables: dict[str, str]) -> str:
        prompt = await template.render(kernel, variables)
        return await kernel.completion.complete(prompt, settings)

    return SkillFunction(
        skill_name=skill_name,
        name=validate_name(function_name, "function"),
        description=description,
        handler=handler,
        parameters=parameters,
        is_semantic=True,
    )


def _read_config(path: Path, skill_name: str) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SkillRegistrationError(f"Invalid {path}: {e}", skill=skill_name) from e
    if not isinstance(data, dict):
        raise SkillRegistrationError(f"{path} must contain a JSON object", skill=skill_name)
    return data


def load_semantic_function(skill_name: str, function_dir: Path) -> SkillFunction:
    """Load one function folder. Raises TemplateError for a bad prompt."""
    qualified = f"{skill_name}.{function_dir.name}"
    try:
        raw_template = (function_dir / PROMPT_FILE).read_text(encoding="utf-8")
    except OSError as e:
        raise SkillRegistrationError(
            f"Cannot read prompt for {qualified}: {e}", skill=skill_name
        ) from e

    config = _read_config(function_dir / CONFIG_FILE, skill_name)
    template = PromptTemplate(raw_template, name=qualified)
    try:
        settings = CompletionSettings.from_dict(config.get("completion") or {})
    except (TypeError, ValueError) as e:
        raise SkillRegistrationError(
            f"Invalid completion settings for {qualified}: {e}", skill=skill_name
        ) from e

    parameters = None
    declared = (config.get("input") or {}).get("parameters")
    if declared:
        parameters = [
            SkillParam(
                name=p.get("name", ""),
                description=p.get("description", ""),
                default=p.get("defaultValue"),
            )
            for p in declared
            if isinstance(p, dict) and p.get("name")
        ]

    return semantic_function(
        skill_name,
        function_dir.name,
        template,
        description=config.get("description", ""),
        settings=settings,
        parameters=parameters,
    )


def load_semantic_skill(
    parent_directory: str | Path, skill_directory_name: str
) -> list[SkillFunction]:
    """Every function folder of ``parent_directory/skill_directory_name``."""
    skill_name = validate_name(skill_directory_name)
    skill_dir = Path(parent_directory) / skill_directory_name
    if not skill_dir.is_dir():
        raise SkillRegistrationError(f"Skill directory not found: {skill_dir}", skill=skill_name)

    functions = []
    for function_dir in sorted(p for p in skill_dir.iterdir() if p.is_dir()):
        if not (function_dir / PROMPT_FILE).exists():
            logger.debug(f"Skipping {function_dir}: no {PROMPT_FILE}")
            continue
        functions.append(load_semantic_function(skill_name, function_dir))
    return functions
