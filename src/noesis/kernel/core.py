"""
Kernel — the assembled runtime object.

Holds exactly one completion backend and one semantic memory (which in
turn holds the embedding backend and the vector store), plus a mutable
registry of skills. Backends are fixed at construction and never swapped;
skills can be added at any time.

The kernel never does network I/O on its own. Connectivity and auth
problems show up as BackendError on the first call that needs them.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Union

from noesis.core.errors import SkillRegistrationError
from noesis.kernel.semantic import load_semantic_skill, semantic_function
from noesis.kernel.skills import (
    SkillCollection,
    SkillFunction,
    collect_native_functions,
    native_function,
    validate_name,
)
from noesis.kernel.template import PromptTemplate
from noesis.memory.base import MemoryQueryResult
from noesis.memory.semantic import SemanticTextMemory
from noesis.providers.base import CompletionBackend, CompletionSettings

if TYPE_CHECKING:
    from noesis.skills.registrar import RegistrationReport

SkillFunctions = Union[Mapping[str, Callable[..., Any]], Iterable[SkillFunction]]


class Kernel:
    def __init__(
        self,
        completion: CompletionBackend,
        memory: SemanticTextMemory,
        log: logging.Logger | None = None,
    ):
        if completion is None:
            raise ValueError("Kernel requires a completion backend")
        if memory is None:
            raise ValueError("Kernel requires a semantic memory")
        self._completion = completion
        self._memory = memory
        self._skills = SkillCollection()
        self.log = log or logging.getLogger("noesis.kernel")
        # Set by the assembler once skills are registered
        self.registration: RegistrationReport | None = None

    # --- Backends (read-only) ---

    @property
    def completion(self) -> CompletionBackend:
        return self._completion

    @property
    def memory(self) -> SemanticTextMemory:
        return self._memory

    @property
    def skills(self) -> SkillCollection:
        return self._skills

    # --- Skill registration ---

    def register_skill(self, name: str, functions: SkillFunctions) -> list[SkillFunction]:
        """Attach a named skill set.

        ``functions`` is either a mapping of function name -> callable, or
        ready-made SkillFunctions, registered as copies renamed to ``name``.
        """
        name = validate_name(name)
        if isinstance(functions, Mapping):
            built = [
                native_function(name, fn, name=fn_name) for fn_name, fn in functions.items()
            ]
        else:
            built = []
            for fn in functions:
                if not isinstance(fn, SkillFunction):
                    raise SkillRegistrationError(
                        f"Skill '{name}' got a non-function entry: {fn!r}", skill=name
                    )
                built.append(dataclasses.replace(fn, skill_name=name))

        self._skills.add_all(built)
        self.log.info(f"Registered skill: {name} ({len(built)} functions)")
        return built

    def import_skill(
        self, instance: Any, skill_name: str | None = None
    ) -> dict[str, SkillFunction]:
        """Attach every ``@skill_function`` method of ``instance``."""
        skill_name = validate_name(skill_name or type(instance).__name__)
        functions = collect_native_functions(instance, skill_name)
        if not functions:
            raise SkillRegistrationError(
                f"{type(instance).__name__} has no @skill_function methods", skill=skill_name
            )
        self._skills.add_all(functions)
        self.log.info(f"Imported native skill: {skill_name} ({len(functions)} functions)")
        return {fn.name: fn for fn in functions}

    def import_semantic_skill_from_directory(
        self, parent_directory: str | Path, skill_directory_name: str
    ) -> dict[str, SkillFunction]:
        """Attach the prompt-template functions under one skill folder.

        Raises TemplateError (a SkillRegistrationError) for a malformed
        prompt. Nothing is attached when any function of the skill fails.
        """
        functions = load_semantic_skill(parent_directory, skill_directory_name)
        self._skills.add_all(functions)
        self.log.info(
            f"Imported semantic skill: {skill_directory_name} ({len(functions)} functions)"
        )
        return {fn.name: fn for fn in functions}

    def create_semantic_function(
        self,
        prompt_template: str,
        function_name: str,
        skill_name: str = "_GLOBAL_FUNCTIONS_",
        description: str = "",
        settings: CompletionSettings | None = None,
    ) -> SkillFunction:
        """Build and attach a semantic function from an inline template."""
        template = PromptTemplate(prompt_template, name=f"{skill_name}.{function_name}")
        function = semantic_function(
            skill_name, function_name, template, description=description, settings=settings
        )
        self._skills.add(function)
        return function

    # --- Invocation ---

    def func(self, skill_name: str, function_name: str) -> SkillFunction:
        return self._skills.get(skill_name, function_name)

    async def run(
        self, skill_name: str, function_name: str, input: str = "", **variables: str
    ) -> str:
        """Invoke one skill function with ``input`` plus named variables."""
        function = self.func(skill_name, function_name)
        return await function.invoke(self, {"input": input, **variables})

    async def generate_completion(
        self, prompt: str, settings: CompletionSettings | None = None
    ) -> str:
        return await self._completion.complete(prompt, settings)

    # --- Memory ---

    async def save_memory(
        self,
        collection: str,
        text: str,
        id: str,
        description: str = "",
        additional_metadata: str = "",
    ) -> str:
        return await self._memory.save_information(
            collection, text, id, description, additional_metadata
        )

    async def recall(
        self,
        collection: str,
        query: str,
        limit: int = 1,
        min_relevance_score: float = 0.7,
    ) -> list[MemoryQueryResult]:
        return await self._memory.search(collection, query, limit, min_relevance_score)

    def __repr__(self) -> str:
        return (
            f"<Kernel completion={self._completion!r} "
            f"store={self._memory.storage!r} skills={self._skills.skill_names()}>"
        )
