"""
Skill Registrar — attach built-in and directory-discovered skills to a kernel.

Runs once per assembled kernel. Each skill is attempted independently:
a skill that fails to load is logged, recorded in the report and skipped,
and the remaining skills still load. A kernel with a partial skill set is
a valid kernel.

Built-in skills:
- time    (TimeSkill)
- memory  (MemorySkill)

Semantic skills: every sub-directory of ``semantic_skills_directory``
(see noesis.kernel.semantic for the layout).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from noesis.core.errors import SkillRegistrationError

if TYPE_CHECKING:
    from noesis.kernel.core import Kernel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkillOutcome:
    """Result of attaching one skill."""

    name: str
    ok: bool
    functions: tuple[str, ...] = ()
    error: str | None = None


@dataclass
class RegistrationReport:
    """Every (skill, outcome) pair from one registration pass."""

    outcomes: list[SkillOutcome] = field(default_factory=list)

    @property
    def loaded(self) -> list[str]:
        return [o.name for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[SkillOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def add(self, outcome: SkillOutcome) -> None:
        self.outcomes.append(outcome)


# Anything callable as registrar(kernel) can register skills
RegisterSkills = Callable[["Kernel"], Optional[RegistrationReport]]


def _builtin_skills() -> dict[str, Any]:
    from noesis.skills.memory_skill import MemorySkill
    from noesis.skills.time_skill import TimeSkill

    return {"time": TimeSkill(), "memory": MemorySkill()}


class SkillRegistrar:
    """Default skill registrar.

    Args:
        semantic_skills_directory: folder of semantic skills, optional.
        native_skills: extra objects with ``@skill_function`` methods,
            keyed by skill name. Registered after the built-ins.
        include_builtins: register TimeSkill and MemorySkill.
    """

    def __init__(
        self,
        semantic_skills_directory: str | Path = "",
        native_skills: Mapping[str, Any] | None = None,
        include_builtins: bool = True,
    ):
        self.semantic_skills_directory = str(semantic_skills_directory or "")
        self.native_skills = dict(native_skills or {})
        self.include_builtins = include_builtins

    def register(self, kernel: Kernel) -> RegistrationReport:
        report = RegistrationReport()

        natives = _builtin_skills() if self.include_builtins else {}
        natives.update(self.native_skills)
        for name, instance in natives.items():
            report.add(
                self._attempt(name, lambda n=name, i=instance: kernel.import_skill(i, n))
            )

        for name in self._semantic_skill_names():
            report.add(
                self._attempt(
                    name,
                    lambda n=name: kernel.import_semantic_skill_from_directory(
                        self.semantic_skills_directory, n
                    ),
                )
            )

        if report.failed:
            logger.warning(
                f"Skills registered: {len(report.loaded)}, failed: "
                f"{[o.name for o in report.failed]}"
            )
        else:
            logger.info(f"Skills registered: {report.loaded}")
        return report

    __call__ = register

    def _semantic_skill_names(self) -> list[str]:
        directory = self.semantic_skills_directory.strip()
        if not directory:
            return []
        root = Path(directory)
        if not root.is_dir():
            logger.warning(f"Semantic skills directory not found: {root}")
            return []
        return sorted(
            p.name for p in root.iterdir() if p.is_dir() and not p.name.startswith(".")
        )

    @staticmethod
    def _attempt(name: str, load: Callable[[], Mapping[str, Any]]) -> SkillOutcome:
        try:
            functions = load()
        except SkillRegistrationError as e:
            logger.error(f"Could not load skill {name}: {e}", extra={"skill": name})
            return SkillOutcome(name=name, ok=False, error=str(e))
        except Exception as e:
            logger.error(
                f"Unexpected error loading skill {name}: {e}",
                exc_info=True,
                extra={"skill": name},
            )
            return SkillOutcome(name=name, ok=False, error=f"{type(e).__name__}: {e}")
        return SkillOutcome(name=name, ok=True, functions=tuple(functions))
