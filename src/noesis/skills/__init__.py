"""Noesis Skills — built-in skills and the default registrar."""

from noesis.skills.memory_skill import MemorySkill
from noesis.skills.registrar import (
    RegisterSkills,
    RegistrationReport,
    SkillOutcome,
    SkillRegistrar,
)
from noesis.skills.time_skill import TimeSkill

__all__ = [
    "MemorySkill",
    "TimeSkill",
    "SkillRegistrar",
    "RegisterSkills",
    "RegistrationReport",
    "SkillOutcome",
]
