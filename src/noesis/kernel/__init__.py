"""
Kernel Package — the assembled intelligence object and its skills.

Architecture:
  config -> build_memory_store -> SemanticTextMemory(store, embedder)
         -> build_completion_backend -> Kernel -> SkillRegistrar
"""

from noesis.kernel.core import Kernel
from noesis.kernel.skills import SkillCollection, SkillFunction, SkillParam, skill_function
from noesis.kernel.template import PromptTemplate
from noesis.kernel.builder import KernelFactory, assemble_kernel

__all__ = [
    "Kernel",
    "SkillCollection",
    "SkillFunction",
    "SkillParam",
    "skill_function",
    "PromptTemplate",
    "KernelFactory",
    "assemble_kernel",
]
