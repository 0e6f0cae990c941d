"""
Kernel assembly — configuration in, ready-to-use Kernel out.

Both option blocks are validated first, memory store then AI service, so a
ConfigurationError never leaves a half-built store behind. Then, in order:
  1. vector store         (build_memory_store)
  2. embedding backend    -> wrapped with the store in SemanticTextMemory
  3. completion backend
  4. Kernel(completion, memory)
  5. skill registrar      (failures per skill are logged, never fatal)

A ConfigurationError propagates untouched, so a bad
memory store config never reaches skill registration.

assemble_kernel builds everything fresh. KernelFactory keeps the store
and the two model clients as process-wide singletons and hands out a new
Kernel per scope (session, request) on top of them.
"""

from __future__ import annotations

import logging
import threading

from noesis.core.config import (
    AIServiceOptions,
    MemoriesStoreOptions,
    NoesisConfig,
    ServiceOptions,
)
from noesis.core.errors import SkillRegistrationError
from noesis.kernel.core import Kernel
from noesis.memory.base import VectorStore
from noesis.memory.registry import build_memory_store, validate_memory_store
from noesis.memory.semantic import SemanticTextMemory
from noesis.providers.base import CompletionBackend, EmbeddingBackend
from noesis.providers.registry import (
    build_completion_backend,
    build_embedding_backend,
    validate_ai_service,
)
from noesis.skills.registrar import (
    RegisterSkills,
    RegistrationReport,
    SkillOutcome,
    SkillRegistrar,
)

logger = logging.getLogger(__name__)


def _register(kernel: Kernel, registrar: RegisterSkills | None) -> Kernel:
    if registrar is None:
        return kernel
    try:
        kernel.registration = registrar(kernel)
    except SkillRegistrationError as e:
        name = e.skill or "<registrar>"
        logger.error(f"Skill registration failed for {name}: {e}", extra={"skill": name})
        kernel.registration = RegistrationReport(
            [SkillOutcome(name=name, ok=False, error=str(e))]
        )
    return kernel


def assemble_kernel(
    ai_options: AIServiceOptions,
    memory_options: MemoriesStoreOptions,
    registrar: RegisterSkills | None = None,
    *,
    service: ServiceOptions | None = None,
) -> Kernel:
    """Build a store, both model backends and a Kernel, then register skills.

    Raises:
        ConfigurationError: any backend's configuration is missing or
            invalid. Raised before the registrar is called.
    """
    validate_memory_store(memory_options)
    validate_ai_service(ai_options)

    store = build_memory_store(memory_options, service)
    memory = SemanticTextMemory(store, build_embedding_backend(ai_options))
    completion = build_completion_backend(ai_options)

    kernel = Kernel(completion, memory)
    logger.info(
        f"Kernel assembled (ai={ai_options.type_name}, memory={memory_options.type_name})"
    )
    return _register(kernel, registrar)


class KernelFactory:
    """Shares backend singletons across per-scope kernels.

    The store and the two model backends are built lazily on first use,
    once per factory, and reused by every ``create()``. They hold no
    per-call state, so concurrent kernels can share them.
    """

    def __init__(self, config: NoesisConfig, registrar: RegisterSkills | None = None):
        self.config = config
        self.registrar = registrar or SkillRegistrar(
            config.service.semantic_skills_directory
        )
        self._lock = threading.Lock()
        self._store: VectorStore | None = None
        self._embedder: EmbeddingBackend | None = None
        self._completion: CompletionBackend | None = None

    @property
    def store(self) -> VectorStore:
        with self._lock:
            if self._store is None:
                self._store = build_memory_store(
                    self.config.memories_store, self.config.service
                )
            return self._store

    @property
    def embedder(self) -> EmbeddingBackend:
        with self._lock:
            if self._embedder is None:
                self._embedder = build_embedding_backend(self.config.ai_service)
            return self._embedder

    @property
    def completion(self) -> CompletionBackend:
        with self._lock:
            if self._completion is None:
                self._completion = build_completion_backend(self.config.ai_service)
            return self._completion

    def create(self) -> Kernel:
        """A fresh Kernel over the shared backends, skills registered."""
        validate_memory_store(self.config.memories_store)
        validate_ai_service(self.config.ai_service)
        store = self.store
        memory = SemanticTextMemory(store, self.embedder)
        kernel = Kernel(self.completion, memory)
        return _register(kernel, self.registrar)

    async def aclose(self) -> None:
        """Close the shared network clients."""
        with self._lock:
            backends = [self._store, self._embedder, self._completion]
            self._store = self._embedder = self._completion = None
        for backend in backends:
            if backend is not None:
                await backend.close()
