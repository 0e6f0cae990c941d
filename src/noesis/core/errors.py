"""
Noesis errors — the three failure families.

ConfigurationError   fatal at assembly time, never retried.
SkillRegistrationError   one skill failed to load; logged and skipped.
BackendError   network/auth failure from a store or model at call time.
"""

from __future__ import annotations


class NoesisError(Exception):
    """Base class for every error raised by noesis."""


class ConfigurationError(NoesisError, ValueError):
    """A required configuration block is missing or a type tag is invalid."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class SkillRegistrationError(NoesisError):
    """A single skill could not be attached to a kernel."""

    def __init__(self, message: str, skill: str | None = None):
        super().__init__(message)
        self.skill = skill


class TemplateError(SkillRegistrationError):
    """A prompt template is malformed."""


class SkillNotFoundError(NoesisError, KeyError):
    """Lookup of a skill or skill function that is not registered."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class BackendError(NoesisError, RuntimeError):
    """A completion, embedding or memory backend failed while serving a call."""

    def __init__(self, message: str, backend: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.backend = backend
        self.status_code = status_code
