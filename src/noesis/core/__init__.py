"""Noesis core — configuration, errors, logging."""

from noesis.core.errors import (
    BackendError,
    ConfigurationError,
    NoesisError,
    SkillNotFoundError,
    SkillRegistrationError,
    TemplateError,
)

__all__ = [
    "NoesisError",
    "ConfigurationError",
    "SkillRegistrationError",
    "TemplateError",
    "SkillNotFoundError",
    "BackendError",
]
