"""
Skills — named sets of invocable functions attached to a kernel.

A skill function is either native (a Python callable) or semantic (a
prompt template sent to the completion backend). Both are invoked the
same way: ``await fn.invoke(kernel, variables)`` returns a string.

Native functions are plain methods marked with ``@skill_function``:

    class TimeSkill:
        @skill_function(description="Current date")
        def today(self) -> str:
            ...

Parameters are filled by name from the variables dict; a parameter
called ``kernel`` receives the kernel itself.
"""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Mapping

from noesis.core.errors import SkillNotFoundError, SkillRegistrationError

if TYPE_CHECKING:
    from noesis.kernel.core import Kernel

logger = logging.getLogger(__name__)

NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_MARKER = "__skill_function__"


def validate_name(name: str, kind: str = "skill") -> str:
    if not name or not NAME_RE.match(name):
        raise SkillRegistrationError(
            f"Invalid {kind} name '{name}': use letters, digits and underscores",
            skill=name,
        )
    return name


@dataclass
class SkillParam:
    """A single input of a skill function."""

    name: str
    description: str = ""
    default: str | None = None


@dataclass
class SkillFunction:
    """One invocable function of a skill."""

    skill_name: str
    name: str
    description: str
    handler: Callable[[Kernel, dict[str, str]], Awaitable[str]] = field(repr=False)
    parameters: list[SkillParam] = field(default_factory=list)
    is_semantic: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.skill_name}.{self.name}"

    async def invoke(self, kernel: Kernel, variables: Mapping[str, str] | None = None) -> str:
        args = dict(variables or {})
        for param in self.parameters:
            if not args.get(param.name) and param.default is not None:
                args[param.name] = param.default
        return await self.handler(kernel, args)

    def __repr__(self) -> str:
        kind = "semantic" if self.is_semantic else "native"
        return f"<SkillFunction:{self.qualified_name} ({kind})>"


def skill_function(
    description: str = "", name: str | None = None
) -> Callable[[Callable], Callable]:
    """Mark a method as a native skill function."""

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _MARKER, {"name": name or fn.__name__, "description": description})
        return fn

    return decorator


def native_function(
    skill_name: str, fn: Callable, name: str | None = None, description: str = ""
) -> SkillFunction:
    """Wrap any callable (sync or async) as a SkillFunction."""
    marker = getattr(fn, _MARKER, {})
    fn_name = validate_name(name or marker.get("name") or fn.__name__, "function")
    description = description or marker.get("description") or (inspect.getdoc(fn) or "")

    signature = inspect.signature(fn)
    params: list[SkillParam] = []
    accepts_kwargs = False
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            accepts_kwargs = True
            continue
        if param.kind is inspect.Parameter.VAR_POSITIONAL or param.name in ("self", "kernel"):
            continue
        default = (
            None
            if param.default is inspect.Parameter.empty or param.default is None
            else str(param.default)
        )
        params.append(SkillParam(name=param.name, default=default))
    wants_kernel = "kernel" in signature.parameters
    param_names = {p.name for p in params}

    async def handler(kernel: Kernel, variables: dict[str, str]) -> str:
        kwargs: dict[str, Any] = {}
        for key, value in variables.items():
            if key in param_names or accepts_kwargs:
                kwargs[key] = value
        if wants_kernel:
            kwargs["kernel"] = kernel
        result = fn(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return "" if result is None else str(result)

    return SkillFunction(
        skill_name=skill_name,
        name=fn_name,
        description=description,
        handler=handler,
        parameters=params,
    )


def collect_native_functions(instance: Any, skill_name: str) -> list[SkillFunction]:
    """All ``@skill_function`` methods of an object."""
    functions = []
    for attr in dir(instance):
        if attr.startswith("__"):
            continue
        member = getattr(instance, attr, None)
        if callable(member) and hasattr(member, _MARKER):
            functions.append(native_function(skill_name, member))
    return functions


class SkillCollection:
    """Registry of every skill attached to one kernel. Lookups ignore case."""

    def __init__(self) -> None:
        self._skills: dict[str, dict[str, SkillFunction]] = {}
        self._display_names: dict[str, str] = {}

    def add(self, function: SkillFunction) -> None:
        """Add a function. Overwrites one with the same qualified name."""
        skill_key = function.skill_name.lower()
        functions = self._skills.setdefault(skill_key, {})
        self._display_names.setdefault(skill_key, function.skill_name)
        if function.name.lower() in functions:
            logger.warning(f"Replacing skill function: {function.qualified_name}")
        functions[function.name.lower()] = function

    def add_all(self, functions: Iterable[SkillFunction]) -> None:
        for function in functions:
            self.add(function)

    def has_skill(self, skill_name: str) -> bool:
        return skill_name.lower() in self._skills

    def has_function(self, skill_name: str, function_name: str) -> bool:
        return function_name.lower() in self._skills.get(skill_name.lower(), {})

    def get(self, skill_name: str, function_name: str) -> SkillFunction:
        functions = self._skills.get(skill_name.lower())
        if functions is None:
            raise SkillNotFoundError(f"Skill not found: {skill_name}")
        function = functions.get(function_name.lower())
        if function is None:
            raise SkillNotFoundError(f"Function not found: {skill_name}.{function_name}")
        return function

    def functions(self, skill_name: str) -> list[SkillFunction]:
        return list(self._skills.get(skill_name.lower(), {}).values())

    def skill_names(self) -> list[str]:
        return [self._display_names[key] for key in self._skills]

    def all(self) -> list[SkillFunction]:
        return [fn for functions in self._skills.values() for fn in functions.values()]

    def describe(self) -> dict[str, list[str]]:
        """Skill name -> function names. Handy for logs and the CLI."""
        return {
            self._display_names[key]: [fn.name for fn in functions.values()]
            for key, functions in self._skills.items()
        }

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_name: object) -> bool:
        return isinstance(skill_name, str) and self.has_skill(skill_name)
