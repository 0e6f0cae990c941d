"""
Prompt templates for semantic skill functions.

Syntax, inside double braces:

    {{$name}}                 variable (missing -> empty string)
    {{skill.function}}        call a function with the current variables
    {{skill.function $var}}   ... with ``input`` set to a variable
    {{skill.function 'txt'}}  ... with ``input`` set to a literal

Templates are parsed when the skill is loaded, so a malformed one fails
registration with TemplateError instead of failing at request time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Union

from noesis.core.errors import TemplateError

if TYPE_CHECKING:
    from noesis.kernel.core import Kernel

logger = logging.getLogger(__name__)

_VAR_RE = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)$")
_FUNC_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\.([A-Za-z_][A-Za-z0-9_]*)$")
_LITERAL_RE = re.compile(r"""^(['"])(.*)\1$""", re.DOTALL)


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class VarBlock:
    name: str


@dataclass(frozen=True)
class FunctionBlock:
    skill: str
    function: str
    argument: VarBlock | str | None = None


Block = Union[TextBlock, VarBlock, FunctionBlock]


def _parse_block(content: str, template_name: str) -> Block:
    content = content.strip()
    if not content:
        raise TemplateError(f"Empty block in template '{template_name}'", skill=template_name)

    var = _VAR_RE.match(content)
    if var:
        return VarBlock(var.group(1))
    if content.startswith("$"):
        raise TemplateError(
            f"Invalid variable name '{content}' in template '{template_name}'",
            skill=template_name,
        )

    literal = _LITERAL_RE.match(content)
    if literal:
        return TextBlock(literal.group(2))

    parts = content.split(None, 1)
    func = _FUNC_RE.match(parts[0])
    if not func:
        raise TemplateError(
            f"Invalid function reference '{parts[0]}' in template '{template_name}'",
            skill=template_name,
        )

    argument: VarBlock | str | None = None
    if len(parts) == 2:
        raw_arg = parts[1].strip()
        arg_var = _VAR_RE.match(raw_arg)
        arg_literal = _LITERAL_RE.match(raw_arg)
        if arg_var:
            argument = VarBlock(arg_var.group(1))
        elif arg_literal:
            argument = arg_literal.group(2)
        else:
            raise TemplateError(
                f"Invalid argument '{raw_arg}' for {parts[0]} in template '{template_name}'",
                skill=template_name,
            )
    return FunctionBlock(func.group(1), func.group(2), argument)


def parse_template(template: str, template_name: str = "<inline>") -> list[Block]:
    """Split a template into text, variable and function blocks."""
    blocks: list[Block] = []
    pos = 0
    while True:
        start = template.find("{{", pos)
        if start == -1:
            break
        end = template.find("}}", start + 2)
        if end == -1:
            raise TemplateError(
                f"Unterminated '{{{{' at offset {start} in template '{template_name}'",
                skill=template_name,
            )
        inner = template[start + 2 : end]
        if "{{" in inner:
            raise TemplateError(
                f"Nested '{{{{' at offset {start} in template '{template_name}'",
                skill=template_name,
            )
        if start > pos:
            blocks.append(TextBlock(template[pos:start]))
        blocks.append(_parse_block(inner, template_name))
        pos = end + 2
    if pos < len(template):
        blocks.append(TextBlock(template[pos:]))
    return blocks


class PromptTemplate:
    def __init__(self, template: str, name: str = "<inline>"):
        self.template = template
        self.name = name
        self.blocks = parse_template(template, name)

    def variable_names(self) -> list[str]:
        """Variables the template reads directly or passes to functions."""
        names: list[str] = []
        for block in self.blocks:
            var = block if isinstance(block, VarBlock) else getattr(block, "argument", None)
            if isinstance(var, VarBlock) and var.name not in names:
                names.append(var.name)
        return names

    async def render(self, kernel: Kernel, variables: Mapping[str, str]) -> str:
        parts: list[str] = []
        for block in self.blocks:
            if isinstance(block, TextBlock):
                parts.append(block.text)
            elif isinstance(block, VarBlock):
                if block.name not in variables:
                    logger.debug(f"Variable '{block.name}' not set in template {self.name}")
                parts.append(str(variables.get(block.name, "")))
            else:
                call_vars = dict(variables)
                if isinstance(block.argument, VarBlock):
                    call_vars["input"] = str(variables.get(block.argument.name, ""))
                elif block.argument is not None:
                    call_vars["input"] = block.argument
                function = kernel.func(block.skill, block.function)
                parts.append(await function.invoke(kernel, call_vars))
        return "".join(parts)
