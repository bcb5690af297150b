"""Parameter extraction and rendering for command templates.

Placeholders take one of these forms::

    {{name}}                   free text
    {{name:default}}           free text with a default
    {{name|a|b|*c}}            choice from a list, ``*`` marks the default
    {{name!shell command}}     choices produced by running a command
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ParamType(Enum):
    """How a parameter's value is chosen."""

    TEXT = "text"
    ENUM = "enum"
    DYNAMIC = "dynamic"


@dataclass
class Param:
    """A named parameter found in a command template."""

    name: str
    type: ParamType = ParamType.TEXT
    default: str = ""
    options: list[str] = field(default_factory=list)
    dynamic_cmd: str = ""


_PARAM_RE = re.compile(r"\{\{([^}]+)\}\}")


def _parse_inner(inner: str) -> Param:
    """Interpret the text between ``{{`` and ``}}``.

    A bang wins over a pipe (shell commands may contain pipes and colons),
    and a pipe wins over a colon (options may contain colons).
    """
    if inner.find("!") > 0:
        name, _, command = inner.partition("!")
        return Param(name=name, type=ParamType.DYNAMIC, dynamic_cmd=command)

    if inner.find("|") > 0:
        name, *choices = inner.split("|")
        options: list[str] = []
        default = ""
        for choice in choices:
            if choice.startswith("*"):
                choice = choice[1:]
                default = choice
            options.append(choice)
        return Param(name=name, type=ParamType.ENUM, default=default, options=options)

    name, _, default = inner.partition(":")
    return Param(name=name, default=default)


def extract_params(command: str) -> list[Param]:
    """Return the unique parameters of ``command`` in order of first appearance.

    When a name appears more than once, the last non-empty default wins.
    """
    params: dict[str, Param] = {}
    for match in _PARAM_RE.finditer(command):
        param = _parse_inner(match.group(1))
        existing = params.get(param.name)
        if existing is None:
            params[param.name] = param
        elif param.default:
            existing.default = param.default
    return list(params.values())


def render(command: str, values: Mapping[str, str] | None = None) -> str:
    """Substitute placeholders in ``command``.

    A supplied value wins, then the placeholder's default; a placeholder
    with neither is left untouched.
    """

    def substitute(match: re.Match[str]) -> str:
        param = _parse_inner(match.group(1))
        if values is not None and param.name in values:
            return values[param.name]
        if param.default:
            return param.default
        return match.group(0)

    return _PARAM_RE.sub(substitute, command)