"""Filling in a workflow's parameters before the command is used."""

from __future__ import annotations

import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

from wf.template import Param, ParamType, extract_params, render
from wf.workflow import Workflow

DYNAMIC_TIMEOUT = 5.0


class DynamicCommandError(Exception):
    """A dynamic parameter's command failed or produced no options."""


def execute_dynamic(command: str, timeout: float = DYNAMIC_TIMEOUT) -> list[str]:
    """Run ``command`` with ``sh -c`` and return its non-blank output lines, stripped."""
    try:
        result = subprocess.run(
            ["sh", "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise DynamicCommandError(f"dynamic command failed: {exc}") from exc
    options = [line.strip() for line in result.stdout.split("\n")]
    options = [line for line in options if line]
    if not options:
        raise DynamicCommandError("dynamic command returned no output")
    return options


@dataclass
class ParamField:
    """The input state of one parameter."""

    param: Param
    value: str = ""
    options: list[str] = field(default_factory=list)
    option_cursor: int = 0
    loading: bool = False
    failed: bool = False
    placeholder: str = ""

    @property
    def name(self) -> str:
        return self.param.name

    @property
    def type(self) -> ParamType:
        return self.param.type

    @property
    def shows_default(self) -> bool:
        """Tell whether the field still holds its parameter's default."""
        return bool(self.param.default) and self.value == self.param.default


def _build_field(param: Param) -> ParamField:
    if param.type is ParamType.ENUM:
        cursor = param.options.index(param.default) if param.default in param.options else 0
        value = param.options[cursor] if param.options else ""
        return ParamField(param, value=value, options=list(param.options), option_cursor=cursor)
    if param.type is ParamType.DYNAMIC:
        return ParamField(param, loading=True, placeholder="Loading...")
    return ParamField(param, value=param.default, placeholder=param.name)


class ParamForm:
    """The parameters of a workflow and the values chosen for them.

    Defaults written in the command template win; defaults stored with the
    workflow's arguments fill the gaps.
    """

    def __init__(self, workflow: Workflow, dynamic_timeout: float = DYNAMIC_TIMEOUT) -> None:
        self.workflow = workflow
        self.dynamic_timeout = dynamic_timeout
        params = extract_params(workflow.command)
        for param in params:
            if param.default:
                continue
            stored = next(
                (arg.default for arg in workflow.args if arg.name == param.name and arg.default),
                "",
            )
            param.default = stored
        self.fields: list[ParamField] = [_build_field(param) for param in params]
        self.focus = 0

    def _focused(self) -> ParamField | None:
        if 0 <= self.focus < len(self.fields):
            return self.fields[self.focus]
        return None

    def load_dynamic(self) -> None:
        """Run every dynamic parameter's command and apply what it returned."""
        pending = [
            (index, f.param.dynamic_cmd)
            for index, f in enumerate(self.fields)
            if f.type is ParamType.DYNAMIC
        ]
        if not pending:
            return

        def run(command: str) -> list[str] | None:
            try:
                return execute_dynamic(command, self.dynamic_timeout)
            except DynamicCommandError:
                return None

        with ThreadPoolExecutor(max_workers=len(pending)) as pool:
            results = list(pool.map(run, [command for _, command in pending]))
        for (index, _), options in zip(pending, results):
            self.apply_dynamic_result(index, options)

    def apply_dynamic_result(self, index: int, options: Sequence[str] | None) -> None:
        """Record a dynamic command's outcome; no options means it failed.

        A failed parameter falls back to free text. Unknown indexes are ignored.
        """
        if not 0 <= index < len(self.fields):
            return
        target = self.fields[index]
        target.loading = False
        if not options:
            target.failed = True
            target.placeholder = target.name
            target.value = ""
            return
        target.options = list(options)
        target.option_cursor = 0
        target.value = target.options[0]
        target.placeholder = ""

    def is_list_param(self, index: int) -> bool:
        """Tell whether the parameter at ``index`` is chosen from a list."""
        if not 0 <= index < len(self.fields):
            return False
        target = self.fields[index]
        if target.type is ParamType.ENUM:
            return True
        return (
            target.type is ParamType.DYNAMIC
            and not target.failed
            and not target.loading
            and bool(target.options)
        )

    def move_focus(self, step: int) -> int:
        """Move the focus by ``step`` fields, wrapping around; return the new focus."""
        if self.fields:
            self.focus = (self.focus + step) % len(self.fields)
        return self.focus

    def cycle_option(self, step: int) -> bool:
        """Move the focused list parameter's selection by ``step``, wrapping around.

        Returns False when the focused parameter is not a list with options.
        """
        target = self._focused()
        if target is None or not self.is_list_param(self.focus) or not target.options:
            return False
        target.option_cursor = (target.option_cursor + step) % len(target.options)
        target.value = target.options[target.option_cursor]
        return True

    def set_text(self, text: str) -> bool:
        """Set the focused parameter's text; list parameters refuse and return False."""
        target = self._focused()
        if target is None or self.is_list_param(self.focus):
            return False
        target.value = text
        return True

    def all_filled(self) -> bool:
        """Tell whether every parameter has a non-empty value."""
        return all(f.value for f in self.fields)

    def values(self) -> dict[str, str]:
        """Return the non-empty values by parameter name."""
        return {f.name: f.value for f in self.fields if f.value}

    def live_render(self) -> str:
        """Return the command with the current values filled in."""
        return render(self.workflow.command, self.values())

    def submit(self) -> str | None:
        """Finish on the last field or when all are filled, else move to the next field.

        Returns the rendered command when finished, otherwise None.
        """
        if self.focus == len(self.fields) - 1 or self.all_filled():
            return self.live_render()
        self.focus += 1
        return None