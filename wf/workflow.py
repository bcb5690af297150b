"""Workflow records and the storage interface."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class StoreError(Exception):
    """A workflow store operation failed."""


class WorkflowNotFoundError(StoreError, LookupError):
    """The requested workflow does not exist."""


class ReadOnlyError(StoreError):
    """The store does not accept changes."""


_SLUG_RE = re.compile(r"[^a-z0-9-]+")
_DASH_RUN_RE = re.compile(r"-{2,}")


def _mapping(data: Any, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StoreError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _text(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise StoreError(f"field {key!r} must be a string")
    return str(value)


def _strings(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise StoreError(f"field {key!r} must be a list")
    return [_text(item, key) for item in value]


@dataclass
class Arg:
    """A named parameter description stored alongside a workflow."""

    name: str = ""
    default: str = ""
    description: str = ""
    type: str = ""
    options: list[str] = field(default_factory=list)
    dynamic_cmd: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return a mapping for serialisation, omitting empty optional fields."""
        data: dict[str, Any] = {"name": self.name}
        optional = {
            "default": self.default,
            "description": self.description,
            "type": self.type,
            "options": list(self.options),
            "dynamic_cmd": self.dynamic_cmd,
        }
        data.update((key, value) for key, value in optional.items() if value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Arg:
        """Build an argument from a loaded mapping."""
        mapping = _mapping(data, "argument")
        return cls(
            name=_text(mapping.get("name"), "name"),
            default=_text(mapping.get("default"), "default"),
            description=_text(mapping.get("description"), "description"),
            type=_text(mapping.get("type"), "type"),
            options=_strings(mapping.get("options"), "options"),
            dynamic_cmd=_text(mapping.get("dynamic_cmd"), "dynamic_cmd"),
        )


@dataclass
class Workflow:
    """A saved command template with metadata."""

    name: str = ""
    command: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    args: list[Arg] = field(default_factory=list)

    def filename(self) -> str:
        """Return a filesystem-safe ``.yaml`` file name derived from the name."""
        slug = self.name.lower().replace(" ", "-")
        slug = _SLUG_RE.sub("-", slug)
        slug = _DASH_RUN_RE.sub("-", slug)
        slug = slug.strip("-") or "unnamed"
        return slug + ".yaml"

    def to_dict(self) -> dict[str, Any]:
        """Return a mapping for serialisation; empty tags and args are omitted."""
        data: dict[str, Any] = {
            "name": self.name,
            "command": self.command,
            "description": self.description,
        }
        if self.tags:
            data["tags"] = list(self.tags)
        if self.args:
            data["args"] = [arg.to_dict() for arg in self.args]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Workflow:
        """Build a workflow from a loaded mapping; ``None`` gives an empty one."""
        mapping = _mapping(data, "workflow")
        raw_args = mapping.get("args")
        if raw_args is not None and not isinstance(raw_args, list):
            raise StoreError("field 'args' must be a list")
        return cls(
            name=_text(mapping.get("name"), "name"),
            command=_text(mapping.get("command"), "command"),
            description=_text(mapping.get("description"), "description"),
            tags=_strings(mapping.get("tags"), "tags"),
            args=[Arg.from_dict(item) for item in raw_args or []],
        )


class Store(ABC):
    """Create, read, list and delete workflows."""

    @abstractmethod
    def list(self) -> list[Workflow]:
        """Return every workflow in the store."""

    @abstractmethod
    def get(self, name: str) -> Workflow:
        """Return the workflow called ``name`` or raise WorkflowNotFoundError."""

    @abstractmethod
    def save(self, workflow: Workflow) -> None:
        """Create or replace a workflow; its name decides where it is kept."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the workflow called ``name`` or raise WorkflowNotFoundError."""