"""Management of remote workflow sources cloned from git repositories."""

from __future__ import annotations

import dataclasses
import os
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

import yaml

from wf.git import derive_alias, git_available, git_clone, git_pull

_CONFIG_NAME = "sources.yaml"
_LONG_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class SourceError(Exception):
    """A source operation failed."""


@dataclass
class Source:
    """A configured remote source."""

    alias: str
    url: str
    updated_at: datetime | None = None


@dataclass
class UpdateResult:
    """Workflow files added, removed and changed by an update."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(_LONG_FRACTION_RE.sub(r"\1", text))
    raise ValueError(f"invalid time {value!r}")


def _source_from_dict(data: Any) -> Source:
    if not isinstance(data, dict):
        raise ValueError("source entry must be a mapping")
    return Source(
        alias=str(data.get("alias") or ""),
        url=str(data.get("url") or ""),
        updated_at=_parse_time(data.get("updated_at")),
    )


def _source_to_dict(source: Source) -> dict[str, Any]:
    data: dict[str, Any] = {"alias": source.alias, "url": source.url}
    if source.updated_at is not None:
        data["updated_at"] = source.updated_at.isoformat()
    return data


def list_yaml_files(directory: str | os.PathLike[str]) -> dict[str, int]:
    """Map each ``.yaml`` file below ``directory`` (outside ``.git``) to its mtime in ns.

    Keys are paths relative to ``directory``; unreadable parts are skipped.
    """
    root = Path(directory)
    files: dict[str, int] = {}
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name != ".git")
        for name in filenames:
            if not name.endswith(".yaml"):
                continue
            path = Path(current, name)
            try:
                files[str(path.relative_to(root))] = path.stat().st_mtime_ns
            except OSError:
                continue
    return files


def diff_snapshots(before: Mapping[str, float], after: Mapping[str, float]) -> UpdateResult:
    """Compare two snapshots from :func:`list_yaml_files`."""
    return UpdateResult(
        added=sorted(name for name in after if name not in before),
        removed=sorted(name for name in before if name not in after),
        updated=sorted(
            name for name, mtime in after.items() if name in before and mtime > before[name]
        ),
    )


class SourceManager:
    """Adds, removes and updates sources cloned under ``directory``.

    The list of sources is kept in ``sources.yaml`` in the same directory.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        self._sources: list[Source] = self._load()

    @property
    def _config_path(self) -> Path:
        return self.directory / _CONFIG_NAME

    def _load(self) -> list[Source]:
        try:
            text = self._config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return []
        try:
            data = yaml.safe_load(text) or {}
            entries = data.get("sources") or []
            return [_source_from_dict(entry) for entry in entries]
        except (yaml.YAMLError, ValueError, TypeError, AttributeError):
            return []

    def _save(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SourceError(f"create sources directory: {exc}") from exc
        text = yaml.safe_dump(
            {"sources": [_source_to_dict(source) for source in self._sources]},
            sort_keys=False,
            allow_unicode=True,
        )
        try:
            self._config_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise SourceError(f"write sources config: {exc}") from exc

    def _find(self, alias: str) -> int | None:
        return next(
            (index for index, source in enumerate(self._sources) if source.alias == alias),
            None,
        )

    def add(self, url: str, alias: str = "") -> Source:
        """Clone ``url`` and register it; the alias defaults to one derived from the URL."""
        if not git_available():
            raise SourceError("git is required for remote sources. Install git and try again")
        alias = alias or derive_alias(url)
        if self._find(alias) is not None:
            raise SourceError(
                f'source "{alias}" already exists. Use --name to specify a different alias'
            )
        git_clone(url, self.directory / alias)
        source = Source(alias=alias, url=url, updated_at=datetime.now().astimezone())
        self._sources.append(source)
        self._save()
        return dataclasses.replace(source)

    def remove(self, alias: str) -> None:
        """Delete a source's clone and forget it."""
        index = self._find(alias)
        if index is None:
            raise SourceError(f'source "{alias}" not found')
        try:
            shutil.rmtree(self.directory / alias)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise SourceError(f"remove clone directory: {exc}") from exc
        del self._sources[index]
        self._save()

    def update(self, alias: str) -> UpdateResult:
        """Pull the latest changes of a source and report which files changed."""
        index = self._find(alias)
        if index is None:
            raise SourceError(f'source "{alias}" not found')
        clone_dir = self.directory / alias
        before = list_yaml_files(clone_dir)
        git_pull(clone_dir)
        after = list_yaml_files(clone_dir)
        result = diff_snapshots(before, after)
        self._sources[index].updated_at = datetime.now().astimezone()
        self._save()
        return result

    def list(self) -> list[Source]:
        """Return copies of all configured sources."""
        return [dataclasses.replace(source) for source in self._sources]

    def source_dirs(self) -> dict[str, Path]:
        """Map each alias to its clone directory."""
        return {source.alias: self.directory / source.alias for source in self._sources}