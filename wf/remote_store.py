"""Read-only workflow store over a cloned repository."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import yaml

from wf.workflow import ReadOnlyError, Store, StoreError, Workflow, WorkflowNotFoundError

_EXTENSIONS = (".yaml", ".yml")


def _workflow_files(directory: str | os.PathLike[str]) -> Iterator[Path]:
    with os.scandir(directory) as scan:
        entries = sorted(scan, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if entry.name != ".git":
                yield from _workflow_files(entry.path)
        elif os.path.splitext(entry.name)[1].lower() in _EXTENSIONS:
            yield Path(entry.path)


def _load(path: Path) -> Workflow | None:
    """Parse a workflow file, or return None if it is not a usable workflow."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        workflow = Workflow.from_dict(yaml.load(text, Loader=yaml.BaseLoader))
    except (yaml.YAMLError, StoreError):
        return None
    if not workflow.name or not workflow.command:
        return None
    return workflow


class RemoteStore(Store):
    """Every valid workflow file anywhere below ``directory``, except in ``.git``.

    Malformed files and files without a name or command are ignored.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def list(self) -> list[Workflow]:
        """Return all valid workflows in the tree; a missing tree gives none."""
        if not self.directory.is_dir():
            return []
        try:
            loaded = [_load(path) for path in _workflow_files(self.directory)]
        except OSError as exc:
            raise StoreError(f"walking {self.directory}: {exc}") from exc
        return [workflow for workflow in loaded if workflow is not None]

    def get(self, name: str) -> Workflow:
        """Return the workflow whose name field equals ``name``."""
        for workflow in self.list():
            if workflow.name == name:
                return workflow
        raise WorkflowNotFoundError(f'workflow "{name}" not found in remote source')

    def save(self, workflow: Workflow) -> None:
        """Always fails: remote sources are read-only."""
        raise ReadOnlyError("cannot save to remote source (read-only)")

    def delete(self, name: str) -> None:
        """Always fails: remote sources are read-only."""
        raise ReadOnlyError("cannot delete from remote source (read-only)")