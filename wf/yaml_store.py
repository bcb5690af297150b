"""Workflow store backed by one YAML file per workflow."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import yaml

from wf.workflow import Store, StoreError, Workflow, WorkflowNotFoundError

_MAX_DIR_DEPTH = 3


def _dump(workflow: Workflow) -> str:
    return yaml.safe_dump(
        workflow.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1 << 30,
    )


def _parse(text: str) -> Workflow:
    # Every scalar is loaded as a string, so values such as "no" stay text.
    return Workflow.from_dict(yaml.load(text, Loader=yaml.BaseLoader))


class YAMLStore(Store):
    """Keeps each workflow as a ``.yaml`` file under ``base_path``.

    Names may contain ``/`` to place workflows in sub-folders.
    """

    def __init__(self, base_path: str | os.PathLike[str]) -> None:
        self.base_path = Path(base_path)

    def save(self, workflow: Workflow) -> None:
        """Write ``workflow`` to its file, creating directories as needed."""
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"creating store directory: {exc}") from exc

        text = _dump(workflow)
        path = self.workflow_path(workflow.name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"creating workflow directory: {exc}") from exc
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"writing workflow file: {exc}") from exc

    def get(self, name: str) -> Workflow:
        """Load the workflow called ``name``."""
        path = self.workflow_path(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise WorkflowNotFoundError(f'workflow "{name}" not found') from exc
        except OSError as exc:
            raise StoreError(f"reading workflow file: {exc}") from exc
        try:
            return _parse(text)
        except yaml.YAMLError as exc:
            raise StoreError(f"parsing workflow file: {exc}") from exc

    def list(self) -> list[Workflow]:
        """Load every workflow under the base path, a few folders deep."""
        if not self.base_path.is_dir():
            return []
        try:
            return [self._load(path) for path in self._yaml_files(self.base_path, 0)]
        except OSError as exc:
            raise StoreError(f"walking {self.base_path}: {exc}") from exc

    def delete(self, name: str) -> None:
        """Remove the file of the workflow called ``name``."""
        path = self.workflow_path(name)
        if not path.exists():
            raise WorkflowNotFoundError(f'workflow "{name}" not found')
        try:
            path.unlink()
        except OSError as exc:
            raise StoreError(f"deleting workflow file: {exc}") from exc

    def workflow_path(self, name: str) -> Path:
        """Return the file path for ``name``; only its last segment is slugified."""
        *folders, last = name.split("/")
        filename = Workflow(name=last).filename()
        return Path(os.path.normpath(os.path.join(self.base_path, *folders, filename)))

    def _yaml_files(self, directory: Path, depth: int) -> Iterator[Path]:
        with os.scandir(directory) as scan:
            entries = sorted(scan, key=lambda entry: entry.name)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if depth + 1 <= _MAX_DIR_DEPTH:
                    yield from self._yaml_files(Path(entry.path), depth + 1)
            elif entry.name.endswith(".yaml"):
                yield Path(entry.path)

    @staticmethod
    def _load(path: Path) -> Workflow:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"reading {path}: {exc}") from exc
        try:
            return _parse(text)
        except (yaml.YAMLError, StoreError) as exc:
            raise StoreError(f"parsing {path}: {exc}") from exc