"""A store that merges local workflows with read-only remote sources."""

from __future__ import annotations

import dataclasses
import sys
from typing import Mapping

from wf.workflow import ReadOnlyError, Store, StoreError, Workflow


class MultiStore(Store):
    """Local workflows plus remote ones named ``alias/name``.

    Names whose first segment is a known remote alias are routed to that
    remote; everything else goes to the local store.
    """

    def __init__(self, local: Store, remote: Mapping[str, Store] | None = None) -> None:
        self.local = local
        self.remote: dict[str, Store] = dict(remote or {})

    def list(self) -> list[Workflow]:
        """Local workflows first, then each remote's in alias order.

        A failing remote is reported on stderr and skipped; a failing local
        store raises.
        """
        workflows = list(self.local.list())
        for alias in sorted(self.remote):
            try:
                found = self.remote[alias].list()
            except (StoreError, OSError) as exc:
                print(f'warning: source "{alias}": {exc}', file=sys.stderr)
                continue
            workflows.extend(
                dataclasses.replace(workflow, name=f"{alias}/{workflow.name}")
                for workflow in found
            )
        return workflows

    def _remote_alias(self, name: str) -> str | None:
        alias, slash, _ = name.partition("/")
        if slash and alias in self.remote:
            return alias
        return None

    def get(self, name: str) -> Workflow:
        """Return a workflow, asking the remote named by the prefix if any."""
        alias = self._remote_alias(name)
        if alias is not None:
            return self.remote[alias].get(name.partition("/")[2])
        return self.local.get(name)

    def save(self, workflow: Workflow) -> None:
        """Save to the local store; remote names are rejected."""
        alias = self._remote_alias(workflow.name)
        if alias is not None:
            raise ReadOnlyError(f'cannot save to remote source "{alias}" (read-only)')
        self.local.save(workflow)

    def delete(self, name: str) -> None:
        """Delete from the local store; remote names are rejected."""
        alias = self._remote_alias(name)
        if alias is not None:
            raise ReadOnlyError(f'cannot delete from remote source "{alias}" (read-only)')
        self.local.delete(name)

    def has_remote(self) -> bool:
        """Tell whether any remote sources are configured."""
        return bool(self.remote)