from pathlib import Path

import pytest
import yaml

from wf.multi_store import MultiStore
from wf.remote_store import RemoteStore
from wf.workflow import ReadOnlyError, Store, StoreError, Workflow, WorkflowNotFoundError
from wf.yaml_store import YAMLStore


class _BrokenStore(Store):
    def list(self):
        raise StoreError("disk on fire")

    def get(self, name):
        raise StoreError("disk on fire")

    def save(self, workflow):
        raise StoreError("disk on fire")

    def delete(self, name):
        raise StoreError("disk on fire")


def _remote(directory: Path, *workflows: Workflow) -> RemoteStore:
    directory.mkdir(parents=True, exist_ok=True)
    for workflow in workflows:
        (directory / workflow.filename()).write_text(
            yaml.safe_dump(workflow.to_dict()), encoding="utf-8"
        )
    return RemoteStore(directory)


@pytest.fixture
def stores(tmp_path):
    local = YAMLStore(tmp_path / "local")
    local.save(Workflow(name="local-one", command="echo local"))
    remotes = {
        "beta": _remote(tmp_path / "beta", Workflow(name="y", command="echo y")),
        "alpha": _remote(tmp_path / "alpha", Workflow(name="x", command="echo x")),
    }
    return local, remotes


def test_list_local_first_then_sorted_remotes(stores):
    local, remotes = stores
    names = [w.name for w in MultiStore(local, remotes).list()]
    assert names == ["local-one", "alpha/x", "beta/y"]


def test_list_does_not_rename_remote_store_contents(stores):
    local, remotes = stores
    MultiStore(local, remotes).list()
    assert [w.name for w in remotes["alpha"].list()] == ["x"]


def test_failing_remote_is_skipped_with_warning(stores, capsys):
    local, remotes = stores
    remotes["broken"] = _BrokenStore()
    names = [w.name for w in MultiStore(local, remotes).list()]
    assert names == ["local-one", "alpha/x", "beta/y"]
    assert 'source "broken"' in capsys.readouterr().err


def test_failing_local_raises(stores):
    _, remotes = stores
    with pytest.raises(StoreError):
        MultiStore(_BrokenStore(), remotes).list()


def test_get_routes_to_remote(stores):
    local, remotes = stores
    workflow = MultiStore(local, remotes).get("alpha/x")
    assert (workflow.name, workflow.command) == ("x", "echo x")


def test_get_unknown_prefix_goes_local(stores):
    local, remotes = stores
    local.save(Workflow(name="infra/deploy", command="kubectl apply"))
    assert MultiStore(local, remotes).get("infra/deploy").command == "kubectl apply"


def test_get_missing_remote_workflow(stores):
    local, remotes = stores
    with pytest.raises(WorkflowNotFoundError):
        MultiStore(local, remotes).get("alpha/missing")


def test_save_to_remote_rejected(stores):
    local, remotes = stores
    with pytest.raises(ReadOnlyError, match='"alpha"'):
        MultiStore(local, remotes).save(Workflow(name="alpha/new", command="ls"))


def test_save_goes_local(stores):
    local, remotes = stores
    multi = MultiStore(local, remotes)
    multi.save(Workflow(name="fresh", command="ls -la"))
    assert local.get("fresh").command == "ls -la"


def test_delete_remote_rejected(stores):
    local, remotes = stores
    with pytest.raises(ReadOnlyError, match="read-only"):
        MultiStore(local, remotes).delete("beta/y")
    assert remotes["beta"].get("y").name == "y"


def test_delete_local(stores):
    local, remotes = stores
    MultiStore(local, remotes).delete("local-one")
    with pytest.raises(WorkflowNotFoundError):
        local.get("local-one")


def test_has_remote(stores):
    local, remotes = stores
    assert MultiStore(local, remotes).has_remote() is True
    assert MultiStore(local).has_remote() is False