from pathlib import Path

import pytest
import yaml

from wf.remote_store import RemoteStore
from wf.workflow import ReadOnlyError, Workflow, WorkflowNotFoundError


def _write(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


@pytest.fixture
def repo(tmp_path):
    _write(tmp_path / "alpha.yaml", {"name": "alpha", "command": "echo alpha"})
    _write(tmp_path / "nested" / "deep" / "beta.yml", {"name": "beta", "command": "echo beta"})
    _write(tmp_path / ".git" / "hidden.yaml", {"name": "hidden", "command": "echo hidden"})
    _write(tmp_path / "no-command.yaml", {"name": "incomplete"})
    (tmp_path / "broken.yaml").write_text("name: [unclosed", encoding="utf-8")
    (tmp_path / "readme.txt").write_text("name: text\ncommand: nope\n", encoding="utf-8")
    return tmp_path


def test_list_finds_valid_workflows_only(repo):
    names = sorted(w.name for w in RemoteStore(repo).list())
    assert names == ["alpha", "beta"]


def test_list_missing_directory_is_empty(tmp_path):
    assert RemoteStore(tmp_path / "missing").list() == []


def test_extension_is_case_insensitive(tmp_path):
    _write(tmp_path / "UPPER.YML", {"name": "upper", "command": "ls"})
    assert [w.name for w in RemoteStore(tmp_path).list()] == ["upper"]


def test_scalar_values_stay_strings(tmp_path):
    _write(tmp_path / "x.yaml", {"name": "bare-no", "command": "no"})
    (tmp_path / "x.yaml").write_text("name: bare-no\ncommand: no\n", encoding="utf-8")
    assert RemoteStore(tmp_path).get("bare-no").command == "no"


def test_get_returns_matching_workflow(repo):
    workflow = RemoteStore(repo).get("beta")
    assert workflow == Workflow(name="beta", command="echo beta")


def test_get_missing_raises(repo):
    with pytest.raises(WorkflowNotFoundError, match="not found"):
        RemoteStore(repo).get("hidden")


def test_save_is_rejected(repo):
    with pytest.raises(ReadOnlyError, match="read-only"):
        RemoteStore(repo).save(Workflow(name="new", command="ls"))
    assert not (repo / "new.yaml").exists()


def test_delete_is_rejected(repo):
    store = RemoteStore(repo)
    with pytest.raises(ReadOnlyError, match="read-only"):
        store.delete("alpha")
    assert (repo / "alpha.yaml").exists()