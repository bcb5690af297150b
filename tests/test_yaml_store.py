import pytest

from wf.workflow import Arg, StoreError, Workflow, WorkflowNotFoundError
from wf.yaml_store import YAMLStore


def test_save_and_get_round_trip(tmp_path):
    store = YAMLStore(tmp_path)
    workflow = Workflow(
        name="Deploy Staging",
        command="kubectl apply -f deploy.yaml --namespace={{ns}}",
        description="Deploy to staging environment",
        tags=["k8s", "deploy", "staging"],
        args=[Arg(name="ns", default="staging", description="Target namespace")],
    )
    store.save(workflow)
    got = store.get("Deploy Staging")
    assert got == workflow
    assert (tmp_path / "deploy-staging.yaml").is_file()


def test_multiline_command_round_trip(tmp_path):
    store = YAMLStore(tmp_path)
    command = 'echo "step 1"\necho "step 2"\necho "step 3"'
    store.save(Workflow(name="Multi Step", command=command, description="A multiline command"))
    assert store.get("Multi Step").command == command


@pytest.mark.parametrize(
    "name, command",
    [
        ("redis-no", "redis-cli CONFIG SET appendonly no"),
        ("bare-yes", "yes"),
        ("bare-no", "no"),
        ("bare-on", "on"),
        ("bare-off", "off"),
        ("bare-true", "true"),
        ("bare-false", "false"),
        ("bare-NO", "NO"),
        ("bare-Yes", "Yes"),
        ("bare-TRUE", "TRUE"),
    ],
)
def test_norway_problem_round_trip(tmp_path, name, command):
    store = YAMLStore(tmp_path)
    store.save(Workflow(name=name, command=command))
    assert store.get(name).command == command


def test_hand_written_bare_boolean_stays_text(tmp_path):
    (tmp_path / "answer.yaml").write_text("name: answer\ncommand: yes\ndescription:\n")
    got = YAMLStore(tmp_path).get("answer")
    assert got.command == "yes"
    assert got.description == ""


@pytest.mark.parametrize(
    "name, command",
    [
        ("docker-psql", 'docker exec -it db psql -c "SELECT * FROM users"'),
        ("nested-single", 'echo "it\'s a \\"test\\""'),
        ("pipe-chain", "cat foo.txt | grep \"pattern\" | awk '{print $2}' > output.txt"),
        ("subshell", 'echo "today is $(date +%Y-%m-%d)"'),
    ],
)
def test_nested_quotes_round_trip(tmp_path, name, command):
    store = YAMLStore(tmp_path)
    store.save(Workflow(name=name, command=command))
    assert store.get(name).command == command


def test_list_workflows(tmp_path):
    store = YAMLStore(tmp_path)
    store.save(Workflow(name="alpha", command="echo alpha", tags=["test"]))
    store.save(Workflow(name="beta", command="echo beta", tags=["test"]))
    assert [w.name for w in store.list()] == ["alpha", "beta"]

    nested_store = YAMLStore(tmp_path / "infra")
    nested_store.save(Workflow(name="deploy", command="kubectl apply", tags=["k8s"]))

    assert [w.name for w in store.list()] == ["alpha", "beta", "deploy"]
    sub = nested_store.list()
    assert len(sub) == 1
    assert sub[0].name == "deploy"


def test_list_respects_depth_limit(tmp_path):
    deep = tmp_path / "a" / "b" / "c"
    YAMLStore(deep).save(Workflow(name="reachable", command="echo 1"))
    YAMLStore(deep / "d").save(Workflow(name="too-deep", command="echo 2"))
    assert [w.name for w in YAMLStore(tmp_path).list()] == ["reachable"]


def test_list_ignores_non_yaml_files(tmp_path):
    (tmp_path / "notes.txt").write_text("name: x\ncommand: y\n")
    (tmp_path / "other.yml").write_text("name: x\ncommand: y\n")
    assert YAMLStore(tmp_path).list() == []


def test_list_reports_malformed_file(tmp_path):
    (tmp_path / "broken.yaml").write_text("name: [unclosed\n")
    with pytest.raises(StoreError, match="broken.yaml"):
        YAMLStore(tmp_path).list()


def test_delete_workflow(tmp_path):
    store = YAMLStore(tmp_path)
    store.save(Workflow(name="to-delete", command="echo delete me"))
    assert store.get("to-delete").command == "echo delete me"

    store.delete("to-delete")

    with pytest.raises(WorkflowNotFoundError, match="not found"):
        store.get("to-delete")
    assert not (tmp_path / "to-delete.yaml").exists()


def test_get_non_existent(tmp_path):
    with pytest.raises(WorkflowNotFoundError, match="not found"):
        YAMLStore(tmp_path).get("does-not-exist")


def test_delete_non_existent(tmp_path):
    with pytest.raises(WorkflowNotFoundError, match="not found"):
        YAMLStore(tmp_path).delete("does-not-exist")


def test_save_with_path_prefix(tmp_path):
    workflow = Workflow(name="deploy", command="kubectl apply -f deploy.yaml")
    YAMLStore(tmp_path).save(workflow)
    assert (tmp_path / "deploy.yaml").is_file()

    YAMLStore(tmp_path / "infra").save(workflow)
    assert (tmp_path / "infra" / "deploy.yaml").is_file()


def test_nested_name_goes_to_subfolder(tmp_path):
    store = YAMLStore(tmp_path)
    assert store.workflow_path("infra/Deploy App") == tmp_path / "infra" / "deploy-app.yaml"
    store.save(Workflow(name="infra/Deploy App", command="make deploy"))
    assert (tmp_path / "infra" / "deploy-app.yaml").is_file()
    assert store.get("infra/Deploy App").command == "make deploy"


def test_flat_workflow_path(tmp_path):
    assert YAMLStore(tmp_path).workflow_path("Hello World!") == tmp_path / "hello-world.yaml"


def test_list_empty_directory(tmp_path):
    assert YAMLStore(tmp_path).list() == []


def test_list_non_existent_directory(tmp_path):
    assert YAMLStore(tmp_path / "missing").list() == []