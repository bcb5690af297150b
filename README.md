# wf

`wf` is a library for keeping shell command workflows: named commands with a
description, tags and parameters. Workflows are stored as YAML files, can be
read from shared git repositories, searched with a fuzzy matcher, and have
their parameters filled in to give a finished command line.

## Command templates (`wf.template`)

A workflow command may contain placeholders in double braces:

| Syntax                         | Meaning                                     |
|--------------------------------|---------------------------------------------|
| `{{host}}`                     | free text                                   |
| `{{port:22}}`                  | free text with a default                    |
| `{{env\|dev\|staging\|*prod}}` | choice from a list, `*` marks the default   |
| `{{branch!git branch}}`        | choices produced by running a shell command |

```python
from wf.template import extract_params, render

params = extract_params("ssh {{host}} -p {{port:22}}")
print([p.name for p in params])             # ['host', 'port']

print(render("ssh {{host}} -p {{port:22}}", {"host": "prod"}))
# ssh prod -p 22
```

`extract_params` returns `Param` objects (name, `ParamType`, default, options,
dynamic command) in order of first appearance; a repeated name keeps its last
non-empty default. In `render` a supplied value wins, then the placeholder's
default; a placeholder with neither is left in place.

## Storing workflows

`wf.workflow` defines the `Workflow` and `Arg` records (with `to_dict` and
`from_dict`), the abstract `Store` interface and the errors `StoreError`,
`WorkflowNotFoundError` and `ReadOnlyError`.

`wf.yaml_store.YAMLStore` keeps one YAML file per workflow under a directory.
File names come from `Workflow.filename()` (`"Deploy Staging"` becomes
`deploy-staging.yaml`), and names such as `infra/deploy` go into
sub-directories. All values are read back as strings, so commands like `no` or
`true` survive a round trip.

```python
from wf.workflow import Workflow
from wf.yaml_store import YAMLStore

store = YAMLStore("workflows")
store.save(Workflow(name="Deploy Staging", command="kubectl apply -n {{ns:staging}}"))
print(store.get("Deploy Staging").command)
```

`wf.remote_store.RemoteStore` is a read-only view over a directory tree such as
a cloned repository: it loads every `.yaml`/`.yml` file outside `.git` that has
a name and a command, and ignores the rest. `wf.multi_store.MultiStore` joins a
local store with remote ones, naming remote workflows `alias/name`; saving or
deleting under a remote alias raises `ReadOnlyError`, and a remote that fails
to list is reported on stderr and skipped.

## Shared sources (`wf.sources`, `wf.git`)

`SourceManager` clones git repositories of workflows (shallow, with git's
terminal prompts turned off) into a directory, records them in `sources.yaml`
there, and on `update` pulls with `--ff-only` and returns an `UpdateResult`
listing the workflow files added, removed or changed. `remove` deletes a
clone; `source_dirs` maps each alias to its clone, ready for `RemoteStore`.
Git must be installed; failures raise `SourceError` or `GitError`.

## Searching (`wf.search`)

```python
from wf.search import parse_query, search
from wf.workflow import Workflow

workflows = [
    Workflow(name="docker-build", command="docker build -t app .", tags=["docker"]),
    Workflow(name="git-push", command="git push origin main", tags=["git"]),
]
tag, query = parse_query("@docker build")
for match in search(query, tag, workflows):
    print(workflows[match.index].name)
```

A query starting with `@word` keeps only workflows carrying that tag
(case-insensitive); the rest is matched fuzzily against the name, description,
tags and command (`searchable_text`). Results are `Match` objects, best first,
with the matched character positions. An empty query returns every workflow in
its original order.

## Filling in parameters (`wf.paramfill`)

`ParamForm` holds the state of filling in a workflow's parameters: focus
movement (`move_focus`), cycling through list options (`cycle_option`), text
entry (`set_text`), a live preview (`live_render`) and the finished command
from `submit`. Defaults written in the template win over defaults stored in the
workflow's `args`. `load_dynamic` fills `{{name!cmd}}` parameters using
`execute_dynamic`, which runs the command through `sh` with a timeout and
returns its non-empty output lines; a failed command turns the parameter into
free text.

## Suggesting parameters (`wf.detect`)

`detect_params` looks through a plain command for values worth turning into
placeholders: URLs, IPv4 addresses, ports, absolute paths, e-mail addresses
and ALL_CAPS words, skipping common keywords such as `HTTP` or `JSON`.
Suggestions are ordered by position.

```python
from wf.detect import detect_params

for s in detect_params("ssh -p :2222 192.168.1.100 -i /home/admin/.ssh/id_rsa"):
    print(s.param_name, s.original)
```

## Shell integration snippets (`wf.shell`)

`render_script(shell, key, comment)` produces an integration snippet for
`bash`, `zsh`, `fish` or `powershell` that binds a key to `wf pick`. Keys are
written like `ctrl+g` or `alt+f` and read with `parse_key`; `Keybinding.validate`
refuses keys that would take over essential terminal functions (`ctrl+c`,
`ctrl+d`, `ctrl+z`, `ctrl+s`, `ctrl+q`). `DEFAULT_KEY` is `ctrl+g`;
`detect_warp` tells whether the terminal is Warp, for which `WARP_DEFAULT_KEY`
(`ctrl+o`) is provided.

## What this package does not do

There is no `wf` command-line program and no interactive picker screen in this
package. The snippets from `render_script` call `wf pick`, which this package
does not install; `ParamForm` and `search` supply the state and logic such a
picker would use, but no terminal interface is included.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.