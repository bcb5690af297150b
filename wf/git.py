"""Thin helpers around the git command line."""

from __future__ import annotations

import os
import re
import shutil
import subprocess

CLONE_TIMEOUT = 120.0
PULL_TIMEOUT = 30.0


class GitError(Exception):
    """A git command failed."""


def _environment() -> dict[str, str]:
    # Never let git wait for credentials on the terminal.
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


def git_available() -> bool:
    """Tell whether a git executable is on the PATH."""
    return shutil.which("git") is not None


def git_clone(url: str, dest: str | os.PathLike[str]) -> None:
    """Shallow-clone ``url`` into ``dest``; git's errors go to stderr."""
    args = ["git", "clone", "--depth", "1", url, os.fspath(dest)]
    try:
        subprocess.run(args, env=_environment(), check=True, timeout=CLONE_TIMEOUT)
    except (OSError, subprocess.SubprocessError) as exc:
        raise GitError(f"git clone {url}: {exc}") from exc


def git_pull(repo_dir: str | os.PathLike[str]) -> str:
    """Fast-forward ``repo_dir`` and return git's combined output."""
    args = ["git", "pull", "--ff-only"]
    try:
        result = subprocess.run(
            args,
            cwd=os.fspath(repo_dir),
            env=_environment(),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=PULL_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise GitError(f"git pull in {os.fspath(repo_dir)}: {exc}\n") from exc
    output = result.stdout or ""
    if result.returncode != 0:
        raise GitError(
            f"git pull in {os.fspath(repo_dir)}: exit status {result.returncode}\n{output}"
        )
    return output


def derive_alias(url: str) -> str:
    """Return a short name for a repository URL, e.g. its last path segment."""
    if url.endswith(".git"):
        url = url[: -len(".git")]
    parts = [part for part in re.split(r"[/:]", url) if part]
    return parts[-1] if parts else "remote"