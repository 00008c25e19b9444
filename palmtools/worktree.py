"""Git worktree helpers for working on several branches at once."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass


class WorktreeError(Exception):
    """Raised when a git worktree operation fails."""


@dataclass
class Worktree:
    """One entry of ``git worktree list --porcelain``."""

    path: str = ""
    branch: str = ""
    bare: bool = False


def parse_worktrees(output: str) -> list[Worktree]:
    """Parse porcelain worktree output into entries."""
    trees: list[Worktree] = []
    current = Worktree()
    for line in output.split("\n"):
        if line.startswith("worktree "):
            if current.path:
                trees.append(current)
            current = Worktree(path=line.removeprefix("worktree "))
        elif line.startswith("branch "):
            current.branch = line.removeprefix("branch ").removeprefix("refs/heads/")
        elif line == "bare":
            current.bare = True
    if current.path:
        trees.append(current)
    return trees


def find_worktree_path(output: str, branch: str) -> str | None:
    """Return the path of the worktree whose branch line starts with ``branch``."""
    target = None
    current = ""
    for line in output.split("\n"):
        if line.startswith("worktree "):
            current = line.removeprefix("worktree ")
        elif line.startswith("branch refs/heads/" + branch):
            target = current
    return target or None


def _porcelain() -> str:
    try:
        result = subprocess.run(
            ["git", "worktree", "list", "--porcelain"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise WorktreeError(f"failed to list worktrees: {exc}") from exc
    return result.stdout


def list_worktrees() -> list[Worktree]:
    """Return the worktrees of the repository in the current directory."""
    return parse_worktrees(_porcelain())


def default_worktree_path(branch: str, cwd: str | None = None) -> str:
    """Return the default location ``../<repo>-<branch>`` for a new worktree."""
    cwd = cwd or os.getcwd()
    parent, repo = os.path.split(os.path.normpath(cwd))
    return os.path.join(parent, f"{repo}-{branch}")


def add_worktree(branch: str, path: str | None = None) -> tuple[str, bool]:
    """Create a worktree for ``branch``; return its path and whether the branch was new."""
    path = path or default_worktree_path(branch)
    try:
        check = subprocess.run(["git", "rev-parse", "--verify", branch], capture_output=True)
        branch_exists = check.returncode == 0
    except OSError:
        branch_exists = False

    if branch_exists:
        command = ["git", "worktree", "add", path, branch]
    else:
        command = ["git", "worktree", "add", "-b", branch, path]

    try:
        result = subprocess.run(command)
    except OSError as exc:
        raise WorktreeError(f"failed to create worktree: {exc}") from exc
    if result.returncode != 0:
        raise WorktreeError(f"failed to create worktree: exit status {result.returncode}")
    return path, not branch_exists


def remove_worktree(branch: str, force: bool = False) -> str:
    """Remove the worktree checked out on ``branch`` and return its path."""
    target = find_worktree_path(_porcelain(), branch)
    if target is None:
        raise WorktreeError(f"no worktree found for branch {branch!r}")

    command = ["git", "worktree", "remove"]
    if force:
        command.append("--force")
    command.append(target)

    try:
        result = subprocess.run(command)
    except OSError as exc:
        raise WorktreeError(f"failed to remove worktree: {exc}") from exc
    if result.returncode != 0:
        raise WorktreeError(
            f"failed to remove worktree: exit status {result.returncode}"
            " (use force to remove with uncommitted changes)"
        )
    return target


def run_in_worktree(
    branch: str,
    binary: str,
    args: Sequence[str] = (),
    env: Mapping[str, str] | None = None,
) -> int:
    """Run ``binary`` inside the worktree for ``branch`` and return its exit code."""
    target = find_worktree_path(_porcelain(), branch)
    if target is None:
        raise WorktreeError(f"no worktree found for branch {branch!r}")

    bin_path = shutil.which(binary)
    if bin_path is None:
        raise WorktreeError(f"{binary} not found in PATH")

    try:
        result = subprocess.run(
            [bin_path, *args], cwd=target, env=dict(env) if env is not None else None
        )
    except OSError as exc:
        raise WorktreeError(f"failed to run {binary}: {exc}") from exc
    return result.returncode