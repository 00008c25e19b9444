import os
import subprocess
from unittest import mock

import pytest

from palmtools import worktree

PORCELAIN = (
    "worktree /repo\n"
    "HEAD abc\n"
    "branch refs/heads/main\n"
    "\n"
    "worktree /repo-feature\n"
    "HEAD def\n"
    "branch refs/heads/feature\n"
    "\n"
    "worktree /repo.git\n"
    "bare\n"
)


def _done(cmd, code=0, stdout=""):
    return subprocess.CompletedProcess(cmd, code, stdout=stdout, stderr="")


def test_parse_worktrees():
    trees = worktree.parse_worktrees(PORCELAIN)
    assert trees == [
        worktree.Worktree("/repo", "main", False),
        worktree.Worktree("/repo-feature", "feature", False),
        worktree.Worktree("/repo.git", "", True),
    ]


def test_parse_worktrees_empty():
    assert worktree.parse_worktrees("") == []


def test_find_worktree_path():
    assert worktree.find_worktree_path(PORCELAIN, "feature") == "/repo-feature"
    assert worktree.find_worktree_path(PORCELAIN, "main") == "/repo"
    assert worktree.find_worktree_path(PORCELAIN, "missing") is None


def test_default_worktree_path():
    cwd = os.path.join(os.sep, "work", "palm")
    expected = os.path.join(os.sep, "work", "palm-feature-auth")
    assert worktree.default_worktree_path("feature-auth", cwd) == expected


def test_list_worktrees_uses_git_output():
    with mock.patch("subprocess.run", return_value=_done([], stdout=PORCELAIN)) as run:
        trees = worktree.list_worktrees()
    assert [t.path for t in trees] == ["/repo", "/repo-feature", "/repo.git"]
    assert run.call_args.args[0] == ["git", "worktree", "list", "--porcelain"]


def test_list_worktrees_failure():
    error = subprocess.CalledProcessError(128, ["git"])
    with mock.patch("subprocess.run", side_effect=error):
        with pytest.raises(worktree.WorktreeError):
            worktree.list_worktrees()


def test_add_worktree_new_branch():
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return _done(cmd, 1 if "rev-parse" in cmd else 0)

    with mock.patch("subprocess.run", side_effect=fake_run):
        path, created = worktree.add_worktree("feat", "/tmp/wt")
    assert (path, created) == ("/tmp/wt", True)
    assert calls[-1] == ["git", "worktree", "add", "-b", "feat", "/tmp/wt"]


def test_add_worktree_existing_branch_failure():
    def fake_run(cmd, **kwargs):
        return _done(cmd, 0 if "rev-parse" in cmd else 1)

    with mock.patch("subprocess.run", side_effect=fake_run):
        with pytest.raises(worktree.WorktreeError):
            worktree.add_worktree("main", "/tmp/wt")


def test_remove_worktree_force():
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return _done(cmd, 0, stdout=PORCELAIN)

    with mock.patch("subprocess.run", side_effect=fake_run):
        removed = worktree.remove_worktree("feature", force=True)
    assert removed == "/repo-feature"
    assert calls[-1] == ["git", "worktree", "remove", "--force", "/repo-feature"]


def test_remove_worktree_unknown_branch():
    with mock.patch("subprocess.run", return_value=_done([], stdout=PORCELAIN)):
        with pytest.raises(worktree.WorktreeError):
            worktree.remove_worktree("nope")


def test_run_in_worktree_unknown_branch():
    with mock.patch("subprocess.run", return_value=_done([], stdout=PORCELAIN)):
        with pytest.raises(worktree.WorktreeError):
            worktree.run_in_worktree("nope", "aider")


def test_run_in_worktree_missing_binary():
    with mock.patch("subprocess.run", return_value=_done([], stdout=PORCELAIN)):
        with mock.patch("shutil.which", return_value=None):
            with pytest.raises(worktree.WorktreeError):
                worktree.run_in_worktree("feature", "no-such-binary")


def test_run_in_worktree_returns_exit_code():
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        if cmd[0] == "git":
            return _done(cmd, 0, stdout=PORCELAIN)
        return _done(cmd, 3)

    with mock.patch("subprocess.run", side_effect=fake_run):
        with mock.patch("shutil.which", return_value="/usr/bin/aider"):
            code = worktree.run_in_worktree("feature", "aider", ["--yes"], {"A": "1"})
    assert code == 3
    cmd, kwargs = calls[-1]
    assert cmd == ["/usr/bin/aider", "--yes"]
    assert kwargs["cwd"] == "/repo-feature"
    assert kwargs["env"] == {"A": "1"}