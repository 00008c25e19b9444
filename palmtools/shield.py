"""Safety checks to run before and after an AI tool session."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

_RULES_FILES = (
    ".palm-rules.md",
    ".palm-context.md",
    "CLAUDE.md",
    "AGENTS.md",
    ".cursorrules",
    ".windsurfrules",
)
_SECRET_FILES = (".env", "credentials.json", ".pem", "id_rsa")
_SENSITIVE_PATTERNS = (".env", "credentials", "secret", ".pem", ".key")
_GENERATED_EXTENSIONS = (".go", ".py", ".js", ".ts")
_LARGE_FILE_LIMIT = 100 * 1024
_SCAN_SIZE_LIMIT = 512 * 1024


@dataclass
class Check:
    """The outcome of one named safety check."""

    name: str
    detail: str
    passed: bool


def is_git_repo(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether ``root`` holds a git repository."""
    return (Path(root) / ".git").exists()


def has_gitignore(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether ``root`` has a .gitignore file."""
    return (Path(root) / ".gitignore").exists()


def has_rules_file(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether any AI tool instructions file is present in ``root``."""
    return any((Path(root) / name).exists() for name in _RULES_FILES)


def no_tracked_secrets(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether every secret-looking file in ``root`` is listed in .gitignore."""
    base = Path(root)
    for name in _SECRET_FILES:
        if not (base / name).exists():
            continue
        try:
            ignored = (base / ".gitignore").read_text(encoding="utf-8", errors="replace")
        except OSError:
            ignored = ""
        if name not in ignored:
            return False
    return True


def no_large_gen_files(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether no source file above 100 KB exists outside .git and node_modules."""
    base = os.fspath(root)
    for dirpath, dirnames, filenames in os.walk(base):
        rel_dir = os.path.relpath(dirpath, base)
        dirnames[:] = [
            d for d in dirnames
            if not _excluded(os.path.normpath(os.path.join(rel_dir, d)))
        ]
        for filename in filenames:
            rel = os.path.normpath(os.path.join(rel_dir, filename))
            if _excluded(rel):
                continue
            try:
                size = os.path.getsize(os.path.join(dirpath, filename))
            except OSError:
                continue
            if size > _LARGE_FILE_LIMIT and os.path.splitext(filename)[1].lower() in _GENERATED_EXTENSIONS:
                return False
    return True


def _excluded(relative: str) -> bool:
    return relative.startswith(".git") or relative.startswith("node_modules")


def has_uncommitted_changes(root: str | os.PathLike[str] = ".") -> bool:
    """Report whether ``git status`` lists any changes; False when git fails."""
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=os.fspath(root),
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return False
    return bool(result.stdout.strip())


def scan_sensitive_files(directory: str | os.PathLike[str] = ".") -> list[str]:
    """Return paths under ``directory`` whose names look like credentials or keys."""
    found = []
    for dirpath, dirnames, filenames in os.walk(os.fspath(directory)):
        dirnames.sort()
        for filename in sorted(filenames):
            path = os.path.join(dirpath, filename)
            try:
                if os.path.getsize(path) > _SCAN_SIZE_LIMIT:
                    continue
            except OSError:
                continue
            lower = filename.lower()
            if any(pattern in lower for pattern in _SENSITIVE_PATTERNS):
                found.append(path)
    return found


def status_checks(root: str | os.PathLike[str] = ".") -> list[Check]:
    """Run the shield status checks in their fixed order."""
    return [
        Check("Git repo", "Working inside a git repository", is_git_repo(root)),
        Check(".gitignore", "Sensitive files excluded from git", has_gitignore(root)),
        Check(
            "No secrets in tracked files",
            "API keys and passwords not committed",
            no_tracked_secrets(root),
        ),
        Check("AI rules file", "AI tool instructions configured", has_rules_file(root)),
        Check(
            "No large generated files",
            "No suspiciously large AI-generated files",
            no_large_gen_files(root),
        ),
    ]