"""Project discovery and the table of known AI tool binaries."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from palmtools.workspace import WORKSPACE_FILE, load_workspace_from

_MARKERS: tuple[tuple[str, str], ...] = (
    (WORKSPACE_FILE, "palm workspace"),
    ("go.mod", "Go"),
    ("package.json", "Node.js"),
    ("pyproject.toml", "Python"),
    ("Cargo.toml", "Rust"),
    ("pom.xml", "Java (Maven)"),
    ("build.gradle", "Java (Gradle)"),
    ("mix.exs", "Elixir"),
    ("Gemfile", "Ruby"),
    ("requirements.txt", "Python"),
)

_INTERPRETERS = frozenset({"python3", "python", "node", "sh", "bash"})

_EXTRA_BINARIES: dict[str, str] = {
    "claude": "Claude Code",
    "aider": "Aider",
    "ollama": "Ollama",
    "codex": "Codex CLI",
    "copilot": "GitHub Copilot",
    "cursor": "Cursor",
    "cody": "Sourcegraph Cody",
    "continue": "Continue",
    "tabby": "TabbyML",
    "llama-server": "Llama.cpp",
    "llamafile": "Llamafile",
    "vllm": "vLLM",
    "tgi": "Text Gen Inference",
    "sgpt": "Shell GPT",
    "fabric": "Fabric",
    "goose": "Goose",
    "mentat": "Mentat",
    "sweep": "Sweep",
    "gpt-engineer": "GPT Engineer",
    "open-interpreter": "Open Interpreter",
    "interpreter": "Open Interpreter",
}


@dataclass
class Project:
    """A project directory found by scanning for marker files."""

    path: str
    name: str
    marker: str = ""
    tools: list[str] = field(default_factory=list)
    has_palm_toml: bool = False


def discover_projects(root: str | os.PathLike[str]) -> list[Project]:
    """Return the non-hidden subdirectories of ``root`` that hold a project marker."""
    try:
        with os.scandir(root) as scan:
            entries = sorted(scan, key=lambda e: e.name)
    except OSError:
        return []

    projects = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False) or entry.name.startswith("."):
            continue
        dir_path = os.path.join(os.fspath(root), entry.name)
        project = Project(path=dir_path, name=entry.name)
        for filename, description in _MARKERS:
            marker_path = os.path.join(dir_path, filename)
            if not os.path.exists(marker_path):
                continue
            if filename == WORKSPACE_FILE:
                project.has_palm_toml = True
                ws = load_workspace_from(marker_path)
                if ws is not None:
                    project.tools = ws.tools
            elif not project.marker:
                project.marker = description
        if project.marker or project.has_palm_toml:
            projects.append(project)
    return projects


def _binary_name(verify_command: str) -> str | None:
    parts = verify_command.split()
    if not parts:
        return None
    binary = parts[0]
    if binary in _INTERPRETERS and len(parts) > 1:
        binary = parts[1]
        if binary == "-m" and len(parts) > 2:
            binary = parts[2]
    return binary


def build_known_binaries(tools: Iterable[tuple[str, str, str]]) -> dict[str, str]:
    """Map binary names to display names.

    ``tools`` yields ``(name, display_name, verify_command)`` for each registry
    tool; a fixed set of common AI tool binaries fills in the rest.
    """
    known: dict[str, str] = {}
    for name, display_name, verify_command in tools:
        if not verify_command:
            continue
        binary = _binary_name(verify_command)
        if binary is None:
            continue
        known[binary] = display_name or name
    for binary, display_name in _EXTRA_BINARIES.items():
        known.setdefault(binary, display_name)
    return known