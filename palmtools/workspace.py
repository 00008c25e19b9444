"""Project-level tool configuration kept in the [workspace] section of .palm.toml."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

WORKSPACE_FILE = ".palm.toml"


class WorkspaceNotFound(Exception):
    """Raised when no readable workspace file exists in a directory or its parents."""


@dataclass
class WorkspaceConfig:
    """The tools and API keys pinned for a project."""

    name: str = ""
    tools: list[str] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)

    def add_tool(self, name: str, required_keys: list[str] | tuple[str, ...] = ()) -> bool:
        """Pin a tool and collect its required keys; return False if it was already pinned."""
        if name in self.tools:
            return False
        self.tools.append(name)
        for key in required_keys:
            if key not in self.keys:
                self.keys.append(key)
        return True

    def remove_tool(self, name: str) -> bool:
        """Unpin a tool; return whether it was pinned."""
        if name not in self.tools:
            return False
        self.tools = [tool for tool in self.tools if tool != name]
        return True

    def to_dict(self) -> dict[str, Any]:
        """Return the TOML form of the workspace section."""
        return {"name": self.name, "tools": list(self.tools), "keys": list(self.keys)}


def init_content(name: str) -> str:
    """Return the text of a freshly initialised workspace file."""
    quoted = json.dumps(name, ensure_ascii=False)
    return (
        "# palm workspace — project-level tool configuration\n"
        "# Run 'palm workspace install' to install all pinned tools\n"
        "\n"
        "[workspace]\n"
        f"name = {quoted}\n"
        "tools = []\n"
        "keys = []\n"
        "\n"
        "[parallel]\n"
        "concurrency = 4\n"
    )


def init_workspace(directory: str | os.PathLike[str] = ".") -> Path:
    """Create a workspace file named after ``directory``; raise FileExistsError if present."""
    base = Path(directory).absolute()
    path = base / WORKSPACE_FILE
    if path.exists():
        raise FileExistsError(f"{WORKSPACE_FILE} already exists in {base}")
    path.write_text(init_content(base.name), encoding="utf-8")
    return path


def find_workspace(start: str | os.PathLike[str] | None = None) -> Path | None:
    """Return the nearest workspace file at or above ``start``."""
    directory = (Path(start) if start is not None else Path.cwd()).absolute()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / WORKSPACE_FILE
        if candidate.exists():
            return candidate
    return None


def _string_list(value: Any) -> list[str] | None:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return None
    return list(value)


def load_workspace_from(path: str | os.PathLike[str]) -> WorkspaceConfig | None:
    """Read the workspace section of a file; None if it cannot be read or parsed."""
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    section = data.get("workspace", {})
    if not isinstance(section, dict):
        return None
    name = section.get("name", "")
    tools = _string_list(section.get("tools"))
    keys = _string_list(section.get("keys"))
    if not isinstance(name, str) or tools is None or keys is None:
        return None
    return WorkspaceConfig(name=name, tools=tools, keys=keys)


def load_workspace(
    start: str | os.PathLike[str] | None = None,
) -> tuple[WorkspaceConfig, Path]:
    """Load the nearest workspace and return it with its file path."""
    path = find_workspace(start)
    if path is None:
        raise WorkspaceNotFound(f"no {WORKSPACE_FILE} found")
    ws = load_workspace_from(path)
    if ws is None:
        raise WorkspaceNotFound(f"{path} could not be read")
    return ws, path


def save_workspace(ws: WorkspaceConfig, path: str | os.PathLike[str]) -> None:
    """Write the workspace section to ``path``."""
    with open(path, "wb") as handle:
        tomli_w.dump({"workspace": ws.to_dict()}, handle)