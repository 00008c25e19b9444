"""Shared team configuration kept in .palm-team.json."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

TEAM_FILE = ".palm-team.json"


class TeamConfigNotFound(FileNotFoundError):
    """Raised when no team config file exists in a directory or its parents."""


@dataclass
class TeamConfig:
    """Tools, rules and prompts shared by a team."""

    name: str = ""
    tools: list[str] = field(default_factory=list)
    rules: list[str] = field(default_factory=list)
    prompts: dict[str, str] = field(default_factory=dict)

    def add_tool(self, tool: str) -> bool:
        """Add a tool unless it is already listed; return whether it was added."""
        if tool in self.tools:
            return False
        self.tools.append(tool)
        return True

    def add_rule(self, rule: str) -> None:
        """Append a rule."""
        self.rules.append(rule)

    def to_json(self) -> str:
        """Return the indented JSON form; prompts are left out when empty."""
        data: dict[str, Any] = {"name": self.name, "tools": self.tools, "rules": self.rules}
        if self.prompts:
            data["prompts"] = dict(sorted(self.prompts.items()))
        return json.dumps(data, indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeamConfig":
        """Build a config from its parsed JSON form."""
        if not isinstance(data, dict):
            raise ValueError("team config must be a JSON object")
        return cls(
            name=str(data.get("name") or ""),
            tools=[str(t) for t in data.get("tools") or []],
            rules=[str(r) for r in data.get("rules") or []],
            prompts={str(k): str(v) for k, v in (data.get("prompts") or {}).items()},
        )


def default_team_config(name: str = "my-team") -> TeamConfig:
    """Return the starter config written by team init."""
    return TeamConfig(
        name=name,
        tools=["claude-code", "cursor"],
        rules=[
            "Follow existing code patterns",
            "Write tests for new functionality",
            "Keep changes focused and minimal",
        ],
        prompts={"review": "Review this code for bugs, security issues, and style problems"},
    )


def find_team_config(start: str | os.PathLike[str] | None = None) -> Path | None:
    """Return the nearest team config file at or above ``start``."""
    directory = Path(start) if start is not None else Path.cwd()
    directory = directory.absolute()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / TEAM_FILE
        if candidate.is_file():
            return candidate
    return None


def load_team_config(start: str | os.PathLike[str] | None = None) -> TeamConfig:
    """Load the nearest team config; raise TeamConfigNotFound if there is none."""
    path = find_team_config(start)
    if path is None:
        raise TeamConfigNotFound(f"no {TEAM_FILE} found")
    return TeamConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))


def save_team_config(config: TeamConfig, path: str | os.PathLike[str] = TEAM_FILE) -> None:
    """Write the team config to ``path``."""
    Path(path).write_text(config.to_json(), encoding="utf-8")


def init_team_config(
    name: str = "my-team", path: str | os.PathLike[str] = TEAM_FILE
) -> TeamConfig:
    """Create a starter team config; raise FileExistsError if ``path`` exists."""
    if Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    config = default_team_config(name)
    save_team_config(config, path)
    return config