"""One rules file kept in sync with the instruction files of each AI tool."""

from __future__ import annotations

import enum
import os
from collections.abc import Iterable
from pathlib import Path

RULES_FILE = ".palm-rules.md"
CONTEXT_FILE = ".palm-context.md"

RULE_FILES: dict[str, str] = {
    "claude-code": "CLAUDE.md",
    "cursor": ".cursor/rules/palm.mdc",
    "copilot": ".github/copilot-instructions.md",
    "codex": "AGENTS.md",
    "windsurf": ".windsurfrules",
    "aider": ".aider.conf.yml",
    "gemini": "GEMINI.md",
    "trae": ".trae/rules/palm.md",
}


class RuleStatus(enum.Enum):
    """State of one tool's rules file relative to the source."""

    MISSING = "not created"
    STALE = "stale"
    IN_SYNC = "in sync"


def find_rules_source(root: str | os.PathLike[str] = ".") -> Path | None:
    """Return the rules source in ``root``, preferring the rules file over the context file."""
    for name in (RULES_FILE, CONTEXT_FILE):
        candidate = Path(root) / name
        if candidate.exists():
            return candidate
    return None


def title_case(s: str) -> str:
    """Upper-case the first character of each whitespace-separated word."""
    return " ".join(word[:1].upper() + word[1:] for word in s.split())


def wrap_rules_for_tool(tool: str, content: str) -> str:
    """Prefix the rules with a generated-file header for ``tool``."""
    header = (
        f"# {title_case(tool)} Rules\n"
        "# Generated by palm rules — edit .palm-rules.md and run `palm rules sync`\n"
        "# Do not edit this file directly.\n\n"
    )
    return header + content


def sync_rules(
    tools: Iterable[str] | None = None, root: str | os.PathLike[str] = "."
) -> dict[str, Path]:
    """Write the rules source into each tool's file and return the files written."""
    source = find_rules_source(root)
    if source is None:
        raise FileNotFoundError(f"no {RULES_FILE} or {CONTEXT_FILE} found")
    base = source.read_text(encoding="utf-8")

    if tools:
        wanted = set(tools)
        targets = {tool: file for tool, file in RULE_FILES.items() if tool in wanted}
    else:
        targets = dict(RULE_FILES)

    synced: dict[str, Path] = {}
    for tool, file in targets.items():
        path = Path(root) / file
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(wrap_rules_for_tool(tool, base), encoding="utf-8")
        except OSError:
            continue
        synced[tool] = path
    return synced


def add_rule(rule: str, root: str | os.PathLike[str] = ".") -> Path:
    """Append a rule as a list item to the rules source, creating it if needed."""
    source = find_rules_source(root) or Path(root) / RULES_FILE
    with open(source, "a", encoding="utf-8") as handle:
        handle.write(f"\n- {rule}\n")
    return source


def check_rules(root: str | os.PathLike[str] = ".") -> dict[str, RuleStatus]:
    """Compare each tool's rules file with the source by modification time."""
    source = find_rules_source(root)
    if source is None:
        raise FileNotFoundError("no rules source found")
    source_mtime = source.stat().st_mtime

    result: dict[str, RuleStatus] = {}
    for tool, file in RULE_FILES.items():
        try:
            mtime = (Path(root) / file).stat().st_mtime
        except OSError:
            result[tool] = RuleStatus.MISSING
            continue
        result[tool] = RuleStatus.STALE if mtime < source_mtime else RuleStatus.IN_SYNC
    return result