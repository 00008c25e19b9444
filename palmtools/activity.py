"""Append-only activity log stored as JSON lines."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _now() -> datetime:
    return datetime.now().astimezone()


def _format_time(moment: datetime) -> str:
    text = moment.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _parse_time(text: str) -> datetime:
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


@dataclass
class Entry:
    """One activity log entry."""

    action: str
    tool: str = ""
    details: str = ""
    cost: float = 0.0
    duration: float = 0.0
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out empty optional fields."""
        data: dict[str, Any] = {"timestamp": _format_time(self.timestamp), "action": self.action}
        if self.tool:
            data["tool"] = self.tool
        if self.details:
            data["details"] = self.details
        if self.cost:
            data["cost"] = self.cost
        if self.duration:
            data["duration"] = self.duration
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Build an entry from its JSON form."""
        if not isinstance(data, dict):
            raise TypeError("entry must be a JSON object")
        stamp = data.get("timestamp")
        return cls(
            action=str(data.get("action", "")),
            tool=str(data.get("tool", "")),
            details=str(data.get("details", "")),
            cost=float(data.get("cost", 0.0)),
            duration=float(data.get("duration", 0.0)),
            timestamp=_parse_time(stamp) if stamp else _ZERO_TIME,
        )


def log_path() -> str:
    """Return the path of the activity log."""
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = os.path.join(str(Path.home()), ".config")
    return os.path.join(base, "palm", "activity.jsonl")


def _append(entry: Entry) -> None:
    path = log_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    line = json.dumps(entry.to_dict(), separators=(",", ":"), ensure_ascii=False)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(line + "\n")


def log(action: str, tool: str = "", details: str = "") -> None:
    """Append an entry to the activity log."""
    _append(Entry(action=action, tool=tool, details=details))


def log_with_cost(
    action: str, tool: str = "", details: str = "", cost: float = 0.0, duration: float = 0.0
) -> None:
    """Append an entry carrying cost and duration."""
    _append(Entry(action=action, tool=tool, details=details, cost=cost, duration=duration))


def _load_all() -> list[Entry]:
    try:
        with open(log_path(), encoding="utf-8") as handle:
            text = handle.read()
    except FileNotFoundError:
        return []
    entries = []
    for line in text.split("\n"):
        if not line:
            continue
        try:
            entries.append(Entry.from_dict(json.loads(line)))
        except (ValueError, TypeError):
            continue
    return entries


def read(count: int = 0) -> list[Entry]:
    """Return the newest entries first, at most ``count`` of them when it is positive."""
    entries = sorted(_load_all(), key=lambda e: e.timestamp, reverse=True)
    if count > 0:
        entries = entries[:count]
    return entries


def _contains(text: str, query: str) -> bool:
    return query.translate(_ASCII_LOWER) in text.translate(_ASCII_LOWER)


def search(query: str, count: int = 0) -> list[Entry]:
    """Return entries whose action, tool or details contain ``query``, ignoring case."""
    results = []
    for entry in read(0):
        if any(_contains(value, query) for value in (entry.action, entry.tool, entry.details)):
            results.append(entry)
            if 0 < count <= len(results):
                break
    return results


def clear() -> None:
    """Delete the activity log."""
    os.remove(log_path())