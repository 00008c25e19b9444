"""Spending limits checked against recorded session costs."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import tomli_w


class BudgetExceeded(Exception):
    """Raised when a monthly, daily or per-tool limit has been reached."""


@dataclass
class Budget:
    """Spending limits; ``alert_at`` is a fraction of the monthly limit (0.8 = 80%)."""

    monthly_limit: float = 0.0
    daily_limit: float = 0.0
    alert_at: float = 0.8
    per_tool: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the TOML form of the budget."""
        return {
            "monthly_limit": self.monthly_limit,
            "daily_limit": self.daily_limit,
            "alert_at": self.alert_at,
            "per_tool": dict(self.per_tool),
        }


@dataclass
class SpendRecord:
    """The part of a recorded session that counts towards the budget."""

    tool: str
    cost: float
    started_at: datetime
    tokens: int = 0
    provider: str = ""


@dataclass
class Status:
    """Current spending measured against the budget."""

    monthly_limit: float = 0.0
    monthly_spend: float = 0.0
    daily_limit: float = 0.0
    daily_spend: float = 0.0
    percent_used: float = 0.0
    is_over_budget: bool = False
    is_near_budget: bool = False
    by_tool: dict[str, float] = field(default_factory=dict)
    by_provider: dict[str, float] = field(default_factory=dict)
    total_tokens: int = 0
    current_month: str = ""


def budget_path() -> str:
    """Return the path of the budget file."""
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = os.path.join(str(Path.home()), ".config")
    return os.path.join(base, "palm", "budget.toml")


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def load() -> Budget:
    """Read the budget file, falling back to defaults for anything missing."""
    budget = Budget()
    try:
        with open(budget_path(), "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return budget

    for name in ("monthly_limit", "daily_limit", "alert_at"):
        value = _number(data.get(name))
        if value is not None:
            setattr(budget, name, value)
    per_tool = data.get("per_tool")
    if isinstance(per_tool, dict):
        for tool, limit in per_tool.items():
            value = _number(limit)
            if value is not None:
                budget.per_tool[tool] = value
    return budget


def save(budget: Budget) -> None:
    """Write the budget file."""
    path = budget_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as handle:
        tomli_w.dump(budget.to_dict(), handle)


def get_status(
    sessions: Iterable[SpendRecord] = (), now: datetime | None = None
) -> Status:
    """Compute spending for the current month and day from session records."""
    budget = load()
    now = now or datetime.now().astimezone()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    status = Status(
        monthly_limit=budget.monthly_limit,
        daily_limit=budget.daily_limit,
        current_month=now.strftime("%B %Y"),
    )

    for record in sessions:
        if record.started_at > month_start:
            status.monthly_spend += record.cost
            status.total_tokens += record.tokens
            status.by_tool[record.tool] = status.by_tool.get(record.tool, 0.0) + record.cost
            if record.provider:
                status.by_provider[record.provider] = (
                    status.by_provider.get(record.provider, 0.0) + record.cost
                )
        if record.started_at > day_start:
            status.daily_spend += record.cost

    if budget.monthly_limit > 0:
        status.percent_used = status.monthly_spend / budget.monthly_limit * 100
        status.is_over_budget = status.monthly_spend >= budget.monthly_limit
        status.is_near_budget = status.monthly_spend >= budget.monthly_limit * budget.alert_at

    return status


def check_budget(
    tool: str, sessions: Iterable[SpendRecord] = (), now: datetime | None = None
) -> None:
    """Raise BudgetExceeded if running ``tool`` would go past a limit."""
    budget = load()
    if budget.monthly_limit == 0 and budget.daily_limit == 0:
        return

    status = get_status(sessions, now)

    if status.is_over_budget:
        raise BudgetExceeded(
            f"monthly budget exceeded (${status.monthly_spend:.2f} / ${status.monthly_limit:.2f})"
        )

    if budget.daily_limit > 0 and status.daily_spend >= budget.daily_limit:
        raise BudgetExceeded(
            f"daily budget exceeded (${status.daily_spend:.2f} / ${status.daily_limit:.2f})"
        )

    limit = budget.per_tool.get(tool)
    spend = status.by_tool.get(tool)
    if limit is not None and spend is not None and spend >= limit:
        raise BudgetExceeded(
            f"tool budget exceeded for {tool} (${spend:.2f} / ${limit:.2f})"
        )