"""Helpers for a local AI tool stack: config, activity log, cache, rules, workspaces, budgets, GPU detection, worktrees, speed tests and squads."""

__version__ = "1.5.1"