"""Small text formatters for durations and progress bars."""

from __future__ import annotations

_FILLED = "\u2588"
_EMPTY = "\u2591"


def format_duration(seconds: float) -> str:
    """Render a duration as seconds, minutes and seconds, or hours and minutes."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{int(seconds / 60)}m{int(seconds) % 60}s"
    return f"{int(seconds / 3600)}h{int(seconds / 60) % 60}m"


def render_bar(pct: float, width: int = 20) -> str:
    """Render a percentage as a bar of ``width`` filled and empty blocks."""
    pct = min(pct, 100.0)
    filled = max(0, min(int(pct / 100 * width), width))
    return _FILLED * filled + _EMPTY * (width - filled)