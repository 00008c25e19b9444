import pytest

from palmtools.formatting import format_duration, render_bar


def test_seconds_only():
    assert format_duration(30) == "30s"


def test_minutes_and_seconds():
    assert format_duration(60) == "1m0s"


def test_hours_and_minutes():
    assert format_duration(2 * 3600 + 5 * 60 + 7) == "2h5m"


@pytest.mark.parametrize("seconds", [0, 1, 59, 59.4])
def test_under_a_minute_is_whole_seconds(seconds):
    text = format_duration(seconds)
    assert text.endswith("s") and "m" not in text
    assert text[:-1].isdigit()


@pytest.mark.parametrize("seconds", [60, 125, 3599])
def test_minute_range_shape(seconds):
    text = format_duration(seconds)
    minutes, rest = text.split("m")
    assert int(minutes) * 60 + int(rest[:-1]) == int(seconds)


@pytest.mark.parametrize("pct", [0, 12.5, 50, 99.9, 100, 250, -10])
def test_bar_length_constant(pct):
    assert len(render_bar(pct, 20)) == 20


def test_bar_full_and_empty():
    assert render_bar(100, 20) == "\u2588" * 20
    assert render_bar(0, 20) == "\u2591" * 20


def test_bar_clamped_above_hundred():
    assert render_bar(300, 10) == render_bar(100, 10)


def test_bar_half():
    assert render_bar(50, 10) == "\u2588" * 5 + "\u2591" * 5


def test_bar_monotonic():
    counts = [render_bar(p, 20).count("\u2588") for p in range(0, 101, 5)]
    assert counts == sorted(counts)