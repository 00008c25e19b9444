"""Throughput benchmarks for locally installed AI command-line tools."""

from __future__ import annotations

import math
import os
import shutil
import subprocess
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

DEFAULT_PROMPT = "Explain the difference between a stack and a queue in 100 words"
QUICK_PROMPT = "Say hello in 3 words"
SPEED_TIMEOUT = 90
BENCH_TIMEOUT = 30
_BAR_WIDTH = 30

_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_CYAN = "\033[36m"
_GREY = "\033[90m"
_RESET = "\033[0m"


def _paint(colour: str, text: str) -> str:
    if os.environ.get("NO_COLOR"):
        return text
    return f"{colour}{text}{_RESET}"


def _brand(text: str) -> str:
    return _paint(_CYAN, text)


def _subtle(text: str) -> str:
    return _paint(_GREY, text)


@dataclass
class SpeedResult:
    """The outcome of one provider's speed test."""

    provider: str
    model: str
    total_time: float = 0.0
    output_len: int = 0
    tokens_est: int = 0
    tps: float = 0.0
    exit_code: int = 0
    error: str = ""


@dataclass
class BenchResult:
    """The outcome of benchmarking one tool on a prompt."""

    tool: str
    duration: float = 0.0
    output: str = ""
    exit_code: int = 0
    error: str = ""


@dataclass(frozen=True)
class Target:
    """A provider to speed-test and the command that runs it."""

    provider: str
    model: str
    command: tuple[str, ...]


_CANDIDATES = (
    Target("Ollama", "llama3.3", ("ollama", "run", "llama3.3")),
    Target("Aider", "default", ("aider", "--message")),
    Target("Mods", "default", ("mods",)),
    Target("LLM", "default", ("llm",)),
)


def detect_targets() -> list[Target]:
    """Return the known providers whose binaries are found on PATH, in a fixed order."""
    return [t for t in _CANDIDATES if shutil.which(t.command[0]) is not None]


def _exit_message(code: int) -> str:
    if code < 0:
        return f"signal: {-code}"
    return f"exit status {code}"


def _run(
    command: Sequence[str], prompt: str, env: Mapping[str, str] | None, timeout: float
) -> tuple[subprocess.CompletedProcess[bytes] | None, float, str | None]:
    """Run a command; return (result, elapsed, error) where result is None on timeout or start failure."""
    start = time.monotonic()
    try:
        result = subprocess.run(
            list(command),
            input=prompt.encode("utf-8"),
            capture_output=True,
            env=dict(env) if env is not None else None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return None, float(timeout), "timeout"
    except OSError as exc:
        return None, time.monotonic() - start, str(exc)
    return result, time.monotonic() - start, None


def run_speed_test(
    provider: str,
    model: str,
    command: Sequence[str],
    prompt: str,
    env: Mapping[str, str] | None = None,
    timeout: float = SPEED_TIMEOUT,
) -> SpeedResult:
    """Run ``command`` with ``prompt`` appended and measure its output rate."""
    result, elapsed, error = _run([*command, prompt], prompt, env, timeout)
    if result is None:
        if error == "timeout":
            return SpeedResult(
                provider, model, total_time=float(timeout), exit_code=-1,
                error=f"timeout ({timeout:g}s)",
            )
        return SpeedResult(provider, model, total_time=elapsed, exit_code=1, error=error or "")
    if result.returncode != 0:
        return SpeedResult(
            provider, model, total_time=elapsed, exit_code=1,
            error=_exit_message(result.returncode),
        )
    output_len = len(result.stdout)
    tokens_est = output_len // 4
    tps = tokens_est / elapsed if elapsed > 0 else 0.0
    return SpeedResult(
        provider, model, total_time=elapsed, output_len=output_len,
        tokens_est=tokens_est, tps=tps, exit_code=0,
    )


def benchmark_command(name: str, binary: str, prompt: str) -> list[str]:
    """Return the command line used to benchmark tool ``name``."""
    if name == "ollama":
        return [binary, "run", "llama3.3", prompt]
    return [binary, prompt]


def run_benchmark(
    name: str,
    binary: str,
    prompt: str,
    env: Mapping[str, str] | None = None,
    timeout: float = BENCH_TIMEOUT,
) -> BenchResult:
    """Run one tool on ``prompt`` and time it."""
    result, elapsed, error = _run(benchmark_command(name, binary, prompt), prompt, env, timeout)
    if result is None:
        if error == "timeout":
            return BenchResult(name, duration=float(timeout), exit_code=-1, error="timeout")
        return BenchResult(name, duration=elapsed, exit_code=1, error=error or "")
    if result.returncode != 0:
        return BenchResult(
            name, duration=elapsed,
            output=result.stderr.decode("utf-8", errors="replace"),
            exit_code=1, error=_exit_message(result.returncode),
        )
    return BenchResult(
        name, duration=elapsed, output=result.stdout.decode("utf-8", errors="replace"),
        exit_code=0,
    )


def format_bytes(n: int) -> str:
    """Render a byte count as bytes below 1024, otherwise kilobytes."""
    if n < 1024:
        return f"{n}B"
    return f"{n / 1024:.1f}KB"


def speed_grade(avg_tps: float) -> str:
    """Return the letter grade for an average throughput in tokens per second."""
    if avg_tps >= 100:
        return "A+"
    if avg_tps >= 50:
        return "A"
    if avg_tps >= 25:
        return "B"
    if avg_tps >= 10:
        return "C"
    if avg_tps >= 5:
        return "D"
    return "F"


def grade_results(results: Iterable[SpeedResult]) -> tuple[str, float, int]:
    """Return the grade, average throughput and number of successful providers."""
    rates = [r.tps for r in results if not r.error]
    if not rates:
        return "F", 0.0, 0
    avg = sum(rates) / len(rates)
    return speed_grade(avg), avg, len(rates)


def format_grade(grade: str) -> str:
    """Colour a grade: A and B green, C yellow, anything else red."""
    if grade.startswith("A") or grade == "B":
        return _paint(_GREEN, grade)
    if grade == "C":
        return _paint(_YELLOW, grade)
    return _paint(_RED, grade)


def fastest(results: Iterable[SpeedResult]) -> SpeedResult | None:
    """Return the successful result with the highest throughput; ties go to the first."""
    winner = None
    for result in results:
        if not result.error and (winner is None or result.tps > winner.tps):
            winner = result
    return winner


def render_header() -> str:
    """Return the speedtest banner."""
    return "\n".join(
        [
            "",
            _brand("  ╔═══════════════════════════════════════════════╗"),
            _brand("  ║") + "   🌴  " + _brand("palm speedtest")
            + "                          " + _brand("║"),
            _brand("  ║") + "   " + _subtle("AI performance benchmark for your stack")
            + "   " + _brand("║"),
            _brand("  ╚═══════════════════════════════════════════════╝"),
        ]
    )


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def render_results(results: Sequence[SpeedResult]) -> str:
    """Return the results scorecard with bars, the fastest provider and the grade."""
    edge = _brand("  │")
    right = _brand("│")
    blank = edge + " " * 57 + right
    lines = [
        _brand("  ┌─────────────────────────────────────────────────────────┐"),
        edge + "  " + _brand("RESULTS") + " " * 48 + right,
        _brand("  ├─────────────────────────────────────────────────────────┤"),
    ]

    max_tps = max([0.0, *(r.tps for r in results)])
    if max_tps == 0:
        max_tps = 1.0

    for r in results:
        lines.append(blank)
        if r.error:
            failed = "FAILED: " + r.error
            lines.append(
                edge + f"  {r.provider:<12}  " + _paint(_RED, failed)
                + " " * max(0, 40 - len(failed)) + right
            )
            continue

        pad1 = max(0, 55 - len(r.provider) - 2 - len(r.model) - 2)
        lines.append(edge + f"  {r.provider:<12}  " + _subtle(r.model) + " " * pad1 + right)

        filled = _round_half_up(r.tps / max_tps * _BAR_WIDTH)
        if filled < 1 and r.tps > 0:
            filled = 1
        filled = max(0, min(filled, _BAR_WIDTH))
        bar = _brand("█" * filled) + _subtle("░" * (_BAR_WIDTH - filled))
        tps_str = f"{r.tps:.1f} tok/s"
        lines.append(edge + f"  {bar}  {tps_str}" + " " * max(0, 19 - len(tps_str)) + right)

        time_str = f"{r.total_time:.2f}s"
        out_str = format_bytes(r.output_len)
        tok_str = f"~{r.tokens_est} tokens"
        pad3 = max(0, 55 - len(time_str) - len(out_str) - len(tok_str) - 6)
        lines.append(
            edge + f"  {_subtle(time_str)}  {_subtle(out_str)}  {_subtle(tok_str)}"
            + " " * pad3 + right
        )

    lines.append(blank)
    lines.append(_brand("  └─────────────────────────────────────────────────────────┘"))

    winner = fastest(results)
    if winner is not None:
        lines.append("")
        lines.append(
            f"  {_brand('🏆')} Fastest: {_brand(f'{winner.provider} ({winner.model})')}"
            f" at {winner.tps:.1f} tok/s"
        )

    lines.append("")
    grade, avg, count = grade_results(results)
    if count == 0:
        lines.append(_paint(_RED, "  Grade: F — no providers responded"))
    else:
        lines.append(
            f"  Your AI Stack Grade: {format_grade(grade)}  "
            f"(avg {avg:.1f} tok/s across {count} providers)"
        )
    lines.append("")
    return "\n".join(lines)