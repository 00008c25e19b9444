"""Run several AI tools on one task and pick, compare or merge their answers."""

from __future__ import annotations

import enum
import os
import shutil
import subprocess
import time
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

DEFAULT_TIMEOUT = 60
_JUDGE_EXCERPT = 1000
_RULE = "─" * 60


class SquadMode(enum.Enum):
    """How the squad's results are combined."""

    RACE = "race"
    VOTE = "vote"
    MERGE = "merge"
    ALL = "all"

    @property
    def needs_judge(self) -> bool:
        """Whether this mode needs a judge tool."""
        return self in (SquadMode.VOTE, SquadMode.MERGE)


@dataclass
class SquadResult:
    """The result from one tool in the squad."""

    tool: str
    output: str = ""
    duration: float = 0.0
    exit_code: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        """Whether the tool finished without an error."""
        return not self.error


@dataclass(frozen=True)
class SquadTool:
    """A tool taking part in a squad run."""

    name: str
    binary: str = ""
    display_name: str = ""

    @property
    def executable(self) -> str:
        """The binary to run, defaulting to the tool name."""
        return self.binary or self.name

    @property
    def label(self) -> str:
        """The name shown in results."""
        return self.display_name or self.name


def build_vault_env(
    secrets: Mapping[str, str], base_env: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Return ``base_env`` with vault secrets added where not already set."""
    env = dict(os.environ if base_env is None else base_env)
    for key, value in secrets.items():
        if not env.get(key):
            env[key] = value
    return env


def squad_command(name: str, binary: str, task: str) -> list[str]:
    """Return the command line that runs tool ``name`` on ``task``."""
    if name == "ollama":
        return [binary, "run", "llama3.3", task]
    return [binary, task]


def _exit_message(code: int) -> str:
    if code < 0:
        return f"signal: {-code}"
    return f"exit status {code}"


def _run_one(
    tool: SquadTool, task: str, env: Mapping[str, str] | None, timeout: float
) -> SquadResult:
    binary = tool.executable
    if shutil.which(binary) is None:
        return SquadResult(tool.label, exit_code=-1, error="not installed")

    command = squad_command(tool.name, binary, task)
    start = time.monotonic()
    try:
        completed = subprocess.run(
            command,
            input=task.encode("utf-8"),
            capture_output=True,
            env=dict(env) if env is not None else None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return SquadResult(tool.label, duration=float(timeout), exit_code=-1, error="timeout")
    except OSError as exc:
        return SquadResult(tool.label, exit_code=1, error=str(exc))
    elapsed = time.monotonic() - start

    if completed.returncode != 0:
        return SquadResult(
            tool.label,
            output=completed.stderr.decode("utf-8", errors="replace"),
            duration=elapsed,
            exit_code=1,
            error=_exit_message(completed.returncode),
        )
    return SquadResult(
        tool.label,
        output=completed.stdout.decode("utf-8", errors="replace"),
        duration=elapsed,
    )


def run_squad(
    tools: Sequence[SquadTool],
    task: str,
    env: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[SquadResult]:
    """Run every tool on ``task`` in parallel; results keep the order of ``tools``."""
    if not tools:
        return []
    with ThreadPoolExecutor(max_workers=len(tools)) as pool:
        return list(pool.map(lambda t: _run_one(t, task, env, timeout), tools))


def race_winner(results: Iterable[SquadResult]) -> SquadResult | None:
    """Return the successful result with the shortest duration; ties go to the first."""
    winner = None
    for result in results:
        if result.ok and (winner is None or result.duration < winner.duration):
            winner = result
    return winner


def summary_rows(results: Iterable[SquadResult]) -> list[list[str]]:
    """Return table rows of tool, time, output length and status."""
    rows = []
    for r in results:
        if r.error:
            rows.append([r.tool, "-", "-", f"✗ {r.error}"])
        else:
            rows.append([r.tool, f"{r.duration:.2f}s", f"{len(r.output)} chars", "✓ ok"])
    return rows


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells: Sequence[str]) -> str:
        return ("  " + "  ".join(c.ljust(w) for c, w in zip(cells, widths))).rstrip()

    out = [line(headers), "  " + "  ".join("─" * w for w in widths)]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def _summary(results: Sequence[SquadResult]) -> str:
    return _table(["Tool", "Time", "Output", "Status"], summary_rows(results))


def truncate_output(output: str, max_len: int) -> str:
    """Trim, cut to ``max_len`` characters with a marker, and indent every line."""
    output = output.strip()
    if len(output) > max_len:
        output = output[:max_len] + "\n  ... (truncated)"
    return "\n".join(f"  {line}" for line in output.split("\n"))


def _excerpt(output: str) -> str:
    if len(output) > _JUDGE_EXCERPT:
        return output[:_JUDGE_EXCERPT] + "..."
    return output


def build_judge_prompt(task: str, results: Sequence[SquadResult]) -> str:
    """Build the prompt asking a judge to pick the best candidate.

    Raises ValueError when fewer than two results succeeded with output.
    """
    candidates = [
        f"=== Candidate {i} ({r.tool}, {r.duration:.1f}s) ===\n{_excerpt(r.output)}"
        for i, r in enumerate(results, start=1)
        if r.ok and r.output
    ]
    if len(candidates) < 2:
        raise ValueError("need at least 2 successful results for voting")
    joined = "\n\n".join(candidates)
    return (
        f'You are judging AI tool outputs. The task was: "{task}"\n\n'
        "Here are the candidates:\n\n"
        f"{joined}\n\n"
        "Pick the BEST response. Reply with ONLY:\n"
        '1. The candidate number (e.g., "Candidate 1")\n'
        "2. A brief reason why (1 sentence)\n"
        "3. Then paste the winning output"
    )


def build_merge_prompt(task: str, results: Sequence[SquadResult]) -> str:
    """Build the prompt asking a judge to synthesise all successful outputs.

    Raises ValueError when no result succeeded with output.
    """
    contributions = [
        f"=== From {r.tool} (tool {i}, {r.duration:.1f}s) ===\n{_excerpt(r.output)}"
        for i, r in enumerate(results, start=1)
        if r.ok and r.output
    ]
    if not contributions:
        raise ValueError("no successful results to merge")
    joined = "\n\n".join(contributions)
    return (
        "You are synthesizing outputs from multiple AI tools. "
        f'The original task was: "{task}"\n\n'
        "Here are the outputs from each tool:\n\n"
        f"{joined}\n\n"
        "Create the BEST possible response by merging the strengths of each tool's output.\n"
        "Take the best ideas, examples, and explanations from each, "
        "and produce a single high-quality result.\n"
        "Do not mention the tools or that this is a merge — just produce the best answer."
    )


def run_judge(
    judge: str,
    prompt: str,
    env: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Run the judge on ``prompt`` and return its output, or "" if it failed."""
    command = squad_command(judge, "ollama" if judge == "ollama" else judge, prompt)
    try:
        completed = subprocess.run(
            command,
            input=prompt.encode("utf-8"),
            stdout=subprocess.PIPE,
            env=dict(env) if env is not None else None,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError):
        return ""
    if completed.returncode != 0:
        return ""
    return completed.stdout.decode("utf-8", errors="replace")


def handle_race_mode(results: Sequence[SquadResult]) -> str:
    """Render the race report: summary table and the fastest successful output."""
    lines = ["  🏎️ Race mode — first successful result wins", "", _summary(results)]
    winner = race_winner(results)
    if winner is None:
        lines.append("\n  All tools failed")
        return "\n".join(lines)
    lines.append(f"\n  🏆 Winner: {winner.tool} ({winner.duration:.2f}s)")
    if winner.output:
        lines.extend(["", "  " + _RULE, truncate_output(winner.output, 2000)])
    return "\n".join(lines)


def handle_all_mode(results: Sequence[SquadResult], verbose: bool = False) -> str:
    """Render every tool's output side by side."""
    lines = ["  📋 All mode — showing all results", "", _summary(results), ""]
    limit = 5000 if verbose else 500
    for r in results:
        status = f" ({r.error})" if r.error else f" ({r.duration:.2f}s)"
        lines.append(f"  ━━━ {r.tool}{status} ━━━")
        if r.output:
            lines.append(truncate_output(r.output, limit))
        lines.append("")
    return "\n".join(lines)


def handle_vote_mode(
    results: Sequence[SquadResult],
    judge: str,
    task: str,
    env: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Ask the judge to pick the best result and render its verdict."""
    lines = ["  🗳️ Vote mode — judge picks the best", "", _summary(results)]
    try:
        prompt = build_judge_prompt(task, results)
    except ValueError:
        lines.append("\n  Need at least 2 successful results for voting")
        return "\n".join(lines)
    lines.append(f"\n  ⚖️ Sending to judge ({judge})...")
    verdict = run_judge(judge, prompt, env, timeout)
    if verdict:
        lines.extend(["", "  " + _RULE, "  ⚖️ Judge verdict:", "", truncate_output(verdict, 3000)])
    else:
        lines.append("  Judge failed to produce output")
    return "\n".join(lines)


def handle_merge_mode(
    results: Sequence[SquadResult],
    judge: str,
    task: str,
    env: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Ask the judge to merge all successful results and render the synthesis."""
    lines = ["  🔀 Merge mode — judge synthesizes all results", "", _summary(results)]
    try:
        prompt = build_merge_prompt(task, results)
    except ValueError:
        lines.append("\n  No successful results to merge")
        return "\n".join(lines)
    lines.append(f"\n  🔀 Synthesizing with {judge}...")
    merged = run_judge(judge, prompt, env, timeout)
    if merged:
        lines.extend(["", "  " + _RULE, "  🔀 Merged result:", "", truncate_output(merged, 5000)])
    else:
        lines.append("  Merge failed to produce output")
    return "\n".join(lines)