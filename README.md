# palmtools

A library of building blocks for keeping a local stack of AI coding tools in
order. It needs Python 3.11 or later and depends only on `tomli-w`.

## Modules

- `palmtools.config`: layered settings. `load()` starts from the defaults.
  It then overlays the global `config.toml` under `$XDG_CONFIG_HOME/palm`,
  falling back to `~/.config/palm`. Last it overlays the nearest `.palm.toml`
  found by walking up from the current directory. `save()`, `ensure_exists()`,
  `config_dir()` and `find_project_config()` complete the module.
- `palmtools.activity`: an append-only JSON-lines log, `activity.jsonl`, kept
  in the same directory. `log()` and `log_with_cost()` append entries.
  `read(count)` returns the newest entries first. `search(query, count)`
  matches action, tool or details regardless of case. `clear()` deletes the
  log.
- `palmtools.cache`: a package cache under `$XDG_CACHE_HOME/palm`, falling
  back to `~/.cache/palm`. How `fetch(backend, pkg)` works depends on the
  backend:
  - `pip`, `npm`, `docker` and `brew` call the matching command-line tool.
  - Any other backend only writes a `.fetch` marker file.

  `is_cached()` reports whether a package is in the cache. `bundle(output)`
  writes the whole cache as a `.tar.gz`. It raises `CacheError` if the cache
  directory does not exist.
- `palmtools.budget`: monthly, daily and per-tool limits in `budget.toml`.
  `get_status(sessions, now)` totals the `SpendRecord` items it is given.
  `check_budget(tool, sessions, now)` raises `BudgetExceeded` once a limit is
  reached.
- `palmtools.gpu`: GPU detection. `detect()` tries these tools:
  - `system_profiler` on macOS.
  - `nvidia-smi`, `rocm-smi` and `lspci` on Linux.
  - `nvidia-smi` and `wmic` on Windows.

  `has_gpu()` reports whether any GPU was found. `recommend_model(vram_mb)`
  suggests a local model for the given VRAM.
- `palmtools.rules`: `.palm-rules.md` is the single source of truth, with
  `.palm-context.md` as a fallback. The module provides these functions:
  - `sync_rules()` writes the source into each tool's file, such as
    `CLAUDE.md`, `AGENTS.md` or `.cursor/rules/palm.mdc`, with a header added.
  - `add_rule()` appends a list item to the source.
  - `check_rules()` compares modification times and returns one `RuleStatus`
    per tool: `MISSING`, `STALE` or `IN_SYNC`.
- `palmtools.shield`: safety checks. `status_checks()` looks for the
  following:
  - a git repository;
  - a `.gitignore` file;
  - secret files that `.gitignore` does not list;
  - a rules file;
  - source files over 100 KB.

  `scan_sensitive_files()` lists files whose names look like credentials or
  keys. `has_uncommitted_changes()` asks `git status`.
- `palmtools.team`: a shared `.palm-team.json` holding tools, rules and
  prompts. The functions are `init_team_config()`, `load_team_config()` and
  `save_team_config()`. `load_team_config()` searches upward from the start
  directory and raises `TeamConfigNotFound` if it finds nothing.
- `palmtools.workspace`: tools and keys pinned per project in the
  `[workspace]` section of `.palm.toml`. The functions are
  `init_workspace()`, `load_workspace()`, `load_workspace_from()` and
  `save_workspace()`. `load_workspace()` raises `WorkspaceNotFound` when no
  workspace file is found. `save_workspace()` writes only the `[workspace]`
  section.
- `palmtools.projects`: two helpers. `discover_projects(root)` finds
  subdirectories that contain a project marker such as `go.mod`,
  `package.json` or `.palm.toml`. `build_known_binaries(tools)` maps binary
  names to display names.
- `palmtools.worktree`: git worktrees. The functions are `list_worktrees()`,
  `add_worktree()`, `remove_worktree()` and `run_in_worktree()`. Failures
  raise `WorktreeError`.
- `palmtools.speedtest`: speed tests for installed LLM tools. The module
  provides these functions:
  - `detect_targets()` finds `ollama`, `aider`, `mods` and `llm` on `PATH`.
  - `run_speed_test()` and `run_benchmark()` time a single tool.
  - `render_results()` draws the scorecard and the grade, from A+ to F.
  - `format_bytes()` and `speed_grade()` are small helpers.

  Colours are turned off when `NO_COLOR` is set.
- `palmtools.squad`: runs one task through several `SquadTool`s in parallel
  with `run_squad()`. Four handlers render a report from the results:
  - `handle_race_mode()` shows the fastest successful answer.
  - `handle_all_mode()` shows every answer.
  - `handle_vote_mode()` asks a judge tool to pick the best answer.
  - `handle_merge_mode()` asks a judge tool to merge the answers.
- `palmtools.formatting`: `format_duration()` and `render_bar()`.

## Examples

```python
from palmtools import config, rules, budget, speedtest, squad

cfg = config.load()
cfg.parallel.concurrency = 8
config.save(cfg)

rules.add_rule("Prefer small, focused functions")
rules.sync_rules(["claude-code", "cursor"])
for tool, status in rules.check_rules().items():
    print(tool, status.value)

limits = budget.load()
limits.monthly_limit = 50.0
budget.save(limits)

print(speedtest.format_bytes(1536))  # "1.5KB"
print(speedtest.speed_grade(120.0))  # "A+"
print(squad.truncate_output("a long answer " * 200, 100))
```

## What it does not do

- **No command-line program.** The package installs no command, and every
  report is returned as a string or as data.
- **No tool registry, secret vault or session store.** The caller supplies
  the following:
  - tool names and binaries for `squad` and `speedtest`;
  - `(name, display_name, verify_command)` tuples for `build_known_binaries()`;
  - secrets for `squad.build_vault_env()`;
  - spend records for `budget`.
- **No tool installation.** Nothing installs or updates the tools.

## Tests

Install the `test` extra and run `pytest`.