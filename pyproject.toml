[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "palmtools"
version = "1.5.1"
description = "Helpers for managing a local AI tool stack: config, activity log, cache, rules, workspaces, budgets, GPU detection, worktrees, speed tests and multi-tool squads"
requires-python = ">=3.11"
dependencies = [
    "tomli-w",
]
keywords = [
    "ai",
    "llm",
    "developer-tools",
    "workspace",
    "budget",
    "benchmark",
    "git-worktree",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["palmtools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
