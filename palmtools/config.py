"""Global and project-level configuration stored as TOML."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w

PROJECT_FILE = ".palm.toml"


@dataclass
class UIConfig:
    """Display options."""

    emoji: bool = True
    color: bool = True


@dataclass
class StatsConfig:
    """Usage tracking options."""

    enabled: bool = False


@dataclass
class InstallConfig:
    """Installation behaviour."""

    prefer_uv: bool = True
    cleanup_after: bool = False


@dataclass
class KeysConfig:
    """API key behaviour."""

    auto_export: bool = False


@dataclass
class VaultConfig:
    """Vault backend selection: "auto", "keychain" or "file"."""

    backend: str = "auto"


@dataclass
class ParallelConfig:
    """Concurrent execution settings."""

    enabled: bool = True
    concurrency: int = 4


@dataclass
class HooksConfig:
    """Lifecycle hook scripts."""

    pre_install: str = ""
    post_install: str = ""
    pre_run: str = ""
    post_run: str = ""
    pre_update: str = ""
    post_update: str = ""


@dataclass
class SetupConfig:
    """State of the setup wizard."""

    complete: bool = False
    preset: str = ""


@dataclass
class Config:
    """The full configuration, one attribute per TOML section."""

    ui: UIConfig = field(default_factory=UIConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    setup: SetupConfig = field(default_factory=SetupConfig)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as nested dictionaries keyed like the TOML file."""
        return asdict(self)

    def merge(self, data: dict[str, Any]) -> "Config":
        """Overlay values from a parsed TOML document; unknown or mistyped keys are ignored."""
        for section_field in fields(self):
            section = data.get(section_field.name)
            if not isinstance(section, dict):
                continue
            target = getattr(self, section_field.name)
            for value_field in fields(target):
                if value_field.name not in section:
                    continue
                value = section[value_field.name]
                if type(value) is type(getattr(target, value_field.name)):
                    setattr(target, value_field.name, value)
        return self


def default() -> Config:
    """Return the default configuration."""
    return Config()


def config_dir() -> str:
    """Return the palm configuration directory."""
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = os.path.join(str(Path.home()), ".config")
    return os.path.join(base, "palm")


def config_path() -> str:
    """Return the path of the global config file."""
    return os.path.join(config_dir(), "config.toml")


def find_project_config() -> str | None:
    """Walk up from the current directory looking for a project config file."""
    try:
        directory = Path.cwd()
    except OSError:
        return None
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / PROJECT_FILE
        if candidate.exists():
            return str(candidate)
    return None


def _read_toml(path: str) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return None


def load() -> Config:
    """Load the global config, then overlay the nearest project-level config."""
    cfg = default()
    global_data = _read_toml(config_path())
    if global_data is not None:
        cfg.merge(global_data)
    project_path = find_project_config()
    if project_path is not None:
        project_data = _read_toml(project_path)
        if project_data is not None:
            cfg.merge(project_data)
    return cfg


def save(cfg: Config) -> None:
    """Write the configuration to the global config file."""
    path = config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as handle:
        tomli_w.dump(cfg.to_dict(), handle)


def ensure_exists() -> None:
    """Create the config file with defaults if it does not exist yet."""
    if os.path.exists(config_path()):
        return
    save(default())