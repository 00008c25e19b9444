import os
from pathlib import Path

from palmtools import config


def test_default():
    cfg = config.default()
    assert cfg.ui.emoji is True
    assert cfg.ui.color is True
    assert cfg.install.prefer_uv is True
    assert cfg.stats.enabled is False
    assert cfg.vault.backend == "auto"
    assert cfg.parallel.enabled is True
    assert cfg.parallel.concurrency == 4


def test_config_dir(monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", "/tmp/test-xdg")
    assert config.config_dir() == os.path.join("/tmp/test-xdg", "palm")

    monkeypatch.setenv("XDG_CONFIG_HOME", "")
    expected = os.path.join(str(Path.home()), ".config", "palm")
    assert config.config_dir() == expected


def test_save_and_load(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    cfg = config.default()
    cfg.parallel.concurrency = 8
    cfg.install.prefer_uv = False
    config.save(cfg)

    loaded = config.load()
    assert loaded.parallel.concurrency == 8
    assert loaded.install.prefer_uv is False


def test_ensure_exists(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    config.ensure_exists()
    path = tmp_path / "palm" / "config.toml"
    assert path.exists()
    assert config.load() == config.default()

    path.write_text("[parallel]\nconcurrency = 2\n")
    config.ensure_exists()
    assert path.read_text() == "[parallel]\nconcurrency = 2\n"
    assert config.load().parallel.concurrency == 2


def test_setup_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    cfg = config.default()
    assert cfg.setup.complete is False
    assert cfg.setup.preset == ""

    cfg.setup.complete = True
    cfg.setup.preset = "essentials"
    config.save(cfg)

    loaded = config.load()
    assert loaded.setup.complete is True
    assert loaded.setup.preset == "essentials"


def test_find_project_config(tmp_path, monkeypatch):
    sub = tmp_path / "a" / "b" / "c"
    sub.mkdir(parents=True)
    (tmp_path / ".palm.toml").write_text("[install]\nprefer_uv = false\n")
    monkeypatch.chdir(sub)

    found = config.find_project_config()
    assert found is not None
    assert os.path.realpath(found) == os.path.realpath(tmp_path / ".palm.toml")


def test_load_overlays_project_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".palm.toml").write_text(
        "[workspace]\nname = \"demo\"\n\n[install]\nprefer_uv = false\n"
    )
    monkeypatch.chdir(project)

    loaded = config.load()
    assert loaded.install.prefer_uv is False
    assert loaded.parallel.concurrency == 4


def test_merge_ignores_mistyped_values():
    cfg = config.default()
    cfg.merge({"parallel": {"concurrency": "many", "enabled": False}, "other": {"x": 1}})
    assert cfg.parallel.concurrency == 4
    assert cfg.parallel.enabled is False


def test_to_dict_round_trip():
    cfg = config.default()
    cfg.hooks.pre_run = "echo hi"
    restored = config.default().merge(cfg.to_dict())
    assert restored == cfg