import pytest

from palmtools.workspace import (
    WORKSPACE_FILE,
    WorkspaceConfig,
    WorkspaceNotFound,
    find_workspace,
    init_content,
    init_workspace,
    load_workspace,
    load_workspace_from,
    save_workspace,
)


def test_init_content_quotes_name_and_sets_concurrency():
    text = init_content("demo")
    assert 'name = "demo"' in text
    assert "[workspace]" in text
    assert "concurrency = 4" in text


def test_init_workspace_then_load(tmp_path):
    project = tmp_path / "myproj"
    project.mkdir()
    path = init_workspace(project)
    assert path.name == WORKSPACE_FILE
    ws, found = load_workspace(project)
    assert found == path
    assert ws.name == "myproj"
    assert ws.tools == []
    assert ws.keys == []


def test_init_workspace_refuses_existing(tmp_path):
    init_workspace(tmp_path)
    with pytest.raises(FileExistsError):
        init_workspace(tmp_path)


def test_find_workspace_walks_up(tmp_path):
    (tmp_path / WORKSPACE_FILE).write_text("[workspace]\nname = \"x\"\n")
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    assert find_workspace(deep) == (tmp_path / WORKSPACE_FILE).absolute()


def test_find_workspace_defaults_to_cwd(tmp_path, monkeypatch):
    (tmp_path / WORKSPACE_FILE).write_text("")
    monkeypatch.chdir(tmp_path)
    assert find_workspace().resolve() == (tmp_path / WORKSPACE_FILE).resolve()


def test_load_workspace_missing_raises(tmp_path, monkeypatch):
    monkeypatch.setattr("pathlib.Path.parents", property(lambda self: ()))
    with pytest.raises(WorkspaceNotFound):
        load_workspace(tmp_path)


def test_load_workspace_unparseable_raises(tmp_path):
    (tmp_path / WORKSPACE_FILE).write_text("not = [valid")
    with pytest.raises(WorkspaceNotFound):
        load_workspace(tmp_path)


def test_load_workspace_from_bad_types_returns_none(tmp_path):
    path = tmp_path / WORKSPACE_FILE
    path.write_text("[workspace]\ntools = \"aider\"\n")
    assert load_workspace_from(path) is None


def test_load_workspace_from_missing_file_returns_none(tmp_path):
    assert load_workspace_from(tmp_path / "absent.toml") is None


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / WORKSPACE_FILE
    ws = WorkspaceConfig(name="team", tools=["aider", "codex"], keys=["OPENAI_API_KEY"])
    save_workspace(ws, path)
    assert load_workspace_from(path) == ws


def test_add_tool_collects_keys_without_duplicates():
    ws = WorkspaceConfig(name="w")
    assert ws.add_tool("aider", ["OPENAI_API_KEY"])
    assert ws.add_tool("codex", ["OPENAI_API_KEY", "OTHER_KEY"])
    assert not ws.add_tool("aider", ["THIRD_KEY"])
    assert ws.tools == ["aider", "codex"]
    assert ws.keys == ["OPENAI_API_KEY", "OTHER_KEY"]


def test_remove_tool():
    ws = WorkspaceConfig(name="w", tools=["aider", "codex"])
    assert ws.remove_tool("aider")
    assert ws.tools == ["codex"]
    assert not ws.remove_tool("aider")
    assert ws.tools == ["codex"]