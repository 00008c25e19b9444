from palmtools.projects import build_known_binaries, discover_projects


def _make(tmp_path, name, *files, content=""):
    directory = tmp_path / name
    directory.mkdir()
    for filename in files:
        (directory / filename).write_text(content)
    return directory


def test_discover_projects_markers_and_order(tmp_path):
    _make(tmp_path, "beta", "package.json", "requirements.txt")
    _make(tmp_path, "alpha", "go.mod")
    _make(tmp_path, ".hidden", "go.mod")
    _make(tmp_path, "empty")
    (tmp_path / "file.txt").write_text("x")

    projects = discover_projects(tmp_path)
    assert [p.name for p in projects] == ["alpha", "beta"]
    assert projects[0].marker == "Go"
    assert projects[1].marker == "Node.js"
    assert projects[0].path == str(tmp_path / "alpha")
    assert all(not p.has_palm_toml for p in projects)


def test_discover_projects_reads_workspace_tools(tmp_path):
    directory = _make(tmp_path, "ws")
    (directory / ".palm.toml").write_text('[workspace]\nname = "ws"\ntools = ["aider", "codex"]\n')
    (directory / "Cargo.toml").write_text("")

    [project] = discover_projects(tmp_path)
    assert project.has_palm_toml
    assert project.tools == ["aider", "codex"]
    assert project.marker == "Rust"


def test_discover_projects_workspace_only(tmp_path):
    directory = _make(tmp_path, "only")
    (directory / ".palm.toml").write_text("")
    [project] = discover_projects(tmp_path)
    assert project.has_palm_toml
    assert project.marker == ""
    assert project.tools == []


def test_discover_projects_missing_root(tmp_path):
    assert discover_projects(tmp_path / "nope") == []


def test_build_known_binaries_interpreters():
    known = build_known_binaries(
        [
            ("aider-chat", "Aider Chat", "python3 -m aider --version"),
            ("script", "Script", "node cli.js"),
            ("plain", "", "plaintool --version"),
            ("skipped", "Skipped", ""),
        ]
    )
    assert known["aider"] == "Aider Chat"
    assert known["cli.js"] == "Script"
    assert known["plaintool"] == "plain"
    assert "skipped" not in known


def test_build_known_binaries_extras_do_not_override():
    known = build_known_binaries([("ollama", "Ollama Local", "ollama --version")])
    assert known["ollama"] == "Ollama Local"
    assert known["claude"] == "Claude Code"
    assert known["interpreter"] == "Open Interpreter"


def test_build_known_binaries_empty_registry_has_extras():
    known = build_known_binaries([])
    assert known["aider"] == "Aider"
    assert known["llama-server"] == "Llama.cpp"
    assert len(known) == 21