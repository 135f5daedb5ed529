"""Tests for layered YAML configuration with include: directives."""

import pytest

from patchmerge.core.config import State
from patchmerge.core.yaml_settings import YamlWithIncludesSettingsSource


@pytest.fixture
def source(tmp_path, monkeypatch):
    """Settings source isolated from any ./patchmerge.yaml."""
    monkeypatch.chdir(tmp_path)
    return YamlWithIncludesSettingsSource(State)


def test_package_defaults_are_loaded(source):
    data = source._read_files(None)

    assert data["config"]["engine"]["acceptance_confidence"] == 0.7
    assert data["config"]["providers"] == []
    assert "system" in data["config"]["prompts"]


def test_project_file_overrides_defaults(source, tmp_path):
    (tmp_path / "patchmerge.yaml").write_text(
        "config:\n"
        "  engine:\n"
        "    acceptance_confidence: 0.9\n"
    )

    data = source._read_files(None)

    assert data["config"]["engine"]["acceptance_confidence"] == 0.9
    # Siblings survive the deep merge
    assert data["config"]["engine"]["similarity_threshold"] == 0.8


def test_include_directive_is_merged_underneath(source, tmp_path):
    (tmp_path / "providers.yaml").write_text(
        "config:\n"
        "  run_name: from-include\n"
        "  providers:\n"
        "    - name: alpha\n"
        "      endpoint: https://alpha.example.com/v1\n"
        "      credential: sk-alpha\n"
        "      model: alpha-chat\n"
    )
    main = tmp_path / "main.yaml"
    main.write_text(
        "include: providers.yaml\n"
        "config:\n"
        "  run_name: from-main\n"
    )

    data = source._read_files(str(main))

    assert data["config"]["run_name"] == "from-main"
    assert data["config"]["providers"][0]["name"] == "alpha"
    assert "include" not in data


def test_circular_include_is_rejected(source, tmp_path):
    (tmp_path / "a.yaml").write_text("include: b.yaml\n")
    (tmp_path / "b.yaml").write_text("include: a.yaml\n")

    with pytest.raises(ValueError, match="Circular include"):
        source._read_files(str(tmp_path / "a.yaml"))


def test_deep_merge_replaces_lists_and_scalars(source):
    base = {"config": {"providers": [{"name": "a"}], "engine": {"x": 1, "y": 2}}}
    override = {"config": {"providers": [], "engine": {"x": 9}}}

    result = source._deep_merge(base, override)

    assert result == {"config": {"providers": [], "engine": {"x": 9, "y": 2}}}
    assert base["config"]["engine"]["x"] == 1


def test_cli_include_is_merged_last(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "patchmerge.yaml").write_text("config:\n  run_name: project\n")
    override = tmp_path / "override.yaml"
    override.write_text("config:\n  run_name: override\n")
    monkeypatch.setattr(
        "sys.argv", ["patchmerge", "--include", str(override), "analyze"]
    )

    data = YamlWithIncludesSettingsSource(State)()

    assert data["config"]["run_name"] == "override"
