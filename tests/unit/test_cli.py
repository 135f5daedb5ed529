"""Tests for the command-line entry point."""

import pytest
from pydantic_settings import CliApp

from patchmerge.cli import CliState
from patchmerge.command.base import EXIT_OK, EXIT_UNRESOLVED, EXIT_USAGE


@pytest.fixture
def versions(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("sys.argv", ["patchmerge"])
    for name, text in (
        ("ancestor", "x = 1"),
        ("incoming", "x = 2"),
        ("current", "x = 3"),
    ):
        (tmp_path / f"{name}.txt").write_text(text)
    return [
        "--ancestor", str(tmp_path / "ancestor.txt"),
        "--incoming", str(tmp_path / "incoming.txt"),
        "--current", str(tmp_path / "current.txt"),
    ]


def _exit_code(args):
    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(CliState, cli_args=args)
    return excinfo.value.code


def test_analyze_exits_ok(versions):
    assert _exit_code(["analyze", *versions]) == EXIT_OK


def test_auto_resolve_of_context_conflict_exits_unresolved(versions):
    assert _exit_code(["auto-resolve", *versions]) == EXIT_UNRESOLVED


def test_unreadable_input_exits_with_usage_error(versions, tmp_path):
    args = ["analyze", *versions]
    args[args.index("--current") + 1] = str(tmp_path / "missing.txt")

    assert _exit_code(args) == EXIT_USAGE
