"""Tests for YAML loading, include: directives and --include."""

import sys
from pathlib import Path

import pytest

from postcheck.core.config import State
from postcheck.core.yaml_settings import (
    YamlWithIncludesSettingsSource,
    cli_includes,
)


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def plain_argv(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["postcheck"])


def load(path):
    return YamlWithIncludesSettingsSource(State, yaml_file=str(path))()


def test_package_defaults_always_load(fixtures_dir):
    """Package defaults supply every check command."""
    data = load(fixtures_dir / "minimal.yaml")

    commands = data["config"]["check"]["commands"]
    assert commands["install"] == ["npm", "install", "--ignore-scripts"]
    assert commands["typecheck"] == ["npx", "tsc", "--noEmit"]
    assert data["config"]["check"]["timeout"] == 45


def test_yaml_include_directive(fixtures_dir):
    """Included file is merged; the including file wins on conflicts."""
    data = load(fixtures_dir / "with_include.yaml")

    check = data["config"]["check"]
    assert check["commands"]["install"] == ["yarn", "install", "--frozen-lockfile"]
    assert check["commands"]["test"] == ["npm", "test"]
    assert check["timeout"] == 60


def test_nested_includes(fixtures_dir):
    data = load(fixtures_dir / "nested_include.yaml")

    check = data["config"]["check"]
    assert check["commands"]["install"][0] == "yarn"
    assert check["timeout"] == 90
    assert check["exclude_dirs"] == ["node_modules", "out"]


def test_circular_include_rejected(fixtures_dir):
    with pytest.raises(ValueError, match="Circular include"):
        load(fixtures_dir / "circular_a.yaml")


def test_include_with_relative_path(tmp_path):
    """Include paths resolve relative to the including file."""
    subdir = tmp_path / "subdir"
    subdir.mkdir()
    (subdir / "timeouts.yaml").write_text("config:\n  check:\n    timeout: 7\n")
    main = tmp_path / "main.yaml"
    main.write_text("include: subdir/timeouts.yaml\n")

    assert load(main)["config"]["check"]["timeout"] == 7


def test_cli_include_overrides_base(fixtures_dir, monkeypatch):
    """--include files load after the base file."""
    monkeypatch.setattr(sys, "argv", [
        "postcheck", "--include", str(fixtures_dir / "override_timeout.yaml"),
    ])

    assert load(fixtures_dir / "minimal.yaml")["config"]["check"]["timeout"] == 99


def test_cli_includes_parsing():
    argv = ["postcheck", "--include", "a.yaml", "verify", "--include=b.yaml"]
    assert cli_includes(argv) == ["a.yaml", "b.yaml"]
    assert cli_includes(["postcheck", "--include"]) == []
