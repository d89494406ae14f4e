"""Tests for YAML include: directive and --include CLI argument."""

import sys
from pathlib import Path

import pytest

from streampatch.core.config import State
from streampatch.core.yaml_settings import YamlWithIncludesSettingsSource


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def mock_argv():
    """Save and restore sys.argv."""
    original = sys.argv.copy()
    yield
    sys.argv = original


def test_minimal_config_loads(fixtures_dir, isolated_cwd):
    source = YamlWithIncludesSettingsSource(
        State, yaml_file=str(fixtures_dir / "minimal.yaml")
    )
    data = source()

    assert data["config"]["patch"]["pattern"] == "<[^>]+>"
    # Package defaults are merged underneath
    assert data["config"]["patch"]["skip"] == "none"


def test_yaml_include_directive(fixtures_dir, isolated_cwd):
    """Included file is merged underneath the including file."""
    source = YamlWithIncludesSettingsSource(
        State, yaml_file=str(fixtures_dir / "with_include.yaml")
    )
    data = source()

    assert data["config"]["patch"]["pattern"] == r"\{/?b\}"
    assert data["config"]["patch"]["flags"] == ["IGNORECASE"]
    assert data["config"]["patch"]["skip"] == "left"
    assert "include" not in data


def test_nested_includes(fixtures_dir, isolated_cwd):
    source = YamlWithIncludesSettingsSource(
        State, yaml_file=str(fixtures_dir / "nested_include.yaml")
    )
    data = source()

    assert data["config"]["run_name"] == "nested"
    assert data["config"]["patch"]["flags"] == ["IGNORECASE"]


def test_include_with_relative_path(fixtures_dir, tmp_path, isolated_cwd):
    subdir = tmp_path / "subdir"
    subdir.mkdir()
    config_file = subdir / "config.yaml"
    config_file.write_text(
        f"include: {fixtures_dir / 'extra_patch.yaml'}\n"
        "config:\n"
        "  patch:\n"
        "    pattern: abc\n"
    )
    (subdir / "local.yaml").write_text("config:\n  run_name: local\n")
    (subdir / "outer.yaml").write_text("include: local.yaml\n")

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(config_file))()
    assert data["config"]["patch"]["skip"] == "right"
    assert data["config"]["patch"]["pattern"] == "abc"

    data = YamlWithIncludesSettingsSource(
        State, yaml_file=str(subdir / "outer.yaml")
    )()
    assert data["config"]["run_name"] == "local"


def test_circular_include_detected(fixtures_dir, isolated_cwd):
    with pytest.raises(ValueError, match="Circular include"):
        YamlWithIncludesSettingsSource(
            State, yaml_file=str(fixtures_dir / "circular_a.yaml")
        )


def test_cli_include_overrides(fixtures_dir, isolated_cwd, mock_argv):
    sys.argv = [
        "streampatch",
        "--include",
        str(fixtures_dir / "extra_patch.yaml"),
    ]
    source = YamlWithIncludesSettingsSource(
        State, yaml_file=str(fixtures_dir / "minimal.yaml")
    )
    data = source()

    assert data["config"]["patch"]["pattern"] == "<[^>]+>"
    assert data["config"]["patch"]["skip"] == "right"


def test_state_from_included_files(fixtures_dir, isolated_cwd):
    (isolated_cwd / "streampatch.yaml").write_text(
        f"include: {fixtures_dir / 'with_include.yaml'}\n"
    )
    state = State()

    assert state.config.patch.pattern == r"\{/?b\}"
    assert state.config.patch.skip == "left"
    assert state.config.patch.re_flags() != 0
