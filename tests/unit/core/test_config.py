"""Tests for configuration models and settings loading."""

import re

import pytest
from pydantic import ValidationError

from streampatch.core.config import PatchConfig, State
from streampatch.stream.skip import SkipRule


def test_patch_config_defaults():
    config = PatchConfig()

    assert config.pattern is None
    assert config.re_flags() == 0
    assert config.skip_rule() == SkipRule.NONE
    assert config.strict is False


def test_flag_names_combined():
    config = PatchConfig(flags=["ignorecase", "MULTILINE"])

    assert config.flags == ["IGNORECASE", "MULTILINE"]
    assert config.re_flags() == re.IGNORECASE | re.MULTILINE


def test_unknown_flag_rejected():
    with pytest.raises(ValidationError, match="NOPE"):
        PatchConfig(flags=["nope"])


def test_skip_normalized():
    assert PatchConfig(skip="LEFT|right").skip == "both"
    assert PatchConfig(skip="right").skip_rule() == SkipRule.RIGHT


def test_unknown_skip_rejected():
    with pytest.raises(ValidationError):
        PatchConfig(skip="sideways")


def test_state_loads_package_defaults(isolated_cwd):
    state = State()

    assert state.config.patch.skip == "none"
    assert state.config.run_name == "cli"
    assert state.config.logger is not None
    # Warnings such as malformed patterns reach stderr by default
    assert state.config.logger.console.enabled is True
    assert state.config.logger.console.level == "warn"


def test_project_config_file(isolated_cwd):
    (isolated_cwd / "streampatch.yaml").write_text(
        "config:\n"
        "  patch:\n"
        "    pattern: '<[^>]+>'\n"
        "    skip: left\n"
    )
    state = State()

    assert state.config.patch.pattern == "<[^>]+>"
    assert state.config.patch.skip_rule() == SkipRule.LEFT
    # Defaults not mentioned in the project file survive the merge
    assert state.config.patch.strict is False


def test_environment_override(isolated_cwd, monkeypatch):
    monkeypatch.setenv("STREAMPATCH_CONFIG__PATCH__PATTERN", r"\{/?b\}")
    state = State()

    assert state.config.patch.pattern == r"\{/?b\}"


def test_init_arguments_win(isolated_cwd):
    state = State(config={"patch": {"pattern": "x+", "strict": True}})

    assert state.config.patch.pattern == "x+"
    assert state.config.patch.strict is True


def test_platformdirs_template_substituted(isolated_cwd):
    state = State(config={"log_root": "{platformdirs.user_state_dir}/logs"})

    assert "{" not in str(state.config.log_root)
    assert "streampatch" in str(state.config.log_root)


def test_pattern_braces_not_substituted(isolated_cwd):
    state = State(config={"patch": {"pattern": "{run_name}"}, "run_name": "x"})

    assert state.config.patch.pattern == "{run_name}"


def test_config_reference_substituted(isolated_cwd, tmp_path):
    state = State(config={
        "run_name": "nightly",
        "log_root": str(tmp_path / "{config.run_name}"),
    })

    assert state.config.log_root == tmp_path / "nightly"
