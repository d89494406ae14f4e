"""Application state and configuration."""

from __future__ import annotations

import os
import re
from functools import reduce
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from streampatch.core.base import BaseConfig
from streampatch.core.log import Logger
from streampatch.core.yaml_settings import YamlWithIncludesSettingsSource
from streampatch.stream.skip import SkipRule

# Modules available for template substitution in YAML files
# Usage: {platformdirs.user_log_dir}, {os.getcwd}, {Path.cwd}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}

# Sections holding regular expressions, never template-substituted
TEMPLATE_EXEMPT = {'patch'}


class PatchConfig(BaseConfig):
    """Pattern and rebuild defaults."""

    pattern: str | None = Field(
        default=None,
        description=(
            "Regular expression whose matches are cut out of the input "
            "as patches (e.g. '<[^>]+>' for markup tags)"
        ),
    )
    flags: list[str] = Field(
        default_factory=list,
        description=(
            "Names of re flags used to compile the pattern "
            "(e.g. IGNORECASE, MULTILINE, DOTALL)"
        ),
    )
    skip: str = Field(
        default="none",
        description=(
            "Default skip rule for boundary patches: "
            "'none', 'left', 'right', or 'both'"
        ),
    )
    strict: bool = Field(
        default=False,
        description=(
            "Fail instead of treating a malformed pattern as "
            "matching nothing"
        ),
    )

    @field_validator('flags')
    @classmethod
    def _known_flags(cls, value: list[str]) -> list[str]:
        names = [name.upper() for name in value]
        unknown = [name for name in names if name not in re.RegexFlag.__members__]
        if unknown:
            raise ValueError(f"Unknown re flags: {', '.join(unknown)}")
        return names

    @field_validator('skip')
    @classmethod
    def _known_skip(cls, value: str) -> str:
        return SkipRule.parse(value).name

    def re_flags(self) -> int:
        """Combine the configured flag names into an re flags value."""
        return reduce(
            lambda acc, name: acc | re.RegexFlag[name], self.flags, 0
        )

    def skip_rule(self) -> SkipRule:
        return SkipRule.parse(self.skip)


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    patch: PatchConfig = Field(
        default_factory=PatchConfig,
        description="Pattern and rebuild settings"
    )
    log_level: str = Field(
        default="warn",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "streampatch"
        ),
        description=(
            "Root directory for all log files "
            "(supports {platformdirs.*} templates)"
        ),
    )
    run_name: str = Field(
        default="cli",
        description="Name of this run, used in log paths",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger singleton after config loads."""
        from streampatch.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        self.logger = setup_logger(
            log_root=self.log_root,
            run_name=self.run_name,
            level=self.logger.level,
            console=self.logger.console,
            file=self.logger.file,
        )
        return self


class State(BaseSettings):
    """Complete application state, loaded from YAML/env/CLI.

    Sources, highest priority first: init arguments, YAML files (with
    include support), .env, environment variables
    (STREAMPATCH_CONFIG__PATCH__PATTERN=...), file secrets.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="streampatch.yaml",
        env_file=".env",
        env_prefix="STREAMPATCH_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Substitute {module.attr} and {config.*} templates in string
        and Path fields, recursively.

        The patch section is left alone: its braces belong to regular
        expressions.
        """
        self._substitute_recursive(self.config)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                if field_name in TEMPLATE_EXEMPT:
                    continue
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i in range(len(obj)):
                obj[i] = self._substitute_value(obj[i])

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, Path):
            return Path(self._substitute_string(str(value)))
        elif isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
        return value

    def _substitute_string(self, value: str) -> str:
        """Replace {field.path} templates with actual field values.

        Examples:
            "{platformdirs.user_log_dir}/streampatch"
            → "~/.local/state/streampatch/log/streampatch"
            "{config.run_name}.log" → "cli.log"

        Unresolvable references are left unchanged.
        """
        def replace_template(match):
            parts = match.group(1).split(".")

            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)

                if callable(obj):
                    if getattr(obj, '__module__', '') == 'platformdirs':
                        obj = obj('streampatch', appauthor=False)
                    else:
                        obj = obj()

                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([A-Za-z._]+)\}', replace_template, value)


__all__ = ["State", "Config", "PatchConfig"]
