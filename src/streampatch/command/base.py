"""Options and input handling shared by all subcommands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from streampatch.core.log import logger
from streampatch.errors import InvalidArgumentError
from streampatch.stream.patched import Patched
from streampatch.stream.skip import SkipRule

if TYPE_CHECKING:
    from streampatch.core.config import State

# Exit codes
EXIT_OK = 0
EXIT_INVALID = 1
EXIT_PATTERN = 2


class StreamCommand(BaseModel):
    """Base for subcommands that read an input stream."""

    model_config = ConfigDict(populate_by_name=True)

    input: Path | None = Field(
        default=None,
        description="File to read the raw stream from (default: stdin)",
    )
    pattern: str | None = Field(
        default=None,
        description="Regular expression for patches (overrides config)",
    )

    def read_input(self) -> str:
        """Read the raw stream from --input or stdin.

        Raises:
            InvalidArgumentError: If the input file cannot be read
                or is not UTF-8
        """
        if self.input is None:
            return sys.stdin.read()
        try:
            return self.input.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidArgumentError(
                f"Cannot read input {self.input}: {e}"
            ) from e

    def load(self, state: State) -> Patched:
        """Split the input stream using the configured pattern.

        Raises:
            InvalidArgumentError: If no pattern is configured
        """
        settings = state.config.patch
        pattern = self.pattern if self.pattern is not None else settings.pattern
        if pattern is None:
            raise InvalidArgumentError(
                "No pattern given; use --pattern or config.patch.pattern"
            )

        with logger.span("Extracting patches", pattern=pattern):
            return Patched(pattern, self.read_input(), settings.re_flags())

    def skip_rule(self, state: State, skip: str | None) -> SkipRule:
        if skip is None:
            return state.config.patch.skip_rule()
        return SkipRule.parse(skip)

    def pattern_failed(self, state: State, patched: Patched) -> bool:
        """Report a malformed pattern; True if it should stop the run."""
        if patched.pattern_error is None or not state.config.patch.strict:
            return False
        logger.error("Malformed pattern", error=patched.pattern_error)
        print(f"error: malformed pattern: {patched.pattern_error}", file=sys.stderr)
        return True
