#!/usr/bin/env python3
"""streampatch CLI - separate regex-matched patches from a text stream."""

import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from streampatch.command.build import BuildCommand
from streampatch.command.extract import ExtractCommand
from streampatch.command.length import LengthCommand
from streampatch.core.config import State
from streampatch.core.log import logger


class CliState(State):
    """Split text into a clean stream and the pattern matches cut
    out of it, then rebuild any part of it with the matches restored.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.patch.pattern value)
    2. streampatch.yaml in the current directory, plus --include files
    3. .env file
    4. Environment variables
       (STREAMPATCH_CONFIG__PATCH__PATTERN=value)
    """

    extract: CliSubCommand[ExtractCommand]
    build: CliSubCommand[BuildCommand]
    length: CliSubCommand[LengthCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            exit_code = subcommand.run(self)
        raise SystemExit(exit_code)


def main(argv: list[str] | None = None):
    """Main entry point for CLI."""
    CliApp.run(CliState, cli_args=argv)


if __name__ == "__main__":
    main()
