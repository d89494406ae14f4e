"""CLI command modules for streampatch."""

from streampatch.command.build import BuildCommand
from streampatch.command.extract import ExtractCommand
from streampatch.command.length import LengthCommand

__all__ = ["BuildCommand", "ExtractCommand", "LengthCommand"]
