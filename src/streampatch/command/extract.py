"""Extract command - prints the clean stream and its patches."""

import sys

import yaml
from pydantic import Field

from streampatch.command.base import EXIT_INVALID, EXIT_OK, EXIT_PATTERN, StreamCommand
from streampatch.core.log import logger
from streampatch.errors import StreamPatchError
from streampatch import strings


class ExtractCommand(StreamCommand):
    """Split the input into a clean stream and patches, printed as YAML."""

    hexdump: bool = Field(
        default=False,
        description="Show patch sequences as escaped hex bytes",
    )

    def run(self, state) -> int:
        try:
            patched = self.load(state)
        except StreamPatchError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_INVALID
        if self.pattern_failed(state, patched):
            return EXIT_PATTERN

        document = {
            "clean_stream": patched.clean_stream,
            "patches": [
                {
                    "position": patch.position,
                    "sequence": (
                        strings.hexdump(patch.sequence) if self.hexdump
                        else patch.sequence
                    ),
                    "length": patch.length,
                }
                for patch in patched.patches
            ],
        }
        yaml.safe_dump(
            document, sys.stdout, sort_keys=False, allow_unicode=True
        )
        logger.info(
            "Extract complete",
            patches=len(patched.patches),
            removed=patched.patches.total_length(),
        )
        return EXIT_OK
