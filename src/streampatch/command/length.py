"""Length command - prints the patched length of a stream suffix."""

import sys

from pydantic import Field

from streampatch.command.base import EXIT_INVALID, EXIT_OK, EXIT_PATTERN, StreamCommand
from streampatch.core.log import logger
from streampatch.errors import StreamPatchError
from streampatch.stream.address import Relative


class LengthCommand(StreamCommand):
    """Print the length of the stream from a start offset to the end,
    counting the patches a build would restore."""

    from_: int = Field(
        default=0,
        alias="from",
        description="Start offset in the clean stream",
    )
    patch: int | None = Field(
        default=None,
        description="Start at the position of this patch index instead",
    )
    skip: str | None = Field(
        default=None,
        description="Boundary patches to skip: none, left, right, both",
    )

    def run(self, state) -> int:
        try:
            patched = self.load(state)
            if self.pattern_failed(state, patched):
                return EXIT_PATTERN
            start = self.from_ if self.patch is None else Relative(self.patch)
            result = patched.length(start, self.skip_rule(state, self.skip))
        except StreamPatchError as e:
            logger.error("Length failed", error=str(e))
            print(f"error: {e}", file=sys.stderr)
            return EXIT_INVALID

        print(result)
        return EXIT_OK
