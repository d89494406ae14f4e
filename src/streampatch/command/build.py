"""Build command - rebuilds a range of the stream with its patches."""

import sys

from pydantic import Field

from streampatch.command.base import EXIT_INVALID, EXIT_OK, EXIT_PATTERN, StreamCommand
from streampatch.core.log import logger
from streampatch.errors import InvalidArgumentError, StreamPatchError
from streampatch.stream.address import Absolute, Delta, Relative, Span


class BuildCommand(StreamCommand):
    """Rebuild part of the clean stream with its patches restored.

    The start is either --from OFFSET, or --patch INDEX with an
    optional --delta. The length is either --length N, or --span N
    patches from the anchor patch, adjusted by --span-delta or
    extended to the following patch with --to-next.
    """

    from_: int | None = Field(
        default=None,
        alias="from",
        description="Start offset in the clean stream",
    )
    patch: int | None = Field(
        default=None,
        description="Start at the position of this patch index",
    )
    delta: int | None = Field(
        default=None,
        description="Characters to add to the --patch start",
    )
    length: int | None = Field(
        default=None,
        description="Clean-stream length of the range (default: to the end)",
    )
    span: int | None = Field(
        default=None,
        description="Length as a number of patches past the anchor patch",
    )
    span_delta: int | None = Field(
        default=None,
        alias="span-delta",
        description="Characters to add to the --span length",
    )
    to_next: bool = Field(
        default=False,
        alias="to-next",
        description="Extend the --span length up to the following patch",
    )
    skip: str | None = Field(
        default=None,
        description="Boundary patches to skip: none, left, right, both",
    )

    def address(self):
        """Return the start address described by the options."""
        if self.patch is None and self.delta is None:
            return Absolute(self.from_ or 0)
        if self.from_ is not None:
            raise InvalidArgumentError(
                "--from cannot be combined with --patch/--delta"
            )
        return Relative(patch_index=self.patch, char_delta=self.delta)

    def length_spec(self):
        """Return the length argument described by the options."""
        if self.span is None:
            if self.span_delta is not None or self.to_next:
                raise InvalidArgumentError(
                    "--span-delta and --to-next require --span"
                )
            return self.length
        if self.length is not None:
            raise InvalidArgumentError("--length cannot be combined with --span")
        if self.to_next and self.span_delta is not None:
            raise InvalidArgumentError(
                "--to-next cannot be combined with --span-delta"
            )
        if self.to_next:
            return Span(self.span, Delta.UNSPECIFIED)
        if self.span_delta is not None:
            return Span(self.span, self.span_delta)
        return Span(self.span)

    def run(self, state) -> int:
        try:
            patched = self.load(state)
            if self.pattern_failed(state, patched):
                return EXIT_PATTERN
            text = patched.build(
                self.address(),
                self.skip_rule(state, self.skip),
                self.length_spec(),
            )
        except StreamPatchError as e:
            logger.error("Build failed", error=str(e))
            print(f"error: {e}", file=sys.stderr)
            return EXIT_INVALID

        sys.stdout.write(text)
        return EXIT_OK
