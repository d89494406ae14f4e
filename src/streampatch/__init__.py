"""streampatch - split text into a clean stream and regex-matched patches."""

from streampatch.errors import (
    InvalidArgumentError,
    OutOfRangeError,
    StreamPatchError,
)
from streampatch.stream import (
    Absolute,
    Delta,
    Patch,
    PatchSequence,
    Patched,
    Relative,
    SkipRule,
    Span,
    extract,
)

__version__ = "0.1.0"

__all__ = [
    "Absolute",
    "Delta",
    "InvalidArgumentError",
    "OutOfRangeError",
    "Patch",
    "PatchSequence",
    "Patched",
    "Relative",
    "SkipRule",
    "Span",
    "StreamPatchError",
    "extract",
]
