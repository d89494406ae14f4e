"""Pattern-based separation of a stream from its inline metadata."""

from streampatch.stream.address import (
    Absolute,
    Address,
    Delta,
    LengthSpec,
    Relative,
    Span,
    as_address,
    as_length,
    resolve_from,
    resolve_length,
)
from streampatch.stream.extractor import Extraction, extract
from streampatch.stream.patch import Patch, PatchSequence
from streampatch.stream.patched import Patched
from streampatch.stream.skip import SkipRule

__all__ = [
    "Absolute",
    "Address",
    "Delta",
    "Extraction",
    "LengthSpec",
    "Patch",
    "PatchSequence",
    "Patched",
    "Relative",
    "SkipRule",
    "Span",
    "as_address",
    "as_length",
    "extract",
    "resolve_from",
    "resolve_length",
]
