"""Separate pattern matches out of a raw input stream."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import reduce

from streampatch.core.log import logger
from streampatch.stream.patch import Patch, PatchSequence


@dataclass(frozen=True)
class Extraction:
    """Result of separating patches from a raw input.

    Attributes:
        clean_stream: Raw input with every match removed
        patches: Removed matches, in clean-stream coordinates
        error: Compile error message if the pattern was malformed
    """

    clean_stream: str
    patches: PatchSequence = field(default_factory=PatchSequence)
    error: str | None = None


def compile_pattern(
    pattern: str | re.Pattern, flags: int = 0
) -> tuple[re.Pattern | None, str | None]:
    """Compile pattern, reporting failure instead of raising.

    Returns:
        (compiled pattern, None) on success, (None, error message)
        if the pattern is not a valid regular expression
    """
    if isinstance(pattern, re.Pattern):
        if flags:
            return re.compile(pattern.pattern, pattern.flags | flags), None
        return pattern, None
    try:
        return re.compile(pattern, flags), None
    except (re.error, TypeError) as e:
        return None, str(e)


def extract(
    pattern: str | re.Pattern, raw_input: str, flags: int = 0
) -> Extraction:
    """Remove all matches of pattern from raw_input.

    Matches are found left to right without overlapping. Each one is
    recorded at the position it occupies once every earlier match has
    been taken out, so positions are valid offsets into the clean
    stream.

    A malformed pattern is treated as matching nothing: the raw input
    comes back unchanged with no patches, and the compile error is
    kept on Extraction.error.

    Args:
        pattern: Regular expression text or compiled pattern
        raw_input: Text to separate
        flags: Extra re flags used when compiling

    Returns:
        Extraction holding the clean stream and the patches
    """
    compiled, error = compile_pattern(pattern, flags)
    if compiled is None:
        logger.warn(
            "Malformed pattern treated as matching nothing",
            pattern=str(pattern),
            error=error,
        )
        return Extraction(clean_stream=raw_input, error=error)

    def fold(acc, match):
        pieces, patches, consumed, removed = acc
        text = match.group(0)
        pieces.append(raw_input[consumed:match.start()])
        patches.append(
            Patch(
                position=match.start() - removed,
                sequence=text,
                length=len(text),
            )
        )
        return pieces, patches, match.end(), removed + len(text)

    pieces, patches, consumed, removed = reduce(
        fold, compiled.finditer(raw_input), ([], [], 0, 0)
    )
    pieces.append(raw_input[consumed:])

    logger.debug(
        "Extracted patches",
        pattern=compiled.pattern,
        patches=len(patches),
        removed=removed,
    )
    return Extraction(
        clean_stream="".join(pieces), patches=PatchSequence(patches)
    )
