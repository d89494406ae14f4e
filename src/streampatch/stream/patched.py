"""The Patched stream: clean text plus removable metadata patches."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from streampatch.errors import InvalidArgumentError
from streampatch.stream.address import resolve_from, resolve_length
from streampatch.stream.extractor import extract
from streampatch.stream.patch import Patch, PatchSequence
from streampatch.stream.skip import SkipRule
from streampatch.strings import insert_into


class Patched:
    """A raw stream split into a clean stream and the patches cut from it.

    The split happens once, at construction. Afterwards the object is
    read-only: any part of the clean stream can be rebuilt with the
    patches that fall inside it restored.

    Example:
        >>> p = Patched(r"\\{/?b\\}", "Hello{b}World{/b}!")
        >>> p.clean_stream
        'HelloWorld!'
        >>> p.build(5, SkipRule.LEFT)
        'World{/b}!'
    """

    __slots__ = ("_clean_stream", "_patches", "_pattern_error")

    def __init__(
        self, pattern: str | re.Pattern, raw_input: str, flags: int = 0
    ):
        """Split raw_input on pattern.

        Args:
            pattern: Regular expression whose matches become patches.
                A malformed pattern matches nothing; see pattern_error.
            raw_input: Text to split
            flags: Extra re flags used when compiling pattern
        """
        extraction = extract(pattern, raw_input, flags)
        self._clean_stream = extraction.clean_stream
        self._patches = extraction.patches
        self._pattern_error = extraction.error

    def __repr__(self) -> str:
        return (
            f"Patched(clean_stream={self._clean_stream!r}, "
            f"patches={len(self._patches)})"
        )

    @property
    def clean_stream(self) -> str:
        """The input with every patch removed."""
        return self._clean_stream

    @property
    def patches(self) -> PatchSequence:
        """Extracted patches, ascending by clean-stream position."""
        return self._patches

    @property
    def pattern_error(self) -> str | None:
        """Compile error of a malformed pattern, or None."""
        return self._pattern_error

    def get_clean_stream(self) -> str:
        return self._clean_stream

    def get_patches(self) -> PatchSequence:
        return self._patches

    def resolve_from(self, from_: Any) -> int:
        """Resolve a start address into an absolute clean-stream offset."""
        return resolve_from(from_, self._patches)

    def resolve_length(
        self, from_: Any, skip: SkipRule | str | None, length: Any
    ) -> int | None:
        """Resolve a length argument relative to a start address.

        Returns:
            Absolute length, or None meaning "until the end"
        """
        skip = SkipRule.parse(skip)
        offset = self.resolve_from(from_)
        return resolve_length(from_, offset, skip, length, self._patches)

    def build(
        self,
        from_: Any = 0,
        skip: SkipRule | str | None = SkipRule.NONE,
        length: Any = None,
    ) -> str:
        """Rebuild a portion of the stream with its patches restored.

        Args:
            from_: Start address: an offset, a Relative/Absolute, or a
                descriptor dict with patch_index/char_delta
            skip: Which boundary patches to leave out
            length: Clean-stream length of the portion: None (up to the
                end), an int, a Span, or a descriptor dict with
                patch_span/char_delta

        Returns:
            The clean-stream portion with the selected patches spliced
            back in at their original relative positions

        Raises:
            InvalidArgumentError: If the length is negative, the start
                lies outside the clean stream, or a descriptor is
                malformed
            OutOfRangeError: If a patch index does not exist
        """
        skip = SkipRule.parse(skip)
        offset = self.resolve_from(from_)
        resolved = resolve_length(from_, offset, skip, length, self._patches)
        self._check_offset(offset)

        if resolved is None:
            s = self._clean_stream[offset:]
        else:
            if resolved < 0:
                raise InvalidArgumentError(
                    f"Length must be None, 0, or positive; got {resolved}"
                )
            s = self._clean_stream[offset:offset + resolved]

        inserted = 0
        for patch in self._select(offset, skip, len(s)):
            s = insert_into(s, patch.sequence, patch.position - offset + inserted)
            inserted += patch.length
        return s

    def length(
        self, from_: Any = 0, skip: SkipRule | str | None = SkipRule.NONE
    ) -> int:
        """Return the length of build(from_, skip) without building it.

        Raises:
            InvalidArgumentError: If the start lies outside the clean
                stream or its descriptor is malformed
            OutOfRangeError: If a patch index does not exist
        """
        skip = SkipRule.parse(skip)
        offset = self.resolve_from(from_)
        self._check_offset(offset)

        available = len(self._clean_stream) - offset
        return available + sum(
            patch.length for patch in self._select(offset, skip, available)
        )

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > len(self._clean_stream):
            raise InvalidArgumentError(
                f"Start offset {offset} outside clean stream of length "
                f"{len(self._clean_stream)}"
            )

    def _select(self, offset: int, skip: SkipRule, size: int) -> Iterator[Patch]:
        """Yield the patches that belong to a clean-stream range.

        The range starts at offset and spans size characters. Boundary
        patches are kept unless the skip rule says otherwise.
        """
        for patch in self._patches:
            relative = patch.position - offset
            if relative < 0 or (relative == 0 and skip.left):
                continue
            if relative > size or (relative == size and skip.right):
                break
            yield patch
