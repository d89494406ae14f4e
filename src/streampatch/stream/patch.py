"""Patch value object and the read-only sequence holding them."""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from streampatch.errors import OutOfRangeError


@dataclass(frozen=True)
class Patch:
    """A pattern match removed from the raw input.

    Attributes:
        position: Where the match sits in the clean stream, i.e. the
            offset at which it would be reinserted
        sequence: The matched text
        length: Length of the matched text
    """

    position: int
    sequence: str
    length: int


class PatchSequence(Sequence):
    """Immutable ordered view over extracted patches.

    Patches are kept ascending by position, in the order the matches
    were found in the raw input.
    """

    __slots__ = ("_patches",)

    def __init__(self, patches: Iterable[Patch] = ()):
        """Initialize PatchSequence.

        Args:
            patches: Patches in ascending position order
        """
        self._patches = tuple(patches)

    def __len__(self) -> int:
        return len(self._patches)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return PatchSequence(self._patches[index])
        return self._patches[index]

    def __iter__(self) -> Iterator[Patch]:
        return iter(self._patches)

    def __eq__(self, other) -> bool:
        if isinstance(other, PatchSequence):
            return self._patches == other._patches
        if isinstance(other, (list, tuple)):
            return self._patches == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._patches)

    def __repr__(self) -> str:
        return f"PatchSequence({list(self._patches)!r})"

    def get(self, index: int) -> Patch:
        """Retrieve a single patch by index.

        Unlike plain indexing, negative indices are not accepted.

        Args:
            index: Zero-based index

        Returns:
            Patch object

        Raises:
            OutOfRangeError: If index is outside [0, len)
        """
        if index < 0 or index >= len(self._patches):
            raise OutOfRangeError(
                f"Patch index {index} out of range for "
                f"{len(self._patches)} patches"
            )
        return self._patches[index]

    def positions(self) -> list[int]:
        """Return the clean-stream position of every patch."""
        return [patch.position for patch in self._patches]

    def total_length(self) -> int:
        """Return the combined length of all patch sequences."""
        return sum(patch.length for patch in self._patches)

    def to_list(self) -> list[Patch]:
        """Convert to a list of Patch objects."""
        return list(self._patches)
