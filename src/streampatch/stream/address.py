"""Resolve absolute and patch-relative addresses into clean-stream offsets.

Two kinds of argument are resolved here:

- a start address, either ``Absolute(offset)`` or
  ``Relative(patch_index, char_delta)``;
- a length, either ``None`` (to the end), a plain integer, or
  ``Span(patch_span, char_delta)`` counting whole patches from an anchor.

Plain integers and dict descriptors are accepted wherever the typed forms
are, and coerced by ``as_address`` and ``as_length``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from streampatch.errors import InvalidArgumentError
from streampatch.stream.patch import PatchSequence
from streampatch.stream.skip import SkipRule


class Delta(Enum):
    """Markers for a Span char_delta that carries no integer.

    UNSET: no adjustment beyond the patch span.
    UNSPECIFIED: extend the length up to the patch after the target.
    """

    UNSET = "unset"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class Absolute:
    """A plain character offset into the clean stream."""

    offset: int


@dataclass(frozen=True)
class Relative:
    """A position given as a patch index plus a character delta.

    Without a patch index the base is the start of the stream.
    """

    patch_index: int | None = None
    char_delta: int | None = None


@dataclass(frozen=True)
class Span:
    """A length counted in patches from an anchor patch.

    Attributes:
        patch_span: Number of patches to advance past the anchor;
            None means "until the end"
        char_delta: Integer added to the span, Delta.UNSPECIFIED to
            reach the next patch, or Delta.UNSET for no adjustment
    """

    patch_span: int | None = None
    char_delta: int | Delta = Delta.UNSET


Address = Union[Absolute, Relative]
LengthSpec = Union[int, Span, None]

_ADDRESS_KEYS = frozenset({"patch_index", "char_delta"})
_SPAN_KEYS = frozenset({"patch_span", "char_delta"})


def _check_int(name: str, value: Any, optional: bool = True) -> None:
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            f"{name} must be an integer, got {value!r}"
        )


def _check_keys(descriptor: dict, allowed: frozenset, kind: str) -> None:
    unknown = set(descriptor) - allowed
    if unknown:
        raise InvalidArgumentError(
            f"Unrecognized {kind} keys: {', '.join(sorted(map(str, unknown)))}"
            f" (allowed: {', '.join(sorted(allowed))})"
        )


def as_address(value: Any) -> Address:
    """Coerce an int, dict descriptor, or Address into an Address.

    Raises:
        InvalidArgumentError: For unrecognized keys or value types
    """
    if isinstance(value, (Absolute, Relative)):
        return value
    if isinstance(value, dict):
        _check_keys(value, _ADDRESS_KEYS, "address")
        patch_index = value.get("patch_index")
        char_delta = value.get("char_delta")
        _check_int("patch_index", patch_index)
        _check_int("char_delta", char_delta)
        return Relative(patch_index=patch_index, char_delta=char_delta)
    _check_int("offset", value, optional=False)
    return Absolute(value)


def as_length(value: Any) -> LengthSpec:
    """Coerce None, an int, a dict descriptor, or a Span into a LengthSpec.

    In a dict descriptor, a missing ``char_delta`` key means
    Delta.UNSET while an explicit ``None`` means Delta.UNSPECIFIED.

    Raises:
        InvalidArgumentError: For unrecognized keys or value types
    """
    if value is None or isinstance(value, Span):
        return value
    if isinstance(value, dict):
        _check_keys(value, _SPAN_KEYS, "length")
        patch_span = value.get("patch_span")
        _check_int("patch_span", patch_span)
        if "char_delta" not in value:
            char_delta = Delta.UNSET
        elif value["char_delta"] is None:
            char_delta = Delta.UNSPECIFIED
        else:
            char_delta = value["char_delta"]
            _check_int("char_delta", char_delta, optional=False)
        return Span(patch_span=patch_span, char_delta=char_delta)
    _check_int("length", value, optional=False)
    return value


def resolve_from(address: Any, patches: PatchSequence) -> int:
    """Translate a start address into an absolute clean-stream offset.

    Raises:
        OutOfRangeError: If a patch index is outside the patch list
        InvalidArgumentError: For malformed descriptors
    """
    address = as_address(address)
    if isinstance(address, Absolute):
        return address.offset

    base = 0
    if address.patch_index is not None:
        base = patches.get(address.patch_index).position
    return base + (address.char_delta or 0)


def find_anchor(offset: int, skip: SkipRule, patches: PatchSequence) -> int | None:
    """Return the index of the last patch not yet passed at offset.

    A patch exactly at offset counts only when the left boundary patch
    is kept, since skipping it leaves it behind the range.
    """
    anchor = None
    for index, patch in enumerate(patches):
        if patch.position > offset or (patch.position == offset and skip.left):
            break
        anchor = index
    return anchor


def resolve_length(
    address: Any,
    offset: int,
    skip: SkipRule,
    length: Any,
    patches: PatchSequence,
) -> int | None:
    """Translate a length argument into an absolute length.

    Args:
        address: The start address as originally given; an explicit
            patch index there becomes the anchor of a Span
        offset: The start address already resolved by resolve_from
        skip: Active skip rule
        length: None, an int, a Span, or a dict descriptor
        patches: Extracted patches

    Returns:
        Length in clean-stream characters, or None for "until the end"

    Raises:
        InvalidArgumentError: For malformed descriptors
    """
    length = as_length(length)
    if not isinstance(length, Span):
        return length
    if length.patch_span is None:
        return None

    address = as_address(address)
    if isinstance(address, Relative) and address.patch_index is not None:
        anchor = address.patch_index
    else:
        anchor = find_anchor(offset, skip, patches)
    if anchor is None:
        return None

    target = anchor + length.patch_span
    if target < 0 or target >= len(patches):
        return None
    resolved = patches[target].position - patches[anchor].position

    if length.char_delta is Delta.UNSET:
        return resolved
    if length.char_delta is Delta.UNSPECIFIED:
        if target + 1 >= len(patches):
            return None
        return resolved + patches[target + 1].position - patches[target].position
    return resolved + length.char_delta
