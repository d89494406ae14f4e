"""Exception types raised by streampatch."""


class StreamPatchError(Exception):
    """Base class for all streampatch errors."""


class InvalidArgumentError(StreamPatchError, ValueError):
    """An argument has the wrong shape or value.

    Raised for negative lengths, offsets outside the clean stream,
    address or length descriptors with unrecognized keys, and unknown
    skip-rule names.
    """


class OutOfRangeError(StreamPatchError, IndexError):
    """A patch index lies outside the extracted patch list."""


__all__ = ["StreamPatchError", "InvalidArgumentError", "OutOfRangeError"]
