"""Skip rules for patches sitting on a range boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from streampatch.errors import InvalidArgumentError


@dataclass(frozen=True)
class SkipRule:
    """Which boundary patches to leave out when rebuilding a range.

    A patch positioned exactly at the start of the range is the left
    boundary patch; one positioned exactly at its end is the right
    boundary patch. Rules combine with ``|``.

    Attributes:
        left: Skip the patch at the left boundary
        right: Skip the patch at the right boundary
    """

    left: bool = False
    right: bool = False

    NONE: ClassVar[SkipRule]
    LEFT: ClassVar[SkipRule]
    RIGHT: ClassVar[SkipRule]
    BOTH: ClassVar[SkipRule]

    def __or__(self, other: SkipRule) -> SkipRule:
        if not isinstance(other, SkipRule):
            return NotImplemented
        return SkipRule(self.left or other.left, self.right or other.right)

    @property
    def name(self) -> str:
        """Return the rule name: none, left, right or both."""
        if self.left and self.right:
            return "both"
        if self.left:
            return "left"
        if self.right:
            return "right"
        return "none"

    @classmethod
    def parse(cls, value: SkipRule | str | None) -> SkipRule:
        """Coerce a rule name (or an existing rule) into a SkipRule.

        Names are case-insensitive and may be joined with '|' or ',',
        e.g. "left|right".

        Raises:
            InvalidArgumentError: For unknown names or types
        """
        if value is None:
            return cls.NONE
        if isinstance(value, SkipRule):
            return value
        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"Skip rule must be a SkipRule or a name, "
                f"got {type(value).__name__}"
            )

        rule = cls.NONE
        for part in value.replace(",", "|").split("|"):
            name = part.strip().lower()
            if name not in _NAMED:
                raise InvalidArgumentError(
                    f"Unknown skip rule {part.strip()!r}; "
                    f"expected one of {', '.join(_NAMED)}"
                )
            rule = rule | _NAMED[name]
        return rule


SkipRule.NONE = SkipRule()
SkipRule.LEFT = SkipRule(left=True)
SkipRule.RIGHT = SkipRule(right=True)
SkipRule.BOTH = SkipRule(left=True, right=True)

_NAMED = {
    "none": SkipRule.NONE,
    "left": SkipRule.LEFT,
    "right": SkipRule.RIGHT,
    "both": SkipRule.BOTH,
}
