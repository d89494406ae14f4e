"""Base classes for configuration models.

Holds the Closeable protocol and the close cascade shared by the
configuration sections and the logger. Kept apart from config.py so
that log.py can use it without a circular import.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Clean up resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable children.

    Usable as a context manager. On close() every field value that
    has a close() method is closed in turn; a failure in one child is
    reported on stderr and the remaining children are still closed.

    Config.close() → Logger.close() → Sink.close()
    """

    def close(self):
        """Close all closeable child objects."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    msg = f"Warning: Error closing {field_name}: {e}"
                    print(msg, file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Base class for all configuration sections.

    Marks a model as configuration loaded from YAML/env/CLI.
    """
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig"]
