"""Base classes for configuration and runtime models.

Everything that owns a resource (log sinks, open files, span
processors) hangs off a BaseCloseable so that closing the top-level
config releases it. Kept apart from config.py so log.py can import it
without a cycle.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything with a close() method."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable fields on close().

    Usable as a context manager. A failing child does not stop the
    remaining children from being closed.
    """

    def close(self):
        """Close every field value that implements Closeable."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: Error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for sections loaded from YAML/env/CLI."""
    pass


class BaseState(BaseCloseable):
    """Marker base for state that changes while a run executes."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
