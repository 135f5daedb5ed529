"""Shared pieces of the CLI commands."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from patchmerge.core.log import logger

EXIT_OK = 0
EXIT_UNRESOLVED = 1
EXIT_USAGE = 2


def read_text(path: Path) -> str:
    """Read a file, raising ValueError with a readable message."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e.strerror}") from e


def emit(model: BaseModel) -> None:
    """Print a result as camelCase JSON."""
    print(model.model_dump_json(by_alias=True, indent=2))


def write_output(path: Path | None, content: str) -> None:
    if path is None:
        return
    path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote resolved content to {path}", path=str(path))


class ThreeWayInput(BaseModel):
    """The three versions of a file, given as paths."""

    ancestor: Path = Field(description="Common ancestor version")
    incoming: Path = Field(description="Incoming (patch) version")
    current: Path = Field(description="Current target version")

    def read(self) -> tuple[str, str, str]:
        return (
            read_text(self.ancestor),
            read_text(self.incoming),
            read_text(self.current),
        )
