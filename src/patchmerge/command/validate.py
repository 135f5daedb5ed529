"""Validate command - check an already resolved file."""

from pathlib import Path

from pydantic import BaseModel, Field

from patchmerge.command.base import (
    EXIT_OK,
    EXIT_UNRESOLVED,
    emit,
    read_text,
)
from patchmerge.service import ConflictResolutionService


class ValidateCommand(BaseModel):
    """Check delimiter balance and how much of each side survived."""

    resolved: Path = Field(description="Resolved version to check")
    ancestor: Path = Field(description="Common ancestor version")
    incoming: Path = Field(description="Incoming (patch) version")

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        outcome = service.validate(
            read_text(self.resolved),
            read_text(self.ancestor),
            read_text(self.incoming),
        )
        emit(outcome)
        return EXIT_OK if outcome.is_valid else EXIT_UNRESOLVED
