"""Auto-resolve command - settle simple conflicts with fixed rules."""

from pathlib import Path

from pydantic import Field

from patchmerge.command.base import (
    EXIT_OK,
    EXIT_UNRESOLVED,
    ThreeWayInput,
    emit,
    write_output,
)
from patchmerge.service import ConflictResolutionService


class AutoResolveCommand(ThreeWayInput):
    """Resolve add/add, delete/add and near-identical edits without
    calling any provider."""

    output: Path | None = Field(
        default=None, description="Write the resolved file here"
    )

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        result = service.auto_resolve(*self.read())
        if result.resolved_code is not None:
            write_output(self.output, result.resolved_code)
        emit(result)
        return EXIT_OK if result.auto_resolved else EXIT_UNRESOLVED
