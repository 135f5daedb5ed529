"""Apply command - apply a resolution map chosen by a reviewer."""

from pathlib import Path

from pydantic import Field

from patchmerge.command.base import (
    EXIT_OK,
    EXIT_UNRESOLVED,
    ThreeWayInput,
    emit,
    read_text,
    write_output,
)
from patchmerge.engine.models import resolution_map_adapter
from patchmerge.service import ConflictResolutionService


class ApplyCommand(ThreeWayInput):
    """Apply per-line resolutions, then validate the result.

    The resolutions file is a JSON object mapping line numbers to
    {"kind": "ancestor"}, {"kind": "incoming"} or
    {"kind": "custom", "content": "..."}.
    """

    resolutions: Path = Field(description="JSON file of resolutions")
    output: Path | None = Field(
        default=None, description="Write the resolved file here"
    )
    report: bool = Field(
        default=False, description="Print the text report instead of JSON"
    )

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        resolutions = resolution_map_adapter.validate_json(
            read_text(self.resolutions)
        )
        result = service.resolve(*self.read(), resolutions)
        write_output(self.output, result.resolved_code)

        if self.report:
            print(result.report, end="")
        else:
            emit(result)
        return EXIT_OK if result.validation.is_valid else EXIT_UNRESOLVED
