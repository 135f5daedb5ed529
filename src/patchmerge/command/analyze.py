"""Analyze command - list conflicts between three versions."""

from patchmerge.command.base import EXIT_OK, ThreeWayInput, emit
from patchmerge.service import ConflictResolutionService


class AnalyzeCommand(ThreeWayInput):
    """Classify every conflicting line of a three-way comparison."""

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        emit(service.analyze(*self.read()))
        return EXIT_OK
