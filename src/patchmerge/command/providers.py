"""Providers command - list or probe configured providers."""

from pydantic import BaseModel, Field, RootModel

from patchmerge.command.base import EXIT_OK, EXIT_UNRESOLVED, emit
from patchmerge.providers.adapter import ProviderProbe
from patchmerge.service import ConflictResolutionService


class ProvidersCommand(BaseModel):
    """Show configured providers, or check that they answer."""

    test: bool = Field(
        default=False,
        description="Send a minimal request to every provider",
    )

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        if not self.test:
            emit(service.list_providers())
            return EXIT_OK

        probes = await service.test_providers()
        emit(RootModel[list[ProviderProbe]](probes))
        return EXIT_OK if all(p.ok for p in probes) else EXIT_UNRESOLVED
