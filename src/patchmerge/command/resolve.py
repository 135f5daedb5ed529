"""Resolve command - run the provider-backed resolution workflow."""

from pathlib import Path

from pydantic import Field

from patchmerge.command.base import (
    EXIT_OK,
    EXIT_UNRESOLVED,
    ThreeWayInput,
    emit,
    write_output,
)
from patchmerge.core.log import logger
from patchmerge.engine.models import ResolveOptions
from patchmerge.service import ConflictResolutionService


class ResolveCommand(ThreeWayInput):
    """Resolve conflicts with one provider or an ensemble of them.

    Exits 0 when a resolution was accepted and 1 when the conflicts
    need manual review.
    """

    file_path: str | None = Field(
        default=None,
        description="Path shown to providers (defaults to --current)",
    )
    provider: str | None = Field(
        default=None,
        description="Preferred provider name (default: first configured)",
    )
    ensemble: bool = Field(
        default=False,
        description="Ask every configured provider and keep the best answer",
    )
    use_providers: bool = Field(
        default=True,
        description="Set to false to only report conflicts",
    )
    output: Path | None = Field(
        default=None, description="Write the resolved file here"
    )

    async def run(self, state: "State") -> int:
        service = ConflictResolutionService.from_config(state.config)
        options = ResolveOptions(
            use_providers=self.use_providers,
            provider=self.provider,
            ensemble=self.ensemble,
        )
        result = await service.resolve_with_providers(
            *self.read(),
            file_path=self.file_path or str(self.current),
            options=options,
        )

        if result.success:
            write_output(self.output, result.resolved_content)
        else:
            logger.warning(
                "Conflicts need manual review",
                suggestions=list(result.suggestions),
            )
        emit(result)
        return EXIT_OK if result.success else EXIT_UNRESOLVED
