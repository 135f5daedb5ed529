"""Top-level entry point of the resolution engine."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from patchmerge.core.config import EngineConfig, ProviderConfig
from patchmerge.core.log import logger
from patchmerge.engine.models import OrchestrationResult, ResolveOptions
from patchmerge.providers.adapter import ProviderAdapter
from patchmerge.workflow.graph import create_workflow
from patchmerge.workflow.nodes import Analyze
from patchmerge.workflow.state import ResolutionState, manual_review_result


class ResolutionOrchestrator:
    """Diff, resolve through providers, evaluate, validate and report.

    Holds only configuration; every run() starts from fresh state.
    """

    def __init__(
        self,
        providers: Sequence[ProviderConfig] = (),
        engine: EngineConfig | None = None,
        system_prompt: str | None = None,
        adapter_factory: Callable[..., ProviderAdapter] = ProviderAdapter,
    ):
        """Initialize orchestrator.

        Args:
            providers: Providers in preference order
            engine: Thresholds (defaults when None)
            system_prompt: Override for the provider system prompt
            adapter_factory: Builds an adapter from a ProviderConfig;
                called with system_prompt= and retries= keywords
        """
        self.providers = list(providers)
        self.engine = engine or EngineConfig()
        self.system_prompt = system_prompt
        self.adapter_factory = adapter_factory
        self.workflow = create_workflow()

    @classmethod
    def from_config(cls, config) -> ResolutionOrchestrator:
        """Build from a loaded Config."""
        return cls(
            providers=config.providers,
            engine=config.engine,
            system_prompt=config.prompts.get("system"),
        )

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    async def run(
        self,
        ancestor: str,
        incoming: str,
        current: str,
        file_path: str,
        options: ResolveOptions | None = None,
    ) -> OrchestrationResult:
        """Resolve the conflicts between three versions of a file.

        Never raises: anything that goes wrong ends in the manual
        review state with the failure named in the suggestions.

        Args:
            ancestor: Common base content
            incoming: Patch content
            current: Content at the target
            file_path: Path used in prompts and logs
            options: Provider selection (defaults to first provider)

        Returns:
            OrchestrationResult in one of the RunStatus terminal states
        """
        state = ResolutionState(
            ancestor=ancestor,
            incoming=incoming,
            current=current,
            file_path=file_path,
            options=options or ResolveOptions(),
            providers=self.providers,
            engine=self.engine,
            system_prompt=self.system_prompt,
            adapter_factory=self.adapter_factory,
        )

        try:
            with logger.span("Resolve conflicts", file_path=file_path):
                async with self.workflow.iter(Analyze(), state=state) as run:
                    async for node in run:
                        logger.debug(f"Workflow node: {type(node).__name__}")
                result = run.result.output
        except Exception as e:
            logger.error(
                f"Resolution of {file_path} failed: {e}",
                file_path=file_path,
                _exc_info=e,
            )
            return manual_review_result(
                state, reason=f"Automatic resolution failed: {e}"
            )

        logger.info(
            f"Resolution of {file_path} finished: {result.status.value}",
            file_path=file_path,
            status=result.status.value,
            success=result.success,
        )
        return result
