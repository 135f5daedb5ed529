"""Conflict resolution actions exposed to the surrounding application.

Each method corresponds to one action of the portal's conflict
resolution endpoint and returns a model the HTTP layer can serialize
with model_dump(by_alias=True).
"""

from __future__ import annotations

import asyncio

from pydantic import Field

from patchmerge.core.config import Config, EngineConfig, ProviderConfig
from patchmerge.core.log import logger
from patchmerge.engine.apply import apply_resolutions
from patchmerge.engine.autoresolve import auto_resolve
from patchmerge.engine.differ import diff
from patchmerge.engine.models import (
    OrchestrationResult,
    ResolutionMap,
    ResolveOptions,
    ThreeWayDiffResult,
    ValidationOutcome,
    WireModel,
)
from patchmerge.engine.report import render
from patchmerge.engine.validator import validate
from patchmerge.orchestrator import ResolutionOrchestrator
from patchmerge.providers.adapter import ProviderAdapter, ProviderProbe


class AnalysisReport(WireModel):
    diff: ThreeWayDiffResult
    conflict_count: int
    has_conflicts: bool


class ResolutionReport(WireModel):
    resolved_code: str
    validation: ValidationOutcome
    report: str
    conflict_count: int
    resolved_count: int


class AutoResolveReport(WireModel):
    auto_resolved: bool
    explanation: str
    resolved_code: str | None = None
    resolutions: ResolutionMap = Field(default_factory=dict)
    validation: ValidationOutcome | None = None
    resolved_count: int = 0
    message: str | None = None


class ProviderSummary(WireModel):
    name: str
    model: str


class ProviderListing(WireModel):
    enabled: bool
    providers: tuple[ProviderSummary, ...] = ()
    message: str


class ConflictResolutionService:
    """Stateless facade over the engine for one set of providers."""

    def __init__(
        self,
        providers: list[ProviderConfig] | None = None,
        engine: EngineConfig | None = None,
        orchestrator: ResolutionOrchestrator | None = None,
    ):
        self.engine = engine or EngineConfig()
        self.orchestrator = orchestrator or ResolutionOrchestrator(
            providers=providers or [], engine=self.engine
        )

    @classmethod
    def from_config(cls, config: Config) -> ConflictResolutionService:
        return cls(
            engine=config.engine,
            orchestrator=ResolutionOrchestrator.from_config(config),
        )

    @property
    def providers(self) -> list[ProviderConfig]:
        return self.orchestrator.providers

    def _validate(
        self, resolved: str, ancestor: str, incoming: str
    ) -> ValidationOutcome:
        return validate(
            resolved,
            ancestor,
            incoming,
            min_preservation=self.engine.min_preservation,
            min_integration=self.engine.min_integration,
            max_size_delta=self.engine.max_size_delta,
        )

    def analyze(
        self, ancestor: str, incoming: str, current: str
    ) -> AnalysisReport:
        result = diff(ancestor, incoming, current)
        return AnalysisReport(
            diff=result,
            conflict_count=len(result.conflicts),
            has_conflicts=result.has_conflicts,
        )

    def resolve(
        self,
        ancestor: str,
        incoming: str,
        current: str,
        resolutions: ResolutionMap,
    ) -> ResolutionReport:
        """Apply caller-chosen resolutions, then validate and report.

        Raises:
            ValueError: If resolutions is empty
        """
        if not resolutions:
            raise ValueError("Resolutions are required for resolve action")

        result = diff(ancestor, incoming, current)
        resolved = apply_resolutions(result, resolutions)
        validation = self._validate(resolved, ancestor, incoming)

        return ResolutionReport(
            resolved_code=resolved,
            validation=validation,
            report=render(result, resolutions, validation),
            conflict_count=len(result.conflicts),
            resolved_count=sum(
                1 for c in result.conflicts if c.line_number in resolutions
            ),
        )

    def validate(
        self, resolved: str, ancestor: str, incoming: str
    ) -> ValidationOutcome:
        return self._validate(resolved, ancestor, incoming)

    def auto_resolve(
        self, ancestor: str, incoming: str, current: str
    ) -> AutoResolveReport:
        """Resolve what the heuristics can and apply it."""
        result = diff(ancestor, incoming, current)
        auto = auto_resolve(
            result, similarity_threshold=self.engine.similarity_threshold
        )

        if not auto.resolved_any:
            return AutoResolveReport(
                auto_resolved=False,
                explanation=auto.explanation,
                message="No simple conflicts can be resolved automatically",
            )

        resolved = apply_resolutions(result, auto.resolutions)
        return AutoResolveReport(
            auto_resolved=True,
            explanation=auto.explanation,
            resolved_code=resolved,
            resolutions=auto.resolutions,
            validation=self._validate(resolved, ancestor, incoming),
            resolved_count=len(auto.resolutions),
        )

    async def resolve_with_providers(
        self,
        ancestor: str,
        incoming: str,
        current: str,
        file_path: str,
        options: ResolveOptions | None = None,
    ) -> OrchestrationResult:
        return await self.orchestrator.run(
            ancestor, incoming, current, file_path, options
        )

    def list_providers(self) -> ProviderListing:
        """Names and models of configured providers; never credentials."""
        providers = tuple(
            ProviderSummary(name=p.name, model=p.model)
            for p in self.providers
        )
        if providers:
            message = "Provider-assisted conflict resolution is enabled"
        else:
            message = (
                "Provider-assisted conflict resolution is disabled; "
                "configure at least one provider"
            )
        return ProviderListing(
            enabled=bool(providers), providers=providers, message=message
        )

    async def test_providers(self) -> list[ProviderProbe]:
        """Probe every configured provider concurrently.

        Raises:
            ValueError: If no provider is configured
        """
        if not self.providers:
            raise ValueError("No text-generation providers are configured")

        factory = self.orchestrator.adapter_factory
        adapters: list[ProviderAdapter] = [
            factory(p, system_prompt=None, retries=0) for p in self.providers
        ]
        probes = await asyncio.gather(*(a.probe() for a in adapters))
        for probe in probes:
            logger.info(
                f"Provider '{probe.name}': {'ok' if probe.ok else 'failed'}",
                provider=probe.name,
                ok=probe.ok,
                latency_ms=probe.latency_ms,
                error=probe.error,
            )
        return list(probes)
