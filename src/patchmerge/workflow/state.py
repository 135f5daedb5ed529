"""Run state for the resolution workflow and terminal result builders."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from patchmerge.core.base import BaseState
from patchmerge.core.config import EngineConfig, ProviderConfig
from patchmerge.engine.models import (
    OrchestrationResult,
    ResolutionOutcome,
    ResolveOptions,
    RunStatus,
    ThreeWayDiffResult,
)
from patchmerge.engine.report import render
from patchmerge.engine.validator import validate
from patchmerge.providers.adapter import ConflictContext, ProviderAdapter


class ResolutionState(BaseState):
    """Inputs and intermediate results of one orchestration run."""

    ancestor: str
    incoming: str
    current: str
    file_path: str
    options: ResolveOptions = Field(default_factory=ResolveOptions)
    providers: list[ProviderConfig] = Field(default_factory=list)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    system_prompt: str | None = None
    adapter_factory: Any = Field(
        default=ProviderAdapter,
        description="Callable building a ProviderAdapter from a config",
    )

    diff: ThreeWayDiffResult | None = None
    outcome: ResolutionOutcome | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def provider(self, name: str) -> ProviderConfig | None:
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def adapter_for(self, provider: ProviderConfig) -> ProviderAdapter:
        return self.adapter_factory(
            provider,
            system_prompt=self.system_prompt,
            retries=self.engine.provider_retries,
        )

    def context(self) -> ConflictContext:
        return ConflictContext(
            ancestor=self.ancestor,
            incoming=self.incoming,
            current=self.current,
            file_path=self.file_path,
            conflicts=self.diff.conflicts if self.diff else (),
        )


def no_conflicts_result(state: ResolutionState) -> OrchestrationResult:
    return OrchestrationResult(
        status=RunStatus.NO_CONFLICTS,
        success=True,
        resolved_content=state.current,
        manual_review_required=False,
    )


def manual_review_result(
    state: ResolutionState, reason: str | None = None
) -> OrchestrationResult:
    """Keep the current content and tell the caller what needs a human."""
    conflicts = state.diff.conflicts if state.diff else ()
    suggestions = [
        f"Line {c.line_number}: {c.kind.label} conflict needs manual review"
        for c in conflicts
    ]
    if reason:
        suggestions.append(reason)
    if state.outcome is not None:
        suggestions.extend(state.outcome.suggestions)

    return OrchestrationResult(
        status=RunStatus.MANUAL_REVIEW,
        success=False,
        resolved_content=state.current,
        outcome=state.outcome,
        manual_review_required=True,
        suggestions=tuple(suggestions),
        conflicts=conflicts,
    )


def resolved_result(state: ResolutionState) -> OrchestrationResult:
    """Accept state.outcome, validating and reporting on it."""
    outcome = state.outcome
    validation = validate(
        outcome.resolved_code,
        state.ancestor,
        state.incoming,
        min_preservation=state.engine.min_preservation,
        min_integration=state.engine.min_integration,
        max_size_delta=state.engine.max_size_delta,
    )
    return OrchestrationResult(
        status=RunStatus.RESOLVED,
        success=True,
        resolved_content=outcome.resolved_code,
        outcome=outcome,
        manual_review_required=False,
        suggestions=outcome.suggestions + validation.suggestions,
        conflicts=state.diff.conflicts,
        validation=validation,
        report=render(
            state.diff,
            {},
            validation,
            outcome,
            resolved=len(state.diff.conflicts),
        ),
    )
