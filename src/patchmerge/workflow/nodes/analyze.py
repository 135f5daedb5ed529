"""Analyze node - diff the three versions and choose a route."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from patchmerge.core.log import logger
from patchmerge.engine.differ import diff
from patchmerge.engine.models import OrchestrationResult
from patchmerge.workflow.nodes.manual_review import ManualReview
from patchmerge.workflow.nodes.resolve_ensemble import ResolveEnsemble
from patchmerge.workflow.nodes.resolve_single import ResolveSingle
from patchmerge.workflow.state import ResolutionState, no_conflicts_result


@dataclass
class Analyze(BaseNode[ResolutionState, None, OrchestrationResult]):
    """Entry node of the resolution workflow."""

    async def run(
        self, ctx: GraphRunContext[ResolutionState]
    ) -> (
        ManualReview
        | ResolveSingle
        | ResolveEnsemble
        | End[OrchestrationResult]
    ):
        """Route on the diff and the caller's options.

        Returns:
            End: No conflicts, current content stands
            ManualReview: Conflicts but no usable provider
            ResolveEnsemble: Ensemble requested
            ResolveSingle: Preferred (or first) provider
        """
        state = ctx.state
        state.diff = diff(state.ancestor, state.incoming, state.current)
        conflicts = len(state.diff.conflicts)

        logger.info(
            f"{state.file_path}: {conflicts} conflicts",
            file_path=state.file_path,
            conflicts=conflicts,
        )

        if not conflicts:
            return End(no_conflicts_result(state))

        options = state.options
        if not options.use_providers:
            return ManualReview(
                reason="Text-generation providers are disabled"
            )
        if not state.providers:
            return ManualReview(
                reason="No text-generation providers are configured"
            )
        if options.ensemble:
            return ResolveEnsemble()

        name = options.provider or state.providers[0].name
        if state.provider(name) is None:
            return ManualReview(
                reason=f"Provider '{name}' is not configured"
            )
        return ResolveSingle(provider=name)
