"""Evaluate node - accept or reject the winning outcome."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from patchmerge.core.log import logger
from patchmerge.engine.models import OrchestrationResult
from patchmerge.workflow.nodes.manual_review import ManualReview
from patchmerge.workflow.state import ResolutionState, resolved_result


@dataclass
class Evaluate(BaseNode[ResolutionState, None, OrchestrationResult]):
    """Accept the outcome only if it is confident and needs no review."""

    async def run(
        self, ctx: GraphRunContext[ResolutionState]
    ) -> ManualReview | End[OrchestrationResult]:
        outcome = ctx.state.outcome
        threshold = ctx.state.engine.acceptance_confidence

        if outcome.requires_manual_review:
            return ManualReview(
                reason=f"Provider '{outcome.provider}' asked for manual review"
            )
        if outcome.confidence <= threshold:
            return ManualReview(
                reason=(
                    f"Confidence {outcome.confidence:.2f} from "
                    f"'{outcome.provider}' is not above {threshold:.2f}"
                )
            )

        logger.info(
            f"Accepted resolution from '{outcome.provider}' "
            f"(confidence {outcome.confidence:.2f})",
            provider=outcome.provider,
            confidence=outcome.confidence,
        )
        return End(resolved_result(ctx.state))
