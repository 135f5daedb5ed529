"""ManualReview node - hand the conflicts back to a human."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from patchmerge.core.log import logger
from patchmerge.engine.models import OrchestrationResult
from patchmerge.workflow.state import ResolutionState, manual_review_result


@dataclass
class ManualReview(BaseNode[ResolutionState, None, OrchestrationResult]):
    """Terminal state: current content is kept, nothing is asserted."""

    reason: str | None = None

    async def run(
        self, ctx: GraphRunContext[ResolutionState]
    ) -> End[OrchestrationResult]:
        result = manual_review_result(ctx.state, self.reason)
        logger.info(
            f"Manual review required for {ctx.state.file_path}",
            file_path=ctx.state.file_path,
            conflicts=len(result.conflicts),
            reason=self.reason,
        )
        return End(result)
