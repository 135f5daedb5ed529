"""ResolveSingle node - ask one provider."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from patchmerge.core.log import logger
from patchmerge.workflow.nodes.evaluate import Evaluate
from patchmerge.workflow.state import ResolutionState


@dataclass
class ResolveSingle(BaseNode[ResolutionState]):
    """Resolve with the named provider; a failure becomes a
    zero-confidence outcome."""

    provider: str

    async def run(self, ctx: GraphRunContext[ResolutionState]) -> Evaluate:
        config = ctx.state.provider(self.provider)
        logger.info(f"Resolving with provider '{self.provider}'")

        adapter = ctx.state.adapter_for(config)
        result = await adapter.resolve_result(ctx.state.context())
        ctx.state.outcome = result.collapse(ctx.state.current)
        return Evaluate()
