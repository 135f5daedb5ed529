"""ResolveEnsemble node - ask every provider and keep the best answer."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from patchmerge.core.log import logger
from patchmerge.engine.models import ResolutionOutcome
from patchmerge.providers.adapter import degraded_outcome
from patchmerge.workflow.nodes.evaluate import Evaluate
from patchmerge.workflow.state import ResolutionState


def select_best(outcomes: list[ResolutionOutcome]) -> ResolutionOutcome:
    """Highest confidence among outcomes not asking for manual review.

    Ties go to the earlier outcome. When every outcome asks for
    review, the first one is returned.
    """
    best = None
    for outcome in outcomes:
        if outcome.requires_manual_review:
            continue
        if best is None or outcome.confidence > best.confidence:
            best = outcome
    return best if best is not None else outcomes[0]


@dataclass
class ResolveEnsemble(BaseNode[ResolutionState]):
    """Fan out to all configured providers concurrently, then reduce."""

    async def run(self, ctx: GraphRunContext[ResolutionState]) -> Evaluate:
        state = ctx.state
        context = state.context()
        adapters = [state.adapter_for(p) for p in state.providers]

        logger.info(
            f"Resolving with ensemble of {len(adapters)} providers",
            providers=[a.name for a in adapters],
        )

        results = await asyncio.gather(
            *(adapter.resolve_result(context) for adapter in adapters),
            return_exceptions=True,
        )

        outcomes = []
        for adapter, result in zip(adapters, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Provider '{adapter.name}' raised unexpectedly",
                    provider=adapter.name,
                    _exc_info=result,
                )
                outcomes.append(
                    degraded_outcome(adapter.name, result, state.current)
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(result.collapse(state.current))

        state.outcome = select_best(outcomes)
        logger.info(
            f"Ensemble picked '{state.outcome.provider}' "
            f"(confidence {state.outcome.confidence:.2f})",
            confidences={o.provider: o.confidence for o in outcomes},
        )
        return Evaluate()
