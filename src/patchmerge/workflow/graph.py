"""Graph workflow definition."""

from pydantic_graph import Graph

from patchmerge.core.log import logger
from patchmerge.workflow.nodes import (
    Analyze,
    Evaluate,
    ManualReview,
    ResolveEnsemble,
    ResolveSingle,
)
from patchmerge.workflow.state import ResolutionState


def create_workflow() -> Graph:
    """Create the resolution workflow graph.

    Analyze → [End | ManualReview | ResolveSingle | ResolveEnsemble]
    ResolveSingle / ResolveEnsemble → Evaluate → [End | ManualReview]
    ManualReview → End

    Returns:
        Graph with ResolutionState as state_type
    """
    logger.debug("Building resolution workflow graph")
    return Graph(
        nodes=(
            Analyze,
            ResolveSingle,
            ResolveEnsemble,
            Evaluate,
            ManualReview,
        ),
        state_type=ResolutionState,
    )
