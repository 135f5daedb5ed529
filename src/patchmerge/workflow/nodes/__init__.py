"""Workflow nodes for the resolution state machine."""

from patchmerge.workflow.nodes.analyze import Analyze
from patchmerge.workflow.nodes.evaluate import Evaluate
from patchmerge.workflow.nodes.manual_review import ManualReview
from patchmerge.workflow.nodes.resolve_ensemble import ResolveEnsemble
from patchmerge.workflow.nodes.resolve_single import ResolveSingle

__all__ = [
    "Analyze",
    "ResolveSingle",
    "ResolveEnsemble",
    "Evaluate",
    "ManualReview",
]
