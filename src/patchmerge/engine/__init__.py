"""Three-way conflict analysis and deterministic resolution."""

from patchmerge.engine.apply import apply_resolutions
from patchmerge.engine.autoresolve import auto_resolve
from patchmerge.engine.differ import diff, split_lines
from patchmerge.engine.report import render
from patchmerge.engine.similarity import levenshtein, similarity
from patchmerge.engine.validator import validate

__all__ = [
    "apply_resolutions",
    "auto_resolve",
    "diff",
    "levenshtein",
    "render",
    "similarity",
    "split_lines",
    "validate",
]
