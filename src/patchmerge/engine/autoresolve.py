"""Rule-based resolution of simple conflicts."""

from typing import assert_never

from patchmerge.core.log import logger
from patchmerge.engine.models import (
    AutoResolution,
    ConflictKind,
    ConflictRecord,
    ResolutionChoice,
    ThreeWayDiffResult,
    UseCustom,
    UseIncoming,
)
from patchmerge.engine.similarity import similarity

SIMILARITY_THRESHOLD = 0.8


def _propose(
    conflict: ConflictRecord, similarity_threshold: float
) -> tuple[ResolutionChoice, str] | None:
    """Pick a choice for one conflict, with a one-line reason."""
    ancestor = conflict.ancestor_line
    incoming = conflict.incoming_line
    current = conflict.current_line
    kind = conflict.kind

    if kind is ConflictKind.ADD_ADD:
        if not ancestor.strip() and incoming != current:
            return (
                UseCustom(content=f"{incoming} {current}"),
                "kept both additions on one line",
            )
        return None

    if kind is ConflictKind.DELETE_ADD:
        if not incoming.strip() and current.strip():
            return UseIncoming(), "accepted the deletion"
        return None

    if kind is ConflictKind.MODIFY_MODIFY:
        score = similarity(incoming, current)
        if score > similarity_threshold:
            longer = incoming if len(incoming) > len(current) else current
            return (
                UseCustom(content=longer),
                f"near-identical edits (similarity {score:.2f}), "
                f"kept the longer line",
            )
        return None

    if kind is ConflictKind.CONTEXT_CONFLICT:
        return None

    assert_never(kind)


def auto_resolve(
    diff: ThreeWayDiffResult,
    similarity_threshold: float = SIMILARITY_THRESHOLD,
) -> AutoResolution:
    """Resolve the conflicts that fixed rules can settle.

    Conflicts the rules leave alone are absent from the returned map.
    Never calls out and never fails.
    """
    resolutions = {}
    notes = []

    for conflict in diff.conflicts:
        proposal = _propose(conflict, similarity_threshold)
        if proposal is None:
            continue
        choice, reason = proposal
        resolutions[conflict.line_number] = choice
        notes.append(
            f"Line {conflict.line_number} ({conflict.kind.label}): {reason}"
        )

    unresolved = len(diff.conflicts) - len(resolutions)
    if resolutions:
        explanation = (
            f"Automatically resolved {len(resolutions)} of "
            f"{len(diff.conflicts)} conflicts.\n" + "\n".join(notes)
        )
        if unresolved:
            explanation += (
                f"\n{unresolved} conflicts need manual resolution."
            )
    elif diff.conflicts:
        explanation = (
            f"None of the {len(diff.conflicts)} conflicts can be "
            f"resolved automatically."
        )
    else:
        explanation = "No conflicts to resolve."

    logger.debug(
        f"Auto-resolve settled {len(resolutions)} conflicts, "
        f"{unresolved} left",
        resolved=len(resolutions),
        unresolved=unresolved,
    )

    return AutoResolution(
        resolved_any=bool(resolutions),
        resolutions=resolutions,
        explanation=explanation,
    )
