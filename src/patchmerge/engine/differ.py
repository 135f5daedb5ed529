"""Line-by-line three-way comparison."""

import re

from patchmerge.core.log import logger
from patchmerge.engine.models import (
    ConflictKind,
    ConflictRecord,
    LineSequence,
    ThreeWayDiffResult,
)

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> LineSequence:
    """Split text on line breaks, keeping empty trailing lines.

    An empty string is a single empty line.
    """
    return tuple(_LINE_BREAK.split(text))


def classify(ancestor: str, incoming: str, current: str) -> ConflictKind | None:
    """Classify one line position, or None when there is no conflict."""
    if not ancestor and incoming and current and incoming != current:
        return ConflictKind.ADD_ADD
    if ancestor and not incoming and current:
        return ConflictKind.DELETE_ADD
    if ancestor == current and incoming != ancestor:
        return ConflictKind.MODIFY_MODIFY
    if ancestor != incoming and incoming != current and ancestor != current:
        return ConflictKind.CONTEXT_CONFLICT
    return None


def _line(lines: LineSequence, index: int) -> str:
    return lines[index] if index < len(lines) else ""


def diff(ancestor: str, incoming: str, current: str) -> ThreeWayDiffResult:
    """Compare three versions of a file position by position.

    Positions past the end of a version read as empty lines, so
    trailing insertions and deletions are still seen.

    Args:
        ancestor: Common base content
        incoming: Content proposed by the patch
        current: Content already at the target

    Returns:
        ThreeWayDiffResult with one ConflictRecord per conflicting line
    """
    ancestor_lines = split_lines(ancestor)
    incoming_lines = split_lines(incoming)
    current_lines = split_lines(current)

    line_count = max(
        len(ancestor_lines), len(incoming_lines), len(current_lines)
    )

    conflicts = []
    for index in range(line_count):
        a = _line(ancestor_lines, index)
        i = _line(incoming_lines, index)
        c = _line(current_lines, index)

        kind = classify(a, i, c)
        if kind is None:
            continue

        logger.spew(
            f"Line {index + 1}: {kind.label}",
            line_number=index + 1,
            kind=kind.value,
        )
        conflicts.append(ConflictRecord(
            line_number=index + 1,
            ancestor_line=a,
            incoming_line=i,
            current_line=c,
            kind=kind,
        ))

    logger.debug(
        f"Three-way diff found {len(conflicts)} conflicts "
        f"in {line_count} lines",
        conflict_count=len(conflicts),
        line_count=line_count,
    )

    return ThreeWayDiffResult(
        ancestor_lines=ancestor_lines,
        incoming_lines=incoming_lines,
        current_lines=current_lines,
        conflicts=tuple(conflicts),
    )
