"""Apply a resolution map to the current version."""

from typing import assert_never

from patchmerge.engine.models import (
    LineSequence,
    ResolutionChoice,
    ResolutionMap,
    ThreeWayDiffResult,
    UseAncestor,
    UseCustom,
    UseIncoming,
)


def _pick(
    choice: ResolutionChoice, diff: ThreeWayDiffResult, index: int
) -> str | None:
    """Line chosen for position index; None when that side has no line."""
    def at(lines: LineSequence) -> str | None:
        return lines[index] if index < len(lines) else None

    if isinstance(choice, UseAncestor):
        return at(diff.ancestor_lines)
    if isinstance(choice, UseIncoming):
        return at(diff.incoming_lines)
    if isinstance(choice, UseCustom):
        return choice.content
    assert_never(choice)


def apply_resolutions(
    diff: ThreeWayDiffResult, resolutions: ResolutionMap
) -> str:
    """Rewrite the current version according to resolutions.

    Line numbers without a choice keep the current line, and choices
    for lines that are not conflicts are ignored. A choice pointing at
    a side that ends before that line drops the line.

    Args:
        diff: Result of diff() for the three versions
        resolutions: Line number -> choice

    Returns:
        The resolved content, lines joined with "\\n"
    """
    current = diff.current_lines
    lines: list[str | None] = list(current)
    lines.extend("" for _ in range(diff.line_count - len(current)))
    written = set()

    for line_number, choice in resolutions.items():
        if diff.conflict_at(line_number) is None:
            continue
        index = line_number - 1
        lines[index] = _pick(choice, diff, index)
        written.add(index)

    # Drop padding past the end of current that nothing wrote to
    while (
        len(lines) > len(current)
        and (len(lines) - 1) not in written
    ):
        lines.pop()

    return "\n".join(line for line in lines if line is not None)
