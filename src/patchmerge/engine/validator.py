"""Structural and content checks for a resolved file.

A resolution is judged on two axes. Issues are structural faults
(empty content, unbalanced delimiters) and make the result invalid.
Warnings are content signals (ancestor lines that vanished, incoming
lines that never landed, a large change in size) that a reviewer
should look at but that do not invalidate the result.
"""

from patchmerge.core.log import logger
from patchmerge.engine.differ import split_lines
from patchmerge.engine.models import ValidationOutcome

MIN_PRESERVATION = 0.3
MIN_INTEGRATION = 0.5
MAX_SIZE_DELTA = 0.5

DELIMITERS = (
    ("{", "}", "braces"),
    ("(", ")", "parentheses"),
    ("[", "]", "brackets"),
)


def _non_blank(text: str) -> list[str]:
    return [line for line in split_lines(text) if line.strip()]


def delimiter_issues(code: str) -> list[str]:
    """One issue per delimiter pair whose counts differ."""
    issues = []
    for opening, closing, name in DELIMITERS:
        opened = code.count(opening)
        closed = code.count(closing)
        if opened != closed:
            issues.append(
                f"Unbalanced {name}: {opened} '{opening}' "
                f"vs {closed} '{closing}'"
            )
    return issues


def carried_ratio(source: str, resolved_lines: list[str]) -> float:
    """Fraction of non-blank source lines found inside some resolved line.

    A source with no non-blank lines counts as fully carried.
    """
    wanted = [line.strip() for line in _non_blank(source)]
    if not wanted:
        return 1.0
    found = sum(
        1 for text in wanted
        if any(text in line for line in resolved_lines)
    )
    return found / len(wanted)


def validate(
    resolved_code: str,
    ancestor_code: str,
    incoming_code: str,
    min_preservation: float = MIN_PRESERVATION,
    min_integration: float = MIN_INTEGRATION,
    max_size_delta: float = MAX_SIZE_DELTA,
) -> ValidationOutcome:
    """Check a candidate resolution against the versions it merges.

    Args:
        resolved_code: Candidate resolved content
        ancestor_code: Common base content
        incoming_code: Patch content
        min_preservation: Warn below this share of ancestor lines kept
        min_integration: Warn below this share of incoming lines kept
        max_size_delta: Warn when the non-blank line count changes by
            more than this fraction of the ancestor's

    Returns:
        ValidationOutcome; is_valid is True iff there are no issues
    """
    if not resolved_code.strip():
        return ValidationOutcome(
            is_valid=False,
            issues=("Resolved content is empty",),
            suggestions=("Provide resolved content before applying",),
            preservation_ratio=0.0,
            integration_ratio=0.0,
        )

    issues = delimiter_issues(resolved_code)
    warnings = []
    suggestions = []

    if issues:
        suggestions.append(
            "Check for missing or extra closing delimiters"
        )

    resolved_lines = split_lines(resolved_code)
    preservation = carried_ratio(ancestor_code, resolved_lines)
    integration = carried_ratio(incoming_code, resolved_lines)

    if preservation < min_preservation:
        warnings.append(
            f"Original content may have been lost "
            f"({preservation:.0%} of ancestor lines preserved)"
        )
        suggestions.append(
            "Confirm that removed ancestor lines were meant to go"
        )

    if integration < min_integration:
        warnings.append(
            f"Incoming changes may not be integrated "
            f"({integration:.0%} of incoming lines present)"
        )
        suggestions.append(
            "Confirm that the patch's changes made it into the result"
        )

    ancestor_size = len(_non_blank(ancestor_code))
    resolved_size = len(_non_blank(resolved_code))
    if ancestor_size:
        delta = abs(resolved_size - ancestor_size) / ancestor_size
        if delta > max_size_delta:
            warnings.append(
                f"Resolved content has {resolved_size} non-blank lines "
                f"against {ancestor_size} in the ancestor ({delta:.0%} change)"
            )
            suggestions.append(
                "Review the result for duplicated or dropped blocks"
            )

    logger.debug(
        f"Validation: {len(issues)} issues, {len(warnings)} warnings",
        preservation_ratio=round(preservation, 3),
        integration_ratio=round(integration, 3),
    )

    return ValidationOutcome(
        is_valid=not issues,
        issues=tuple(issues),
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
        preservation_ratio=preservation,
        integration_ratio=integration,
    )
