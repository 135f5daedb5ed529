"""Plain-text resolution report."""

from collections import Counter

from patchmerge.engine.models import (
    ConflictKind,
    ResolutionMap,
    ResolutionOutcome,
    ThreeWayDiffResult,
    ValidationOutcome,
)

_CHOICE_LABELS = {
    "ancestor": "use ancestor",
    "incoming": "use incoming",
    "custom": "custom content",
}


def _section(title: str, lines: list[str]) -> list[str]:
    return [title, "-" * len(title), *lines, ""]


def _bullets(items, empty: str) -> list[str]:
    return [f"  - {item}" for item in items] or [f"  {empty}"]


def render(
    diff: ThreeWayDiffResult,
    resolutions: ResolutionMap,
    validation: ValidationOutcome,
    outcome: ResolutionOutcome | None = None,
    resolved: int | None = None,
) -> str:
    """Render counts, breakdowns and validation results as text.

    resolved overrides the count taken from resolutions, for outcomes
    that settle the whole file at once.
    """
    total = len(diff.conflicts)
    if resolved is None:
        resolved = sum(
            1 for c in diff.conflicts if c.line_number in resolutions
        )

    kinds = Counter(c.kind for c in diff.conflicts)
    choices = Counter(choice.kind for choice in resolutions.values())

    lines = ["Conflict Resolution Report", "=" * 26, ""]

    lines += _section("Summary", [
        f"  Total conflicts:      {total}",
        f"  Resolved conflicts:   {resolved}",
        f"  Unresolved conflicts: {total - resolved}",
    ])

    lines += _section("Conflict kinds", [
        f"  {kind.label}: {kinds[kind]}" for kind in ConflictKind
    ])

    lines += _section("Resolution choices", [
        f"  {label}: {choices[kind]}"
        for kind, label in _CHOICE_LABELS.items()
    ])

    if outcome is not None:
        lines += _section("Provider outcome", [
            f"  Provider:      {outcome.provider or 'n/a'}",
            f"  Confidence:    {outcome.confidence:.2f}",
            f"  Manual review: {'yes' if outcome.requires_manual_review else 'no'}",
            f"  Explanation:   {outcome.explanation}",
        ])

    status = "valid" if validation.is_valid else "INVALID"
    lines += _section("Validation", [
        f"  Status: {status}",
        f"  Ancestor preserved: {validation.preservation_ratio:.0%}",
        f"  Incoming integrated: {validation.integration_ratio:.0%}",
    ])
    lines += _section("Issues", _bullets(validation.issues, "none"))
    lines += _section("Warnings", _bullets(validation.warnings, "none"))
    lines += _section("Suggestions", _bullets(validation.suggestions, "none"))

    return "\n".join(lines).rstrip() + "\n"
