"""Data model shared by the resolution engine.

Python attributes are snake_case; serialized with by_alias=True the
models produce the camelCase keys the web client expects.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

LineSequence = tuple[str, ...]


class WireModel(BaseModel):
    """Base for models that cross the HTTP boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ConflictKind(str, Enum):
    """How the three versions disagree at one line.

    Rules are checked in declaration order; the first match wins.
    """

    ADD_ADD = "add_add"
    DELETE_ADD = "delete_add"
    MODIFY_MODIFY = "modify_modify"
    CONTEXT_CONFLICT = "context_conflict"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    ConflictKind.ADD_ADD: "AddAdd",
    ConflictKind.DELETE_ADD: "DeleteAdd",
    ConflictKind.MODIFY_MODIFY: "ModifyModify",
    ConflictKind.CONTEXT_CONFLICT: "ContextConflict",
}


class ConflictRecord(WireModel):
    """A single conflicting line."""

    line_number: int = Field(ge=1, description="1-based line number")
    ancestor_line: str
    incoming_line: str
    current_line: str
    kind: ConflictKind


class ThreeWayDiffResult(WireModel):
    """Line sequences of all three versions and the conflicts found."""

    ancestor_lines: LineSequence
    incoming_lines: LineSequence
    current_lines: LineSequence
    conflicts: tuple[ConflictRecord, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def line_count(self) -> int:
        """Length of the longest of the three sequences."""
        return max(
            len(self.ancestor_lines),
            len(self.incoming_lines),
            len(self.current_lines),
        )

    def conflict_at(self, line_number: int) -> ConflictRecord | None:
        for conflict in self.conflicts:
            if conflict.line_number == line_number:
                return conflict
        return None


# ============================================================
# RESOLUTION CHOICES
# ============================================================

class UseAncestor(WireModel):
    """Keep the ancestor's line."""

    kind: Literal["ancestor"] = "ancestor"


class UseIncoming(WireModel):
    """Take the incoming patch's line."""

    kind: Literal["incoming"] = "incoming"


class UseCustom(WireModel):
    """Replace the line with caller-supplied content."""

    kind: Literal["custom"] = "custom"
    content: str


ResolutionChoice = Annotated[
    UseAncestor | UseIncoming | UseCustom,
    Field(discriminator="kind"),
]

# Line number -> choice. Absent line numbers keep the current line.
ResolutionMap = dict[int, ResolutionChoice]

resolution_map_adapter = TypeAdapter(ResolutionMap)


class AutoResolution(WireModel):
    """Output of the heuristic resolver."""

    resolved_any: bool
    resolutions: ResolutionMap = Field(default_factory=dict)
    explanation: str = ""


# ============================================================
# OUTCOMES
# ============================================================

class ResolutionOutcome(WireModel):
    """A proposed resolution of a whole file."""

    resolved_code: str
    explanation: str
    confidence: float = Field(ge=0.0, le=1.0)
    suggestions: tuple[str, ...] = ()
    requires_manual_review: bool = False
    provider: str | None = Field(
        default=None,
        description="Provider that produced this outcome, if any",
    )


class ValidationOutcome(WireModel):
    """Structural checks and preservation scores for a resolved file."""

    is_valid: bool
    issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    preservation_ratio: float = 1.0
    integration_ratio: float = 1.0


class ResolveOptions(WireModel):
    """Caller's choice of resolution strategy."""

    use_providers: bool = True
    provider: str | None = Field(
        default=None,
        description="Preferred single provider; first configured if unset",
    )
    ensemble: bool = Field(
        default=False,
        description="Ask every configured provider and arbitrate",
    )


class RunStatus(str, Enum):
    """Terminal states of an orchestration run."""

    NO_CONFLICTS = "no_conflicts"
    RESOLVED = "resolved"
    MANUAL_REVIEW = "manual_review"


class OrchestrationResult(WireModel):
    """What ResolutionOrchestrator.run hands back to the caller."""

    status: RunStatus
    success: bool
    resolved_content: str
    outcome: ResolutionOutcome | None = None
    manual_review_required: bool
    suggestions: tuple[str, ...] = ()
    conflicts: tuple[ConflictRecord, ...] = ()
    validation: ValidationOutcome | None = None
    report: str | None = None


__all__ = [
    "AutoResolution",
    "ConflictKind",
    "ConflictRecord",
    "LineSequence",
    "OrchestrationResult",
    "ResolutionChoice",
    "ResolutionMap",
    "ResolutionOutcome",
    "ResolveOptions",
    "RunStatus",
    "ThreeWayDiffResult",
    "UseAncestor",
    "UseCustom",
    "UseIncoming",
    "ValidationOutcome",
    "resolution_map_adapter",
]
