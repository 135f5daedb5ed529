"""Tests for ensemble arbitration."""

from patchmerge.engine.models import ResolutionOutcome
from patchmerge.workflow.nodes.resolve_ensemble import select_best


def _outcome(provider, confidence, review=False):
    return ResolutionOutcome(
        resolved_code=provider,
        explanation="",
        confidence=confidence,
        requires_manual_review=review,
        provider=provider,
    )


def test_highest_confidence_wins():
    outcomes = [_outcome("a", 0.5), _outcome("b", 0.9), _outcome("c", 0.7)]

    assert select_best(outcomes).provider == "b"


def test_outcomes_asking_for_review_are_skipped():
    outcomes = [_outcome("a", 0.99, review=True), _outcome("b", 0.2)]

    assert select_best(outcomes).provider == "b"


def test_ties_go_to_the_earlier_outcome():
    outcomes = [_outcome("a", 0.8), _outcome("b", 0.8)]

    assert select_best(outcomes).provider == "a"


def test_first_outcome_when_all_ask_for_review():
    outcomes = [_outcome("a", 0.1, review=True), _outcome("b", 0.9, review=True)]

    assert select_best(outcomes).provider == "a"
