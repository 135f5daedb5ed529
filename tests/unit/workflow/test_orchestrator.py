"""Tests for the resolution workflow end to end.

Providers are FunctionModel-backed adapters served by ScriptedAdapters.
"""

import asyncio
import json

from conftest import ScriptedAdapters, make_provider
from pydantic_ai.exceptions import ModelAPIError, ModelHTTPError
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import FunctionModel

from patchmerge.core.config import EngineConfig
from patchmerge.engine.models import ResolveOptions, RunStatus
from patchmerge.orchestrator import ResolutionOrchestrator

ANCESTOR = "x = 1;"
INCOMING = "x = 2;"
CURRENT = "x = 3;"


def _reply(code="x = 23;", confidence=0.9, review=False):
    return json.dumps({
        "resolvedCode": code,
        "explanation": "combined both edits",
        "confidence": confidence,
        "suggestions": ["double check x"],
        "requiresManualReview": review,
    })


def _down():
    raise ModelHTTPError(status_code=503, model_name="m", body="down")


def _unreachable():
    raise ModelAPIError(model_name="m", message="Connection error.")


def _orchestrator(replies, engine=None, system_prompt=None):
    factory = ScriptedAdapters(replies)
    orchestrator = ResolutionOrchestrator(
        providers=[make_provider(name) for name in replies],
        engine=engine,
        system_prompt=system_prompt,
        adapter_factory=factory,
    )
    return orchestrator, factory


def _run(orchestrator, ancestor=ANCESTOR, incoming=INCOMING,
         current=CURRENT, options=None):
    return asyncio.run(orchestrator.run(
        ancestor, incoming, current, "src/x.js", options
    ))


def test_no_conflicts_returns_current_without_providers():
    orchestrator, factory = _orchestrator({"alpha": _reply()})

    result = _run(orchestrator, "foo()", "foo()", "foo()")

    assert result.status is RunStatus.NO_CONFLICTS
    assert result.success
    assert result.resolved_content == "foo()"
    assert not result.manual_review_required
    assert factory.calls == []


def test_confident_provider_is_accepted():
    orchestrator, factory = _orchestrator({"alpha": _reply(confidence=0.9)})

    result = _run(orchestrator)

    assert result.status is RunStatus.RESOLVED
    assert result.success
    assert result.resolved_content == "x = 23;"
    assert result.outcome.provider == "alpha"
    assert result.validation.is_valid
    assert "Provider outcome" in result.report
    assert "Resolved conflicts:   1" in result.report
    assert "Unresolved conflicts: 0" in result.report
    assert "double check x" in result.suggestions


def test_low_confidence_goes_to_manual_review():
    orchestrator, _ = _orchestrator({"alpha": _reply(confidence=0.6)})

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert not result.success
    assert result.manual_review_required
    assert result.resolved_content == CURRENT
    assert result.outcome.confidence == 0.6
    assert len(result.conflicts) == 1


def test_confidence_equal_to_threshold_is_rejected():
    orchestrator, _ = _orchestrator(
        {"alpha": _reply(confidence=0.7)},
        engine=EngineConfig(acceptance_confidence=0.7),
    )

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW


def test_provider_asking_for_review_is_not_accepted():
    orchestrator, _ = _orchestrator(
        {"alpha": _reply(confidence=0.95, review=True)}
    )

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert any("asked for manual review" in s for s in result.suggestions)


def test_free_text_reply_goes_to_manual_review():
    orchestrator, _ = _orchestrator({"alpha": "I fixed it"})

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert result.outcome.resolved_code == "I fixed it"
    assert result.outcome.confidence == 0.3


def test_failed_provider_degrades_to_manual_review():
    orchestrator, _ = _orchestrator({"alpha": _down})

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert result.outcome.confidence == 0.0
    assert result.outcome.requires_manual_review
    assert result.outcome.resolved_code == CURRENT
    assert result.resolved_content == CURRENT


def test_disabled_providers_skip_straight_to_review():
    orchestrator, factory = _orchestrator({"alpha": _reply()})

    result = _run(orchestrator, options=ResolveOptions(use_providers=False))

    assert result.status is RunStatus.MANUAL_REVIEW
    assert result.outcome is None
    assert factory.calls == []
    assert "Line 1: ContextConflict conflict needs manual review" in (
        result.suggestions
    )


def test_no_configured_providers_means_manual_review():
    orchestrator = ResolutionOrchestrator()

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert "No text-generation providers are configured" in result.suggestions


def test_preferred_provider_is_used():
    orchestrator, factory = _orchestrator({
        "alpha": _reply(code="from alpha"),
        "beta": _reply(code="from beta"),
    })

    result = _run(orchestrator, options=ResolveOptions(provider="beta"))

    assert result.resolved_content == "from beta"
    assert [name for name, _, _ in factory.calls] == ["beta"]


def test_first_provider_is_the_default():
    orchestrator, factory = _orchestrator({
        "alpha": _reply(code="from alpha"),
        "beta": _reply(code="from beta"),
    })

    result = _run(orchestrator)

    assert result.resolved_content == "from alpha"


def test_unknown_preferred_provider_means_manual_review():
    orchestrator, _ = _orchestrator({"alpha": _reply()})

    result = _run(orchestrator, options=ResolveOptions(provider="gamma"))

    assert result.status is RunStatus.MANUAL_REVIEW
    assert "Provider 'gamma' is not configured" in result.suggestions


def test_ensemble_picks_only_confident_outcome():
    orchestrator, factory = _orchestrator({
        "alpha": _reply(code="unsure", confidence=0.99, review=True),
        "beta": _reply(code="from beta", confidence=0.8),
        "gamma": _down,
    })

    result = _run(orchestrator, options=ResolveOptions(ensemble=True))

    assert result.status is RunStatus.RESOLVED
    assert result.resolved_content == "from beta"
    assert result.outcome.provider == "beta"
    assert sorted(name for name, _, _ in factory.calls) == [
        "alpha", "beta", "gamma"
    ]


def test_ensemble_with_all_providers_failing():
    orchestrator, _ = _orchestrator({"alpha": _down, "beta": _down})

    result = _run(orchestrator, options=ResolveOptions(ensemble=True))

    assert result.status is RunStatus.MANUAL_REVIEW
    assert result.outcome.provider == "alpha"
    assert result.outcome.confidence == 0.0


def test_system_prompt_and_retries_reach_adapters():
    orchestrator, factory = _orchestrator(
        {"alpha": _reply()},
        engine=EngineConfig(provider_retries=3),
        system_prompt="Be careful.",
    )

    _run(orchestrator)

    assert factory.calls == [("alpha", "Be careful.", 3)]


def test_unexpected_error_ends_in_manual_review():
    def explode(config, system_prompt=None, retries=1):
        raise RuntimeError("factory broke")

    orchestrator = ResolutionOrchestrator(
        providers=[make_provider("alpha")], adapter_factory=explode
    )

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert "Automatic resolution failed: factory broke" in result.suggestions


def test_runs_do_not_share_state():
    orchestrator, _ = _orchestrator({"alpha": _reply(confidence=0.9)})

    first = _run(orchestrator)
    second = _run(orchestrator, "foo()", "foo()", "foo()")

    assert first.status is RunStatus.RESOLVED
    assert second.status is RunStatus.NO_CONFLICTS
    assert second.outcome is None


def test_unreachable_provider_degrades_to_manual_review():
    orchestrator, _ = _orchestrator({"alpha": _unreachable})

    result = _run(orchestrator)

    assert result.status is RunStatus.MANUAL_REVIEW
    assert result.outcome is not None
    assert result.outcome.provider == "alpha"
    assert result.outcome.confidence == 0.0
    assert result.outcome.resolved_code == CURRENT


def test_ensemble_calls_providers_concurrently():
    names = ("alpha", "beta", "gamma")
    arrived = set()
    everyone_in = asyncio.Event()

    def rendezvous(name, confidence):
        async def respond(messages, info):
            arrived.add(name)
            if len(arrived) == len(names):
                everyone_in.set()
            # Only returns once every provider has been called
            await asyncio.wait_for(everyone_in.wait(), timeout=5)
            return ModelResponse(parts=[TextPart(_reply(
                code=f"from {name}", confidence=confidence
            ))])
        return FunctionModel(respond)

    orchestrator, _ = _orchestrator({
        "alpha": rendezvous("alpha", 0.75),
        "beta": rendezvous("beta", 0.95),
        "gamma": rendezvous("gamma", 0.8),
    })

    result = _run(orchestrator, options=ResolveOptions(ensemble=True))

    assert arrived == set(names)
    assert result.status is RunStatus.RESOLVED
    assert result.resolved_content == "from beta"
