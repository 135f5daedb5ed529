"""Conflict resolution through one OpenAI-compatible chat provider."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass

from openai import APIError
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_ai import Agent
from pydantic_ai.exceptions import (
    ModelAPIError,
    ModelHTTPError,
    UnexpectedModelBehavior,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from patchmerge.core.config import ProviderConfig
from patchmerge.core.log import logger
from patchmerge.engine.errors import MalformedProviderResponse, ProviderUnavailable
from patchmerge.engine.models import ConflictRecord, ResolutionOutcome

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert at resolving source code merge conflicts. "
    "You always answer with a single JSON object and nothing else."
)
DEFAULT_EXPLANATION = "Provider returned a solution"

# Conflicts listed individually in the prompt; the full versions follow
MAX_LISTED_CONFLICTS = 50

# First "{" to last "}"
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class ConflictContext:
    """Everything a provider is shown about one file."""

    ancestor: str
    incoming: str
    current: str
    file_path: str
    conflicts: tuple[ConflictRecord, ...] = ()


class ProviderReply(BaseModel):
    """Shape of the JSON object a provider is asked to produce."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    resolved_code: str
    explanation: str = DEFAULT_EXPLANATION
    confidence: float = 0.5
    suggestions: list[str] = Field(default_factory=list)
    requires_manual_review: bool = False

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        if 0.0 <= value <= 1.0:
            return value
        clamped = min(1.0, max(0.0, value))
        logger.warning(
            f"Provider confidence {value} outside [0, 1], "
            f"clamped to {clamped}",
            confidence=value,
        )
        return clamped


class ProviderProbe(BaseModel):
    """Result of a connectivity check against one provider."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    model: str
    ok: bool
    latency_ms: float | None = None
    status: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProviderResult:
    """Either an outcome or the reason the provider could not give one."""

    provider: str
    outcome: ResolutionOutcome | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not None

    def collapse(self, current: str = "") -> ResolutionOutcome:
        """The outcome, or a zero-confidence stand-in carrying current
        on failure."""
        if self.outcome is not None:
            return self.outcome
        return degraded_outcome(self.provider, self.error, current)


def degraded_outcome(
    provider: str, error: Exception | None, current: str = ""
) -> ResolutionOutcome:
    """Zero-confidence outcome standing in for a failed provider call.

    The current content is carried unchanged so that the outcome never
    proposes an empty file.
    """
    return ResolutionOutcome(
        resolved_code=current,
        explanation=f"Provider '{provider}' failed: {error}",
        confidence=0.0,
        suggestions=(
            f"Check the endpoint, credential and status of '{provider}'",
            "Resolve the conflicts manually or retry later",
        ),
        requires_manual_review=True,
        provider=provider,
    )


def build_prompt(context: ConflictContext) -> str:
    """Instruction embedding the three versions and the conflict list."""
    listed = context.conflicts[:MAX_LISTED_CONFLICTS]
    conflict_lines = [
        f"- line {c.line_number} [{c.kind.label}]: "
        f"ancestor={c.ancestor_line!r} incoming={c.incoming_line!r} "
        f"current={c.current_line!r}"
        for c in listed
    ]
    hidden = len(context.conflicts) - len(listed)
    if hidden > 0:
        conflict_lines.append(f"- ... and {hidden} more")

    return (
        f"Resolve the merge conflicts in `{context.file_path}`.\n\n"
        f"The ancestor is the common original. The incoming version is "
        f"the patch being applied. The current version is what the "
        f"target holds today. Produce a merged file that keeps the "
        f"intent of both the incoming and the current changes.\n\n"
        f"Detected conflicts ({len(context.conflicts)}):\n"
        + "\n".join(conflict_lines)
        + "\n\n"
        f"=== ANCESTOR ===\n{context.ancestor}\n=== END ANCESTOR ===\n\n"
        f"=== INCOMING ===\n{context.incoming}\n=== END INCOMING ===\n\n"
        f"=== CURRENT ===\n{context.current}\n=== END CURRENT ===\n\n"
        "Reply with only a JSON object of this form:\n"
        "{\n"
        '  "resolvedCode": "<complete merged file>",\n'
        '  "explanation": "<what you did and why>",\n'
        '  "confidence": <number between 0 and 1>,\n'
        '  "suggestions": ["<follow-up for a reviewer>", ...],\n'
        '  "requiresManualReview": <true or false>\n'
        "}\n"
    )


def _read_reply(text: str) -> ProviderReply:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedProviderResponse(f"invalid JSON: {e.msg}") from e
    if not isinstance(payload, dict):
        raise MalformedProviderResponse("reply is not a JSON object")
    try:
        return ProviderReply.model_validate(payload)
    except ValidationError as e:
        raise MalformedProviderResponse(
            f"unexpected fields: {e.error_count()} errors"
        ) from e


def parse_reply(raw: str, provider: str | None = None) -> ResolutionOutcome:
    """Turn raw provider text into an outcome. Never raises.

    - JSON object found and readable: fields as given, with defaults
    - no JSON object: raw text at confidence 0.3, manual review
    - JSON object unreadable: raw text at confidence 0.1, manual review
    """
    match = _JSON_OBJECT.search(raw)
    if match is None:
        logger.warning(
            "Provider reply contains no JSON object",
            provider=provider,
            reply_length=len(raw),
        )
        return ResolutionOutcome(
            resolved_code=raw,
            explanation=(
                "Provider reply was not in the expected format; "
                "the raw text is returned as-is"
            ),
            confidence=0.3,
            suggestions=("Review the raw provider reply before using it",),
            requires_manual_review=True,
            provider=provider,
        )

    try:
        reply = _read_reply(match.group(0))
    except MalformedProviderResponse as e:
        logger.warning(
            f"Provider reply could not be parsed: {e}",
            provider=provider,
        )
        return ResolutionOutcome(
            resolved_code=raw,
            explanation=f"Provider reply could not be parsed: {e}",
            confidence=0.1,
            suggestions=("Review the raw provider reply before using it",),
            requires_manual_review=True,
            provider=provider,
        )

    return ResolutionOutcome(
        resolved_code=reply.resolved_code,
        explanation=reply.explanation,
        confidence=reply.confidence,
        suggestions=tuple(reply.suggestions),
        requires_manual_review=reply.requires_manual_review,
        provider=provider,
    )


class ProviderAdapter:
    """Resolves conflicts by asking one configured provider."""

    def __init__(
        self,
        config: ProviderConfig,
        system_prompt: str | None = None,
        retries: int = 1,
        model: Model | None = None,
    ):
        """Bind the adapter to a provider.

        Args:
            config: Provider endpoint, credential, model and limits
            system_prompt: Override for DEFAULT_SYSTEM_PROMPT
            retries: Agent retries per call
            model: Prebuilt pydantic-ai model to use instead of an
                OpenAI-compatible one built from config
        """
        self.config = config
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.retries = retries
        self._model = model

    @property
    def name(self) -> str:
        return self.config.name

    def _create_model(self) -> Model:
        if self._model is not None:
            return self._model
        provider = OpenAIProvider(
            base_url=self.config.base_url,
            api_key=self.config.credential.get_secret_value(),
        )
        return OpenAIChatModel(self.config.model, provider=provider)

    def _create_agent(self) -> Agent:
        return Agent(
            self._create_model(),
            system_prompt=self.system_prompt,
            retries=self.retries,
        )

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        """One chat completion; transport and status errors become
        ProviderUnavailable."""
        settings = ModelSettings(
            max_tokens=max_tokens,
            temperature=self.config.temperature,
        )
        agent = self._create_agent()
        try:
            result = await agent.run(prompt, model_settings=settings)
        except ModelHTTPError as e:
            raise ProviderUnavailable(
                self.name, detail=str(e.body), status=e.status_code
            ) from e
        except (ModelAPIError, APIError, UnexpectedModelBehavior) as e:
            raise ProviderUnavailable(self.name, detail=str(e)) from e
        return result.output

    async def resolve(self, context: ConflictContext) -> ResolutionOutcome:
        """Ask the provider for a resolution of context.

        Raises:
            ProviderUnavailable: On transport failure or error status
        """
        prompt = build_prompt(context)
        logger.debug(
            f"Sending {len(prompt)} char prompt to '{self.name}'",
            provider=self.name,
            model=self.config.model,
            conflicts=len(context.conflicts),
        )
        logger.trace(f"Prompt for '{self.name}':\n{prompt}")

        with logger.span(
            f"Provider resolution: {self.name}",
            provider=self.name,
            file_path=context.file_path,
        ):
            raw = await self._complete(prompt, self.config.max_output_tokens)

        logger.trace(f"Reply from '{self.name}':\n{raw}")
        outcome = parse_reply(raw, provider=self.name)
        logger.info(
            f"Provider '{self.name}' answered with confidence "
            f"{outcome.confidence:.2f}",
            provider=self.name,
            confidence=outcome.confidence,
            requires_manual_review=outcome.requires_manual_review,
        )
        return outcome

    async def resolve_result(self, context: ConflictContext) -> ProviderResult:
        """resolve(), with provider failure returned as a value."""
        try:
            outcome = await self.resolve(context)
        except ProviderUnavailable as e:
            logger.warning(str(e), provider=self.name, status=e.status)
            return ProviderResult(provider=self.name, error=e)
        return ProviderResult(provider=self.name, outcome=outcome)

    async def probe(self) -> ProviderProbe:
        """Send a minimal request and report whether it succeeded."""
        started = time.perf_counter()
        try:
            await self._complete("Reply with the single word OK.", 16)
        except ProviderUnavailable as e:
            return ProviderProbe(
                name=self.name,
                model=self.config.model,
                ok=False,
                status=e.status,
                error=e.detail,
            )
        return ProviderProbe(
            name=self.name,
            model=self.config.model,
            ok=True,
            latency_ms=round((time.perf_counter() - started) * 1000, 1),
        )
