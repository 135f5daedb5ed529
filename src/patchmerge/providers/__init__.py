"""Text-generation provider access."""

from patchmerge.providers.adapter import (
    ConflictContext,
    ProviderAdapter,
    ProviderProbe,
    ProviderResult,
    build_prompt,
    degraded_outcome,
    parse_reply,
)

__all__ = [
    "ConflictContext",
    "ProviderAdapter",
    "ProviderProbe",
    "ProviderResult",
    "build_prompt",
    "degraded_outcome",
    "parse_reply",
]
