"""Pytest configuration and fixtures for patchmerge tests."""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from patchmerge.core.config import ProviderConfig
from patchmerge.core.log import ConsoleSink, setup_logger
from patchmerge.providers.adapter import ProviderAdapter


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level for the whole session.

    Nothing is sent to logfire.dev and no log files are written.
    """
    test_log_root = Path(tempfile.gettempdir()) / "patchmerge-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


def make_provider(name: str, model: str | None = None) -> ProviderConfig:
    return ProviderConfig(
        name=name,
        endpoint=f"https://{name}.example.com/v1",
        credential=f"sk-{name}-secret",
        model=model or f"{name}-chat",
    )


def replying(reply: str | Callable[[], str]) -> FunctionModel:
    """FunctionModel answering every request with reply.

    reply may be a callable so that tests can raise from inside the
    model, the way a failing HTTP call would.
    """
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        text = reply() if callable(reply) else reply
        return ModelResponse(parts=[TextPart(text)])

    return FunctionModel(respond)


class ScriptedAdapters:
    """adapter_factory that serves canned replies per provider name.

    A reply may also be a ready-made FunctionModel. Records every
    system prompt and retry count it was called with.
    """

    def __init__(self, replies: dict[str, str | Callable[[], str]]):
        self.replies = replies
        self.calls = []

    def __call__(self, config, system_prompt=None, retries=1):
        self.calls.append((config.name, system_prompt, retries))
        reply = self.replies[config.name]
        return ProviderAdapter(
            config,
            system_prompt=system_prompt,
            retries=retries,
            model=reply if isinstance(reply, FunctionModel) else replying(reply),
        )


@pytest.fixture
def alpha():
    return make_provider("alpha")


@pytest.fixture
def beta():
    return make_provider("beta")
