"""Application configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from patchmerge.core.base import BaseConfig
from patchmerge.core.log import Logger
from patchmerge.core.yaml_settings import YamlWithIncludesSettingsSource

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class ProviderConfig(BaseConfig):
    """One OpenAI-compatible chat-completion provider."""

    name: str = Field(
        description="Provider name used for selection and reporting"
    )
    endpoint: str = Field(
        description=(
            "Base URL of the chat-completion API "
            "(e.g., https://api.deepseek.com/v1). A trailing "
            "/chat/completions is accepted and trimmed."
        )
    )
    credential: SecretStr = Field(
        description="Bearer token sent with every request"
    )
    model: str = Field(description="Model name passed in the request body")
    max_output_tokens: int = Field(
        default=4000,
        gt=0,
        description="Upper bound on generated tokens (max_tokens)",
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sampling temperature in [0, 1]",
    )

    @property
    def base_url(self) -> str:
        """Endpoint without a trailing /chat/completions."""
        url = self.endpoint.rstrip("/")
        suffix = "/chat/completions"
        if url.endswith(suffix):
            url = url[: -len(suffix)]
        return url


class EngineConfig(BaseConfig):
    """Thresholds used by the resolution engine."""

    acceptance_confidence: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description=(
            "A provider outcome is accepted only when its confidence "
            "is strictly above this value"
        ),
    )
    similarity_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description=(
            "Heuristic merge of modify/modify lines requires similarity "
            "strictly above this value"
        ),
    )
    min_preservation: float = Field(
        default=0.3,
        description="Warn when less of the ancestor survives than this",
    )
    min_integration: float = Field(
        default=0.5,
        description="Warn when less of the incoming side lands than this",
    )
    max_size_delta: float = Field(
        default=0.5,
        description=(
            "Warn when the non-blank line count moves further than this "
            "fraction away from the ancestor"
        ),
    )
    provider_retries: int = Field(
        default=1,
        ge=0,
        description="Agent retries per provider call",
    )


class Config(BaseConfig):
    """Everything loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    providers: list[ProviderConfig] = Field(
        default_factory=list,
        description="Text-generation providers, in preference order",
    )
    engine: EngineConfig = Field(
        default_factory=EngineConfig,
        description="Resolution thresholds",
    )
    prompts: dict[str, str] = Field(
        default_factory=dict,
        description="Prompt overrides (key: 'system')",
    )
    run_name: str = Field(
        default="default",
        description="Name used for the log directory and service name",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("patchmerge"))
        ),
        description="Root directory for log files",
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Install the global logger from the loaded logger section."""
        from patchmerge.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            run_name=self.run_name,
            console=self.logger.console,
            otlp=self.logger.otlp,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )
        return self

    def close(self):
        from patchmerge.core.log import logger
        logger.close()
        super().close()


# ============================================================
# STATE
# ============================================================

class State(BaseSettings):
    """Loaded configuration plus the CLI-only `include` option."""

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to merge over the defaults. "
            "Use --include on the CLI or include: in a YAML file."
        ),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PATCHMERGE_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init args, YAML, .env, environment, secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = ["Config", "EngineConfig", "ProviderConfig", "State"]
