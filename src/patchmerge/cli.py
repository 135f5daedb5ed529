#!/usr/bin/env python3
"""patchmerge CLI - three-way conflict resolution for patch submissions."""

import asyncio
import sys

from pydantic_settings import (
    CliApp,
    CliSubCommand,
    SettingsConfigDict,
    get_subcommand,
)

from patchmerge.command import (
    AnalyzeCommand,
    ApplyCommand,
    AutoResolveCommand,
    ProvidersCommand,
    ResolveCommand,
    ValidateCommand,
)
from patchmerge.command.base import EXIT_USAGE
from patchmerge.core.config import State
from patchmerge.core.log import logger


class CliState(State):
    """Detect and resolve line conflicts between an ancestor, an
    incoming patch and the current version of a file.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.engine.acceptance-confidence 0.8)
    2. YAML: package defaults, user config, ./patchmerge.yaml, --include
    3. .env file
    4. Environment variables (PATCHMERGE_CONFIG__RUN_NAME=review)

    Providers are usually configured in YAML, or as JSON:
      --config.providers '[{"name": "deepseek", "endpoint": "...",
      "credential": "...", "model": "deepseek-chat"}]'
    """

    analyze: CliSubCommand[AnalyzeCommand]
    apply: CliSubCommand[ApplyCommand]
    validate_resolution: CliSubCommand[ValidateCommand]
    auto_resolve: CliSubCommand[AutoResolveCommand]
    resolve: CliSubCommand[ResolveCommand]
    providers: CliSubCommand[ProvidersCommand]

    model_config = SettingsConfigDict(cli_kebab_case=True)

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(EXIT_USAGE)

        with self.config:
            try:
                exit_code = asyncio.run(subcommand.run(self))
            except ValueError as e:
                logger.error(f"{type(subcommand).__name__} failed: {e}")
                exit_code = EXIT_USAGE
        raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
