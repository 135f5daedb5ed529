"""CLI command modules for patchmerge."""

from patchmerge.command.analyze import AnalyzeCommand
from patchmerge.command.apply import ApplyCommand
from patchmerge.command.auto_resolve import AutoResolveCommand
from patchmerge.command.providers import ProvidersCommand
from patchmerge.command.resolve import ResolveCommand
from patchmerge.command.validate import ValidateCommand

__all__ = [
    "AnalyzeCommand",
    "ApplyCommand",
    "AutoResolveCommand",
    "ProvidersCommand",
    "ResolveCommand",
    "ValidateCommand",
]
