"""Shared CLI types and context helpers."""

from enum import Enum

import typer

from scopectl.core.settings import ScopeSettings


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_settings(ctx: typer.Context) -> ScopeSettings:
    """Return the settings loaded by the main callback.

    Falls back to defaults when a command is invoked without the main
    callback having run (e.g. from tests calling the command directly).
    """
    obj = ctx.find_root().obj
    if isinstance(obj, dict):
        settings = obj.get("settings")
        if isinstance(settings, ScopeSettings):
            return settings
    return ScopeSettings()
