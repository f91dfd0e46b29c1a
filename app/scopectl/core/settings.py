"""Settings for scope enforcement.

This module provides the settings model and I/O functions for the
defaults scopectl applies when an option is not given on the command
line: the symlink scope, one-file-system mode, extra allowed devices
and the log level.

Settings are stored in ~/.config/scopectl/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scopectl.core.paths import get_settings_path

logger = logging.getLogger(__name__)

LogLevelName = Literal["debug", "info", "warning", "error"]


class ScopeSettings(BaseModel):
    """Persistent defaults for scan and restore runs.

    Attributes:
        scope_symlinks: Directory symlinks must resolve into (None = no scope check).
        one_file_system: Stay on the devices of the scanned roots.
        allowed_devices: Extra mount roots whose devices may be crossed into.
        log_level: Log level used when neither --verbose nor --quiet is given.
    """

    model_config = ConfigDict(extra="forbid")

    scope_symlinks: Annotated[
        str | None,
        Field(description="Directory symlinks must resolve into"),
    ] = None
    one_file_system: Annotated[
        bool,
        Field(description="Do not cross device boundaries"),
    ] = False
    allowed_devices: Annotated[
        list[str],
        Field(description="Mount roots whose devices may be crossed into"),
    ] = []
    log_level: Annotated[
        LogLevelName,
        Field(description="Default log level"),
    ] = "warning"

    @field_validator("scope_symlinks")
    @classmethod
    def validate_scope(cls, value: str | None) -> str | None:
        """Treat a blank scope as unset."""
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @field_validator("allowed_devices")
    @classmethod
    def validate_devices(cls, value: list[str]) -> list[str]:
        """Reject blank device roots."""
        if any(not item.strip() for item in value):
            msg = "allowed_devices entries cannot be empty"
            raise ValueError(msg)
        return value


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsNotFoundError(SettingsError):
    """Raised when the settings file is not found."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> ScopeSettings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated ScopeSettings object.

    Raises:
        SettingsNotFoundError: If the settings file doesn't exist.
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        raise SettingsNotFoundError(f"Settings not found: {settings_path}")

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return ScopeSettings.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def load_settings_or_default(path: Path | None = None) -> ScopeSettings:
    """Load settings, falling back to defaults when no file exists.

    Raises:
        SettingsError: If the file exists but is invalid.
    """
    try:
        return load_settings(path)
    except SettingsNotFoundError:
        logger.debug("No settings file, using defaults")
        return ScopeSettings()


def save_settings(settings: ScopeSettings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The ScopeSettings object to save.
        path: Path to save to. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data = _settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def _settings_to_dict(settings: ScopeSettings) -> dict[str, object]:
    """Convert ScopeSettings to a dictionary for TOML serialization.

    TOML has no null, so unset values are left out.
    """
    result: dict[str, object] = {
        "one_file_system": settings.one_file_system,
        "allowed_devices": list(settings.allowed_devices),
        "log_level": settings.log_level,
    }
    if settings.scope_symlinks is not None:
        result["scope_symlinks"] = settings.scope_symlinks
    return result
