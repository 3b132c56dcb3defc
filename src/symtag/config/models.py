"""Configuration models describing symtag settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SymtagBaseModel(BaseModel):
    """Shared configuration for symtag Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class PathSettings(SymtagBaseModel):
    """Default locations offered when a session starts.

    Attributes:
        items_root: Directory whose direct children are the taggable items.
        tags_root: Directory tree whose subdirectories are the tags.
    """

    items_root: str = "all"
    tags_root: str = "tags"


class LauncherSettings(SymtagBaseModel):
    """Options for opening selected items with an external program.

    Attributes:
        command: Command suggested when opening the selection.
    """

    command: Optional[str] = None


class LoggingSettings(SymtagBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown logging level {value!r}")
        return normalized


class CLIOptions(SymtagBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        show_help_on_start: Whether the browser prints the help text on start.
    """

    quiet_default: bool = False
    show_help_on_start: bool = False


class SymtagConfig(SymtagBaseModel):
    """Top-level configuration struct for symtag.

    Attributes:
        paths: Default items and tags roots.
        launcher: External program settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    paths: PathSettings = Field(default_factory=PathSettings)
    launcher: LauncherSettings = Field(default_factory=LauncherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SymtagBaseModel",
    "PathSettings",
    "LauncherSettings",
    "LoggingSettings",
    "CLIOptions",
    "SymtagConfig",
]
