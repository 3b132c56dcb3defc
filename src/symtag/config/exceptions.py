"""Errors raised while loading or updating symtag settings."""


class ConfigError(Exception):
    """Raised when settings from ``config.yaml`` or an override are invalid."""
