"""Tagging errors."""


class TagCreationError(Exception):
    """Raised when a tag directory cannot be created or registered."""
