"""Tag toggling and tag creation on top of the symlink tree."""

from .creator import TagCreator
from .engine import TagToggleEngine
from .errors import TagCreationError
from .models import ItemFailure, ToggleAction, ToggleResult
from .paths import relative_link_target

__all__ = [
    "TagCreator",
    "TagToggleEngine",
    "TagCreationError",
    "ItemFailure",
    "ToggleAction",
    "ToggleResult",
    "relative_link_target",
]
