"""Creation of new tag directories."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from symtag.index import Tag, TagIndex

from .errors import TagCreationError

LOGGER = logging.getLogger(__name__)


class TagCreator:
    """Create tag directories under a tags root and register them."""

    def __init__(self, index: TagIndex) -> None:
        self.index = index

    def create_tag(self, tags_root: Path, name: str) -> Tag | None:
        """Create ``tags_root/name`` and register it as a tag.

        Nested names such as ``fruit/citrus`` create every missing level; each
        level becomes a tag, matching what a fresh scan would produce.

        Args:
            tags_root: Root of the tag directory tree.
            name: Tag name relative to ``tags_root``.

        Returns:
            Tag | None: The tag for ``name`` (existing or new), or None for a blank name.

        Raises:
            TagCreationError: If the name escapes the tags root, the directory
                cannot be created, or the path is already an item.
        """

        if not name.strip():
            return None
        relative = PurePosixPath(name)
        if not relative.parts:
            return None
        if relative.is_absolute() or ".." in relative.parts:
            raise TagCreationError(f"Tag name must stay inside the tags directory: {name!r}")

        root = tags_root.expanduser()
        directory = root.joinpath(*relative.parts)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TagCreationError(f"Could not create tag directory {directory}: {exc}") from exc

        staged: list[Tag] = []
        leaf: Tag | None = None
        for depth in range(1, len(relative.parts) + 1):
            level = PurePosixPath(*relative.parts[:depth])
            path = root.joinpath(*level.parts)
            if path.is_symlink():
                raise TagCreationError(f"{path} is a symlink, not a tag directory")
            try:
                tag_id = path.resolve(strict=True)
            except (OSError, RuntimeError) as exc:
                raise TagCreationError(f"Could not resolve {path}: {exc}") from exc
            if tag_id in self.index.items:
                raise TagCreationError(f"{path} is already tracked as an item")

            existing = self.index.tags.get(tag_id)
            if existing is None:
                existing = Tag(id=tag_id, display_name=level.as_posix())
                staged.append(existing)
            leaf = existing

        for tag in staged:
            self.index.add_tag(tag)
            LOGGER.debug("Registered tag %s at %s", tag.display_name, tag.id)
        return leaf


__all__ = ["TagCreator"]
