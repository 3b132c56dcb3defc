"""Discovery of items and tags from the symlink tree on disk."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from symtag.index import IndexConflictError, Item, Tag, TagIndex

from .errors import ScanError

LOGGER = logging.getLogger(__name__)


def _canonical(path: Path) -> Path:
    return path.resolve(strict=True)


def _entries(directory: Path) -> list[Path]:
    """Return the entries of ``directory`` sorted by name."""
    try:
        return sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise ScanError(f"Cannot read directory {directory}: {exc}", directory) from exc


class DirectoryScanner:
    """Populate a :class:`TagIndex` from an items root and a tags root."""

    def scan(self, items_root: Path, tags_root: Path) -> TagIndex:
        """Scan both roots into a fresh index.

        Args:
            items_root: Flat directory whose direct children are the items.
            tags_root: Directory tree whose subdirectories are the tags.

        Returns:
            TagIndex: Fully populated index.

        Raises:
            ScanError: If either root cannot be read or an entry is unusable.
        """
        index = TagIndex()
        self.scan_items(items_root, index)
        self.scan_tags(tags_root, index)
        LOGGER.debug(
            "Scanned %d item(s) and %d tag(s) from %s and %s",
            len(index.items),
            len(index.tags),
            items_root,
            tags_root,
        )
        return index

    def scan_items(self, items_root: Path, index: TagIndex) -> None:
        """Register every direct child of ``items_root`` as an item.

        Args:
            items_root: Items directory; subdirectories are not descended into.
            index: Index receiving the items.

        Raises:
            ScanError: If the root cannot be read or a child cannot be canonicalized.
        """
        root = items_root.expanduser()
        if not root.is_dir():
            raise ScanError(f"Items directory does not exist: {root}", root)

        for entry in _entries(root):
            try:
                item_id = _canonical(entry)
            except (OSError, RuntimeError) as exc:
                raise ScanError(f"Cannot resolve item {entry}: {exc}", entry) from exc

            if item_id in index.items:
                LOGGER.warning(
                    "Skipping %s: resolves to already indexed item %s", entry, item_id
                )
                continue
            try:
                index.add_item(Item(id=item_id, display_name=entry.name))
            except IndexConflictError as exc:
                raise ScanError(str(exc), entry) from exc

    def scan_tags(self, tags_root: Path, index: TagIndex) -> None:
        """Register tag directories and the memberships their symlinks encode.

        Must run after :meth:`scan_items`, since links are only recognized when
        they resolve to an already indexed item.

        Args:
            tags_root: Root of the tag directory tree.
            index: Index receiving the tags.

        Raises:
            ScanError: If a directory cannot be read or a tag collides with an item.
        """
        root = tags_root.expanduser()
        if not root.is_dir():
            raise ScanError(f"Tags directory does not exist: {root}", root)

        pending: list[tuple[Path, PurePosixPath | None]] = [(root, None)]
        while pending:
            directory, relative = pending.pop()
            tag = self._build_tag(directory, relative) if relative is not None else None

            subdirectories: list[tuple[Path, PurePosixPath]] = []
            for entry in _entries(directory):
                if entry.is_symlink():
                    self._register_link(entry, tag, index)
                elif entry.is_dir():
                    child = PurePosixPath(entry.name) if relative is None else relative / entry.name
                    subdirectories.append((entry, child))
                else:
                    LOGGER.debug("Ignoring non-link entry %s", entry)

            if tag is not None:
                try:
                    index.add_tag(tag)
                except IndexConflictError as exc:
                    raise ScanError(str(exc), directory) from exc

            pending.extend(reversed(subdirectories))

    def _build_tag(self, directory: Path, relative: PurePosixPath) -> Tag:
        try:
            tag_id = _canonical(directory)
        except (OSError, RuntimeError) as exc:
            raise ScanError(f"Cannot resolve tag directory {directory}: {exc}", directory) from exc
        return Tag(id=tag_id, display_name=relative.as_posix())

    def _register_link(self, entry: Path, tag: Tag | None, index: TagIndex) -> None:
        try:
            target = _canonical(entry)
        except (OSError, RuntimeError):
            LOGGER.debug("Ignoring broken link %s", entry)
            return

        if target not in index.items:
            LOGGER.debug("Ignoring link %s to untracked %s", entry, target)
            return
        if tag is None:
            LOGGER.debug("Ignoring link %s outside of any tag directory", entry)
            return
        if target in tag.items:
            LOGGER.warning(
                "Ignoring %s: %s already links %s", entry, tag.items[target], target
            )
            return
        tag.items[target] = tag.id / entry.name
