"""Interactive tagging session state shared by the CLI handlers."""

from __future__ import annotations

from pathlib import Path

from symtag.index import Item, Tag, TagIndex, TagState, UnknownItemError, UnknownTagError
from symtag.launcher import ItemLauncher, LaunchResult
from symtag.scanning import DirectoryScanner
from symtag.selection import SelectionState, tag_state
from symtag.tagging import TagCreator, TagToggleEngine, ToggleResult


class TagSession:
    """Own the index, the selection, and the roots for one tagging session.

    Handlers receive the session explicitly; nothing is stored at module level.
    """

    def __init__(
        self,
        items_root: Path,
        tags_root: Path,
        index: TagIndex,
        *,
        scanner: DirectoryScanner | None = None,
        launcher: ItemLauncher | None = None,
    ) -> None:
        self.items_root = items_root
        self.tags_root = tags_root
        self.index = index
        self.selection = SelectionState()
        self.filter_text: str | None = None
        self._scanner = scanner or DirectoryScanner()
        self._launcher = launcher or ItemLauncher()

    @classmethod
    def open(
        cls,
        items_root: Path,
        tags_root: Path,
        *,
        scanner: DirectoryScanner | None = None,
        launcher: ItemLauncher | None = None,
    ) -> "TagSession":
        """Scan both roots and return a session over the resulting index.

        Raises:
            ScanError: If either root cannot be scanned.
        """
        scanner = scanner or DirectoryScanner()
        index = scanner.scan(items_root, tags_root)
        return cls(items_root, tags_root, index, scanner=scanner, launcher=launcher)

    def rescan(self) -> None:
        """Rebuild the index from disk and clear the selection.

        The current index is kept if the scan fails.

        Raises:
            ScanError: If either root cannot be scanned.
        """
        self.index = self._scanner.scan(self.items_root, self.tags_root)
        self.selection.clear()

    # Selection --------------------------------------------------------

    def toggle_item(self, item_id: Path) -> bool:
        """Select or deselect an item, returning whether it is now selected."""
        self.index.item(item_id)
        return self.selection.toggle(item_id)

    def clear_selection(self) -> None:
        self.selection.clear()

    def set_filter(self, text: str | None) -> None:
        """Show only items whose name contains ``text``; blank shows everything."""
        cleaned = (text or "").strip()
        self.filter_text = cleaned or None

    # Operations -------------------------------------------------------

    def toggle_tag(self, tag_id: Path) -> ToggleResult:
        """Toggle ``tag_id`` across the current selection."""
        return TagToggleEngine(self.index).toggle(tag_id, self.selection)

    def create_tag(self, name: str) -> Tag | None:
        """Create a tag named ``name`` under the tags root.

        Raises:
            TagCreationError: If the directory cannot be created or registered.
        """
        return TagCreator(self.index).create_tag(self.tags_root, name)

    def open_selection(self, command: str) -> LaunchResult:
        """Launch ``command`` on every selected item without waiting for it."""
        return self._launcher.launch(command, self.selection)

    # Projections ------------------------------------------------------

    def visible_items(self) -> list[Item]:
        items = self.index.sorted_items()
        if self.filter_text is None:
            return items
        needle = self.filter_text.casefold()
        return [item for item in items if needle in item.display_name.casefold()]

    def item_rows(self) -> list[tuple[Item, bool]]:
        """Return visible items with their selection flag."""
        return [(item, item.id in self.selection) for item in self.visible_items()]

    def tag_rows(self) -> list[tuple[Tag, TagState]]:
        """Return every tag with its state across the current selection."""
        return [(tag, tag_state(tag, self.selection)) for tag in self.index.sorted_tags()]

    # Lookups ----------------------------------------------------------

    def find_item(self, name: str) -> Item:
        """Return the item displayed as ``name``."""
        for item in self.index.items.values():
            if item.display_name == name:
                return item
        raise UnknownItemError(name)

    def find_tag(self, name: str) -> Tag:
        """Return the tag displayed as ``name``; surrounding slashes are ignored."""
        wanted = name.strip("/")
        for tag in self.index.tags.values():
            if tag.display_name == wanted:
                return tag
        raise UnknownTagError(name)


__all__ = ["TagSession"]
