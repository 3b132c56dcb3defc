"""Apply or remove a tag uniformly across a selection of items."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from symtag.index import Item, Tag, TagIndex, TagState
from symtag.selection import tag_state

from .models import ItemFailure, ToggleAction, ToggleResult
from .paths import relative_link_target

LOGGER = logging.getLogger(__name__)


class TagToggleEngine:
    """Mutate symlinks on disk and memberships in the index together."""

    def __init__(self, index: TagIndex) -> None:
        self.index = index

    def toggle(self, tag_id: Path, selected_item_ids: Iterable[Path]) -> ToggleResult:
        """Toggle ``tag_id`` on every selected item.

        When every selected item carries the tag it is removed from all of them;
        when none does it is added to all of them. A mixed selection is left
        untouched and reported with :attr:`ToggleAction.MIXED`.

        Args:
            tag_id: Canonical path of the tag to toggle.
            selected_item_ids: Canonical paths of the selected items.

        Returns:
            ToggleResult: Action taken plus the items changed and the items that failed.

        Raises:
            UnknownTagError: If the tag is not indexed.
            UnknownItemError: If a selected item is not indexed.
        """

        tag = self.index.tag(tag_id)
        items = [self.index.item(item_id) for item_id in dict.fromkeys(selected_item_ids)]

        if not items:
            return ToggleResult(tag_id=tag.id, action=ToggleAction.NONE)

        state = tag_state(tag, (item.id for item in items))
        if state is TagState.MIXED:
            LOGGER.info("Tag %s is mixed across the selection; no action taken", tag.display_name)
            return ToggleResult(tag_id=tag.id, action=ToggleAction.MIXED)

        if state is TagState.ON:
            result = ToggleResult(tag_id=tag.id, action=ToggleAction.REMOVED)
            for item in items:
                self._remove(tag, item, result)
        else:
            result = ToggleResult(tag_id=tag.id, action=ToggleAction.ADDED)
            for item in items:
                self._add(tag, item, result)

        for failure in result.failures:
            LOGGER.warning("%s: %s", failure.display_name, failure.message)
        return result

    def _add(self, tag: Tag, item: Item, result: ToggleResult) -> None:
        link_path = tag.id / item.display_name
        target = relative_link_target(tag.id, item.id)
        try:
            link_path.symlink_to(target)
        except FileExistsError:
            result.failures.append(
                self._failure(item, f"{link_path} already exists in {tag.display_name}")
            )
            return
        except OSError as exc:
            result.failures.append(self._failure(item, f"could not create {link_path}: {exc}"))
            return

        LOGGER.debug("Linked %s -> %s", link_path, target)
        self.index.link(tag.id, item.id, link_path)
        result.changed.append(item.id)

    def _remove(self, tag: Tag, item: Item, result: ToggleResult) -> None:
        link_path = tag.items[item.id]
        if not link_path.is_symlink():
            if link_path.exists():
                result.failures.append(
                    self._failure(item, f"{link_path} is not a symlink; refusing to delete it")
                )
                return
            # nothing left on disk encodes the membership
            self.index.unlink(tag.id, item.id)
            result.failures.append(self._failure(item, f"{link_path} is already gone"))
            return

        try:
            link_path.unlink()
        except FileNotFoundError:
            self.index.unlink(tag.id, item.id)
            result.failures.append(self._failure(item, f"{link_path} is already gone"))
            return
        except OSError as exc:
            result.failures.append(self._failure(item, f"could not delete {link_path}: {exc}"))
            return

        LOGGER.debug("Unlinked %s", link_path)
        self.index.unlink(tag.id, item.id)
        result.changed.append(item.id)

    def _failure(self, item: Item, message: str) -> ItemFailure:
        return ItemFailure(item_id=item.id, display_name=item.display_name, message=message)


__all__ = ["TagToggleEngine"]
