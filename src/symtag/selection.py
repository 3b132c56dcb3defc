"""Selection tracking and tag display-state derivation."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from symtag.index.models import Tag, TagState


def tag_state(tag: Tag, item_ids: Iterable[Path]) -> TagState:
    """Classify the membership of ``tag`` across ``item_ids``.

    Args:
        tag: Tag to inspect.
        item_ids: Selected item ids.

    Returns:
        TagState: ``OFF`` when no selected item carries the tag (including an
        empty selection), ``ON`` when all of them do, ``MIXED`` otherwise.
    """

    tagged = untagged = 0
    for item_id in item_ids:
        if item_id in tag.items:
            tagged += 1
        else:
            untagged += 1
    if tagged == 0:
        return TagState.OFF
    if untagged == 0:
        return TagState.ON
    return TagState.MIXED


class SelectionState:
    """The set of items currently chosen by the user."""

    def __init__(self, item_ids: Iterable[Path] = ()) -> None:
        self._selected: set[Path] = set(item_ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._selected

    def __iter__(self) -> Iterator[Path]:
        return iter(sorted(self._selected))

    def __len__(self) -> int:
        return len(self._selected)

    def __bool__(self) -> bool:
        return bool(self._selected)

    def toggle(self, item_id: Path) -> bool:
        """Flip the selection of ``item_id``.

        Returns:
            bool: True when the item is selected afterwards.
        """
        if item_id in self._selected:
            self._selected.remove(item_id)
            return False
        self._selected.add(item_id)
        return True

    def add(self, item_id: Path) -> None:
        self._selected.add(item_id)

    def discard(self, item_id: Path) -> None:
        self._selected.discard(item_id)

    def clear(self) -> None:
        self._selected.clear()

    def ids(self) -> list[Path]:
        return sorted(self._selected)


__all__ = ["SelectionState", "tag_state"]
