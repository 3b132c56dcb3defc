"""Relative symlink target computation."""

from __future__ import annotations

from pathlib import Path, PurePath


def relative_link_target(tag_dir: Path, item_path: Path) -> str:
    """Return the relative target for a symlink stored inside ``tag_dir``.

    Following the returned path from ``tag_dir`` leads to ``item_path``. Both
    arguments must be canonical absolute paths; the result never depends on the
    current working directory.

    Args:
        tag_dir: Canonical path of the directory that will hold the symlink.
        item_path: Canonical path of the entry the symlink should point to.

    Returns:
        str: Relative path using ``..`` segments to climb to the common ancestor.

    Raises:
        ValueError: If either path is relative.
    """

    if not tag_dir.is_absolute() or not item_path.is_absolute():
        raise ValueError(f"Expected absolute paths, got {tag_dir!s} and {item_path!s}")

    tag_parts = tag_dir.parts
    item_parts = item_path.parts

    common = 0
    for tag_part, item_part in zip(tag_parts, item_parts):
        if tag_part != item_part:
            break
        common += 1

    # every tag component past the common ancestor needs its own climb
    segments = [".."] * (len(tag_parts) - common)
    segments.extend(item_parts[common:])
    if not segments:
        return "."
    return str(PurePath(*segments))


__all__ = ["relative_link_target"]
