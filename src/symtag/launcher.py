"""Fire-and-forget launching of external programs on items."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Iterable, List

from pydantic import BaseModel, Field

from symtag.tagging.models import ItemFailure

LOGGER = logging.getLogger(__name__)


class LaunchResult(BaseModel):
    """Outcome of launching a command on a batch of items.

    Attributes:
        command: Command line as entered by the user.
        launched: Paths for which a process was started.
        failures: Paths whose process could not be started.
    """

    command: str
    launched: List[Path] = Field(default_factory=list)
    failures: List[ItemFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ItemLauncher:
    """Start one detached process per item without waiting for it."""

    def launch(self, command: str, paths: Iterable[Path]) -> LaunchResult:
        """Run ``command`` once for each path, appending the path as last argument.

        Args:
            command: Program and optional arguments, split with shell rules.
            paths: Item paths to open.

        Returns:
            LaunchResult: Paths launched and paths that failed to spawn.

        Raises:
            ValueError: If the command is blank or cannot be parsed.
        """
        argv = shlex.split(command)
        if not argv:
            raise ValueError("A command is required to open items.")

        result = LaunchResult(command=command)
        for path in paths:
            try:
                subprocess.Popen(
                    [*argv, str(path)],
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as exc:
                LOGGER.warning("Could not launch %s on %s: %s", argv[0], path, exc)
                result.failures.append(
                    ItemFailure(item_id=path, display_name=path.name, message=str(exc))
                )
                continue
            LOGGER.debug("Launched %s on %s", argv[0], path)
            result.launched.append(path)
        return result


__all__ = ["ItemLauncher", "LaunchResult"]
