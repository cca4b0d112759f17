"""Single invocation of an external command.

A non-zero exit status is turned into an exception so that the command can be
handed to ``retry`` like any other fallible operation.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class CommandFailedError(Exception):
    """Command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int):
        self.command = list(args)
        self.returncode = returncode
        super().__init__(f"Command {' '.join(self.command)!r} exited with status {returncode}")


@dataclass(frozen=True)
class CommandResult:
    """Result of a command that exited with status 0"""

    args: Tuple[str, ...]
    returncode: int


def run_command(args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
    """Run ``args`` once, inheriting stdin/stdout/stderr.

    Raises:
        ValueError: If args is empty
        CommandFailedError: If the command exits with a non-zero status
        OSError: If the executable cannot be started
        subprocess.TimeoutExpired: If the command runs longer than timeout
    """
    if not args:
        raise ValueError("No command given")

    logger.debug(f"Running command: {list(args)}")
    completed = subprocess.run(list(args), timeout=timeout, check=False)
    if completed.returncode != 0:
        raise CommandFailedError(args, completed.returncode)
    return CommandResult(args=tuple(args), returncode=completed.returncode)
