"""Placeholder expansion and execution of the command triggered by changes."""
from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

FILE_LIST_PLACEHOLDER = "%F"
FILE_SEQUENCE_PLACEHOLDER = "%f"

_PLACEHOLDER_RE = re.compile("%[Ff]")

# Used verbatim when no command is configured; placeholders are not expanded.
DEFAULT_COMMAND = ("echo", "{file_list}", "changed")


def format_file_list(changed: Sequence[str]) -> str:
    """Render the changed paths as a human readable ``, ``-separated list."""

    if not changed:
        raise ValueError("Cannot format an empty list of changed paths")
    return ", ".join(changed)


def format_file_sequence(changed: Sequence[str]) -> str:
    return " ".join(changed)


def build_command(changed: Sequence[str], template: Sequence[str]) -> List[str]:
    """Return the argv to run for ``changed`` paths.

    ``%F`` and ``%f`` are replaced inside every argument of ``template``,
    the executable included. Each template argument yields exactly one
    argument, so ``%f`` never splits into several positional arguments.
    Substitution is a single pass, so placeholder text inside a path is
    left alone.
    """

    if not template:
        return list(DEFAULT_COMMAND)

    expansions = {
        FILE_LIST_PLACEHOLDER: format_file_list(changed),
        FILE_SEQUENCE_PLACEHOLDER: format_file_sequence(changed),
    }
    return [_PLACEHOLDER_RE.sub(lambda match: expansions[match.group(0)], arg) for arg in template]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one triggered command."""

    argv: List[str]
    exit_code: Optional[int] = None
    error: Optional[OSError] = None

    @property
    def spawned(self) -> bool:
        return self.error is None

    @property
    def terminated(self) -> bool:
        """True when the process ended without an exit code (killed by a signal)."""
        return self.spawned and self.exit_code is None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def describe_status(self) -> str:
        if self.error is not None:
            return f"failed to execute command: {self.error}"
        if self.exit_code is None:
            return "terminated"
        return str(self.exit_code)


class CommandRunner:
    """Runs the configured command synchronously for each batch of changes."""

    def __init__(self, template: Sequence[str], *, silent: bool = False):
        self._template = list(template)
        self._silent = silent
        self._shell_display = " ".join(self._template)

    @property
    def template(self) -> List[str]:
        return list(self._template)

    @property
    def silent(self) -> bool:
        return self._silent

    def run(self, changed: Sequence[str]) -> CommandResult:
        """Run the command for ``changed`` and block until it exits."""

        level = logging.DEBUG if self._silent else logging.INFO
        argv = build_command(changed, self._template)
        logger.log(
            level,
            "found changes in: %s -- shell: %s",
            format_file_list(changed),
            self._shell_display,
        )

        try:
            completed = subprocess.run(argv, check=False)
        except OSError as exc:
            result = CommandResult(argv=argv, error=exc)
            logger.error("%s", result.describe_status())
            return result

        exit_code: Optional[int] = completed.returncode
        if exit_code is not None and exit_code < 0:
            # negative return codes mean the child was killed by a signal
            exit_code = None
        result = CommandResult(argv=argv, exit_code=exit_code)
        logger.log(level, "exit status: %s", result.describe_status())
        return result
