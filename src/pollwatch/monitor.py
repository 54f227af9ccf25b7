"""Polling loop that detects changes to a fixed set of paths."""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .command import CommandResult, CommandRunner
from .state import Snapshot, Snapshotter, take_snapshot

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05

WatchState = Dict[str, Snapshot]


def has_changed(old: Snapshot, new: Snapshot) -> bool:
    """Return True when ``new`` is a different kind of path or strictly newer.

    A timestamp moving backwards while the kind stays the same is not a
    change.
    """

    return old.kind is not new.kind or new.mtime_ns > old.mtime_ns


@dataclass
class MonitorStats:
    """Counters emitted by the monitor for observability."""

    cycles: int = 0
    changes_detected: int = 0
    dispatches: int = 0


class PathMonitor:
    """Polls a fixed set of paths and runs a command when any of them changes."""

    def __init__(
        self,
        targets: Iterable[str],
        runner: CommandRunner,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        snapshotter: Snapshotter = take_snapshot,
    ):
        if not math.isfinite(poll_interval) or poll_interval <= 0:
            raise ValueError("poll_interval must be a positive finite number")
        self._runner = runner
        self._poll_interval = poll_interval
        self._snapshotter = snapshotter
        self._stop_event = threading.Event()
        self._stats = MonitorStats()
        self._state: WatchState = {}
        for target in targets:
            if target not in self._state:
                self._state[target] = snapshotter(target)
        if not self._state:
            raise ValueError("At least one path must be watched")

    @property
    def state(self) -> WatchState:
        return dict(self._state)

    @property
    def stats(self) -> MonitorStats:
        return self._stats

    def run(self) -> None:
        """Run the monitoring loop until stopped."""

        logger.info(
            "Watching %s path(s) every %.3fs: %s",
            len(self._state),
            self._poll_interval,
            ", ".join(self._state),
        )
        try:
            while not self._stop_event.wait(self._poll_interval):
                self.run_once()
        except KeyboardInterrupt:
            logger.info("Monitor interrupted by user")
        finally:
            logger.info(
                "Monitor stopped after %s cycles, %s changes, %s commands",
                self._stats.cycles,
                self._stats.changes_detected,
                self._stats.dispatches,
            )

    def stop(self) -> None:
        """Signal the monitor to stop at the next opportunity."""

        self._stop_event.set()

    def run_once(self) -> Optional[CommandResult]:
        """Poll once and, if anything changed, run the command and wait for it."""

        changed = self.poll()
        if not changed:
            return None
        self._stats.dispatches += 1
        return self._runner.run(changed)

    def poll(self) -> List[str]:
        """Re-sample every target and return those whose state changed.

        Stored snapshots of changed targets are replaced during the pass, so
        a transition is reported once no matter how long dispatch takes.
        """

        changed: List[str] = []
        for path, previous in self._state.items():
            current = self._snapshotter(path)
            if has_changed(previous, current):
                logger.debug("%s changed: %s -> %s", path, previous, current)
                self._state[path] = current
                changed.append(path)

        self._stats.cycles += 1
        self._stats.changes_detected += len(changed)
        return changed
