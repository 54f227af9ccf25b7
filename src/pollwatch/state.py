"""Snapshot model describing the observed state of a single watched path."""
from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Callable

EPOCH_NS = 0


class SnapshotError(RuntimeError):
    """Raised when a path cannot be classified on this platform."""


class SnapshotKind(str, Enum):
    """What a watched path was when it was last sampled."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"
    MISSING = "missing"
    NO_PERMISSION = "no-permission"


@dataclass(frozen=True)
class Snapshot:
    """Kind and modification time of a path, taken from one stat call."""

    kind: SnapshotKind
    mtime_ns: int

    @classmethod
    def missing(cls) -> "Snapshot":
        return cls(SnapshotKind.MISSING, EPOCH_NS)

    @classmethod
    def no_permission(cls) -> "Snapshot":
        return cls(SnapshotKind.NO_PERMISSION, EPOCH_NS)

    def __str__(self) -> str:
        return f"{self.kind.value}@{self.mtime_ns}"


Snapshotter = Callable[[str], Snapshot]


def take_snapshot(path: str) -> Snapshot:
    """Classify ``path`` without raising for missing or forbidden paths.

    ``path`` is stat'ed exactly as given, so a trailing slash on a regular
    file makes it missing.

    Missing paths (including paths below a regular file) and paths the
    process may not stat are reported as snapshot kinds. Any other stat
    failure, or a stat result without a modification time, raises
    :class:`SnapshotError`.
    """

    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return Snapshot.missing()
    except PermissionError:
        return Snapshot.no_permission()
    except OSError as exc:
        raise SnapshotError(
            f"Unexpected error while inspecting {path}: {exc}"
        ) from exc

    mtime_ns = getattr(st, "st_mtime_ns", None)
    if mtime_ns is None:
        raise SnapshotError("Modification times are not available on this platform")

    if stat.S_ISREG(st.st_mode):
        kind = SnapshotKind.FILE
    elif stat.S_ISDIR(st.st_mode):
        kind = SnapshotKind.DIRECTORY
    else:
        kind = SnapshotKind.OTHER

    return Snapshot(kind, mtime_ns)
