"""Filesystem listing for tree walks."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Entry:
    """One immediate child of a listed directory."""

    path: Path
    name: str
    is_dir: bool


def list_entries(directory: Path) -> tuple[list[Entry], Exception | None]:
    """List immediate directory and regular-file children of ``directory``.

    Returns ``(entries, scan_error)`` in scan order. Symlinks are classified by
    their target; anything that is neither a directory nor a regular file is
    left out. ``scan_error`` is set when the directory cannot be scanned.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                try:
                    is_dir = child.is_dir()
                    is_file = not is_dir and child.is_file()
                except OSError:
                    continue
                if not is_dir and not is_file:
                    continue
                entries.append(Entry(path=Path(child.path), name=child.name, is_dir=is_dir))
    except (PermissionError, OSError) as exc:
        return [], exc
    return entries, None


__all__ = ["Entry", "list_entries"]
