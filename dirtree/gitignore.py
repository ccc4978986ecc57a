"""Gitignore-aware entry filtering.

Combines a fixed set of always-hidden names with ``git check-ignore`` queries
against the repository detected at startup. Every git failure is treated as
"not ignored" so the tree still prints.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path

from .fs import Entry

logger = logging.getLogger(__name__)

ALWAYS_IGNORE_NAMES = frozenset(
    {
        "node_modules",
        ".next",
        ".github",
        ".venv",
        "__ARCHIVE__",
        ".cursor",
        ".vscode",
        ".git",
    }
)


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


def _anchored(path: Path) -> Path:
    """Absolute ``path`` with its parent resolved and the final name untouched."""
    absolute = Path(os.path.abspath(path))
    try:
        return absolute.parent.resolve() / absolute.name
    except OSError:
        return absolute


def find_repo_root(start: Path) -> Path | None:
    """Return the git top-level directory containing ``start``.

    Returns ``None`` when git is unavailable or ``start`` is not in a repo.
    """
    if shutil.which("git") is None:
        return None
    try:
        proc = subprocess.run(
            ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    top_level = proc.stdout.strip()
    if not top_level:
        return None
    return Path(top_level).resolve()


class GitCheckIgnore:
    """Ask git which paths are ignored, one ``check-ignore`` call per batch."""

    def ignored(self, repo_root: Path, paths: Sequence[Path]) -> set[Path]:
        """Return the subset of ``paths`` git reports as ignored.

        Paths outside ``repo_root`` are never reported. A failing git call
        yields an empty set.
        """
        relative: dict[str, Path] = {}
        for path in paths:
            anchored = _anchored(path)
            if not _is_within(anchored, repo_root) or anchored == repo_root:
                continue
            relative[anchored.relative_to(repo_root).as_posix()] = path
        if not relative:
            return set()

        payload = b"\x00".join(os.fsencode(rel) for rel in relative) + b"\x00"
        try:
            proc = subprocess.run(
                ["git", "-C", str(repo_root), "check-ignore", "-z", "--stdin"],
                input=payload,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.debug("git check-ignore unavailable: %s", exc)
            return set()

        # 0: some paths ignored, 1: none ignored, anything else is a failure.
        if proc.returncode not in (0, 1):
            logger.debug("git check-ignore exited with %d", proc.returncode)
            return set()

        ignored: set[Path] = set()
        for raw in proc.stdout.split(b"\x00"):
            if not raw:
                continue
            original = relative.get(os.fsdecode(raw))
            if original is not None:
                ignored.add(original)
        return ignored


class IgnoreFilter:
    """Decide which listed entries are hidden from the tree.

    ``repo_root`` of ``None`` disables oracle queries; only the built-in names
    are then hidden.
    """

    def __init__(
        self,
        repo_root: Path | None,
        oracle: GitCheckIgnore | None = None,
        extra_names: Iterable[str] = (),
    ) -> None:
        self.repo_root = repo_root
        self.oracle = oracle if oracle is not None else GitCheckIgnore()
        self.always_ignore = ALWAYS_IGNORE_NAMES | frozenset(extra_names)

    def is_builtin_ignored(self, name: str) -> bool:
        return name in self.always_ignore

    def is_ignored(self, path: Path) -> bool:
        if self.is_builtin_ignored(path.name):
            return True
        if self.repo_root is None:
            return False
        return bool(self.oracle.ignored(self.repo_root, [path]))

    def visible(self, entries: Sequence[Entry]) -> list[Entry]:
        """Return ``entries`` minus built-in and git-ignored ones, order kept."""
        candidates = [entry for entry in entries if not self.is_builtin_ignored(entry.name)]
        if self.repo_root is None or not candidates:
            return candidates
        ignored = self.oracle.ignored(self.repo_root, [entry.path for entry in candidates])
        if not ignored:
            return candidates
        return [entry for entry in candidates if entry.path not in ignored]


__all__ = [
    "ALWAYS_IGNORE_NAMES",
    "GitCheckIgnore",
    "IgnoreFilter",
    "find_repo_root",
]
