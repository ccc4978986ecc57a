"""Directory-to-flags registry populated from ``dir:flags`` tokens and files.

Keys are either a path relative to the invocation root (``""`` meaning the
root itself) or the literal directory text the user wrote. The registry is
assembled once through ``FlagRegistryBuilder`` and is read-only while walking.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)


def relative_key(path: Path, invocation_root: Path) -> str:
    """Return ``path`` relative to ``invocation_root`` as a registry key.

    Both sides are resolved first. The root itself maps to ``""``.
    """
    try:
        resolved = path.resolve()
    except OSError:
        resolved = Path(os.path.abspath(path))
    rel = os.path.relpath(resolved, invocation_root.resolve())
    if rel == os.curdir:
        return ""
    return Path(rel).as_posix()


def split_flag_token(token: str) -> tuple[str, str]:
    """Split ``dir:flags`` at the first colon; leading flag whitespace is dropped."""
    directory, _sep, flags = token.partition(":")
    return directory, flags.lstrip()


def is_flag_token(token: str) -> bool:
    return ":" in token


class FlagRegistry:
    """Immutable lookup from directory identity to a raw flag string."""

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries or {}))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def items(self):
        return self._entries.items()

    def lookup(self, rel_path: str, base_name: str) -> str | None:
        """Return flags for ``rel_path``, else for ``base_name``, else ``None``.

        A stored empty string counts as no flags.
        """
        flags = self._entries.get(rel_path)
        if flags:
            logger.debug("Matched flags by rel_path %r: %r", rel_path, flags)
            return flags
        flags = self._entries.get(base_name)
        if flags:
            logger.debug("Matched flags by basename %r: %r", base_name, flags)
            return flags
        return None


class FlagRegistryBuilder:
    """Collect registrations in order, then freeze them into a ``FlagRegistry``."""

    def __init__(self, invocation_root: Path) -> None:
        self.invocation_root = invocation_root
        self._entries: dict[str, str] = {}

    def register(self, key: str, flags: str) -> None:
        """Store ``flags`` under ``key``; a later registration overwrites."""
        self._entries[key] = flags
        logger.debug("Stored flags[%r] = %r", key, flags)

    def register_directory(self, directory: str, flags: str) -> None:
        """Register flags for user-supplied directory text.

        Existing paths are stored under their invocation-relative key and the
        literal text. Paths that do not exist yet are stored verbatim.
        """
        candidate = Path(directory)
        if not os.path.isabs(directory):
            candidate = self.invocation_root / directory
        if candidate.exists():
            self.register(relative_key(candidate, self.invocation_root), flags)
        self.register(directory, flags)

    def register_token(self, token: str) -> str:
        """Register one ``dir:flags`` token and return its directory part."""
        directory, flags = split_flag_token(token)
        self.register_directory(directory, flags)
        return directory

    def build(self) -> FlagRegistry:
        return FlagRegistry(self._entries)


def load_flags_file(path: Path, builder: FlagRegistryBuilder) -> int:
    """Register every ``directory:flags`` line of ``path``; return the count.

    Blank lines, ``#`` comments and lines without a colon are skipped.
    Raises ``OSError`` when the file cannot be read and ``UnicodeDecodeError``
    when it is not UTF-8; nothing is registered in either case.
    """
    loaded = 0
    text = path.read_text(encoding="utf-8")
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if not is_flag_token(line):
            logger.debug("Skipping flags file line without ':' %r", line)
            continue
        builder.register_token(line)
        loaded += 1
    return loaded


__all__ = [
    "FlagRegistry",
    "FlagRegistryBuilder",
    "is_flag_token",
    "load_flags_file",
    "relative_key",
    "split_flag_token",
]
