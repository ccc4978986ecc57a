"""Per-directory display overrides parsed from ``-d 1 -s`` style strings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEPTH_FLAGS = ("-d", "--depth")
STRUCTURE_ONLY_FLAGS = ("-s", "--structure-only")
FILES_ONLY_AT_LEVEL_FLAGS = ("-f", "--files-only-at-level")


@dataclass(frozen=True)
class DirectoryFlags:
    """Display override declared for one directory subtree.

    ``max_depth`` counts directory levels below the directory that declared it.
    ``files_only_at_level`` is compared against absolute walk depth.
    """

    max_depth: int | None = None
    structure_only: bool = False
    files_only_at_level: int | None = None


def _int_value(flag: str, raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring non-integer value %r for %s", raw, flag)
        return None


def parse_flags(flags: str | None) -> DirectoryFlags:
    """Parse a flag string into ``DirectoryFlags``.

    Unknown tokens are skipped. ``-d``/``-f`` consume the next token whatever
    it is; a missing or non-integer value leaves the field unset.
    """
    if not flags:
        return DirectoryFlags()

    tokens = flags.split()
    max_depth: int | None = None
    structure_only = False
    files_only_at_level: int | None = None

    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if token in DEPTH_FLAGS:
            idx += 1
            if idx < len(tokens):
                max_depth = _int_value(token, tokens[idx])
        elif token in STRUCTURE_ONLY_FLAGS:
            structure_only = True
        elif token in FILES_ONLY_AT_LEVEL_FLAGS:
            idx += 1
            if idx < len(tokens):
                files_only_at_level = _int_value(token, tokens[idx])
        idx += 1

    parsed = DirectoryFlags(
        max_depth=max_depth,
        structure_only=structure_only,
        files_only_at_level=files_only_at_level,
    )
    logger.debug("Parsed flags %r -> %s", flags, parsed)
    return parsed


__all__ = ["DirectoryFlags", "parse_flags"]
