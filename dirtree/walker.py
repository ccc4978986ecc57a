"""Recursive tree printer with per-directory flag resolution.

Each directory frame looks up its own flags, lists and filters its children,
orders them, emits one connector line per child and descends into
subdirectories. Depth limits count levels below the directory that declared
them (the flag origin); ``files_only_at_level`` counts absolute walk depth.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from .flags import parse_flags
from .fs import Entry, list_entries
from .gitignore import IgnoreFilter
from .registry import FlagRegistry, relative_key

logger = logging.getLogger(__name__)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "
DIRECTORY_MARKER = "📁 "
CURRENT_DIR = "."


@dataclass(frozen=True)
class WalkContext:
    """State for one directory frame. Child frames are derived, never mutated."""

    path: Path
    indent: str = ""
    prioritized_names: tuple[str, ...] = ()
    max_depth: int | None = None
    depth: int = 0
    structure_only: bool = False
    files_only_at_level: int | None = None
    depth_since_flag_origin: int = 0


def _base_name(path: Path, rel_path: str) -> str:
    # The invocation root is looked up as "." whatever its real name is.
    if rel_path == "":
        return CURRENT_DIR
    return path.name or path.as_posix()


def _sorted_by_name(entries: Sequence[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda entry: entry.name)


class TreeWalker:
    """Emit tree lines for directories below ``invocation_root``."""

    def __init__(
        self,
        registry: FlagRegistry,
        ignore_filter: IgnoreFilter,
        invocation_root: Path,
    ) -> None:
        self.registry = registry
        self.ignore_filter = ignore_filter
        self.invocation_root = invocation_root

    def resolve_context(self, ctx: WalkContext) -> WalkContext:
        """Apply the directory's own flags, if any, on top of inherited state."""
        rel_path = relative_key(ctx.path, self.invocation_root)
        base_name = _base_name(ctx.path, rel_path)
        flags_text = self.registry.lookup(rel_path, base_name)
        if flags_text is None:
            logger.debug("No flags for rel_path=%r basename=%r", rel_path, base_name)
            return ctx

        flags = parse_flags(flags_text)
        return replace(
            ctx,
            max_depth=flags.max_depth,
            structure_only=flags.structure_only,
            files_only_at_level=flags.files_only_at_level,
            depth_since_flag_origin=0,
        )

    def select_entries(self, ctx: WalkContext, entries: Sequence[Entry]) -> list[Entry]:
        """Order and filter one directory's visible entries for display."""
        directories = [entry for entry in entries if entry.is_dir]
        files = [entry for entry in entries if not entry.is_dir]

        if ctx.files_only_at_level is not None:
            if ctx.depth + 1 == ctx.files_only_at_level:
                return _sorted_by_name(files)
            return _sorted_by_name(directories)

        if ctx.prioritized_names:
            prioritized = [entry for entry in directories if entry.name in ctx.prioritized_names]
            others = [entry for entry in directories if entry.name not in ctx.prioritized_names]
            ordered = _sorted_by_name(prioritized) + _sorted_by_name(others)
        else:
            ordered = _sorted_by_name(directories)

        if not ctx.structure_only:
            ordered.extend(_sorted_by_name(files))
        return ordered

    def should_descend(self, ctx: WalkContext, child_since_origin: int) -> bool:
        if ctx.max_depth is None:
            return True
        return child_since_origin < ctx.max_depth

    def walk(self, ctx: WalkContext) -> Iterator[str]:
        """Yield the lines for every visible descendant of ``ctx.path``."""
        ctx = self.resolve_context(ctx)

        entries, scan_error = list_entries(ctx.path)
        if scan_error is not None:
            logger.debug("Cannot list %s: %s", ctx.path, scan_error)
            return
        ordered = self.select_entries(ctx, self.ignore_filter.visible(entries))

        for idx, entry in enumerate(ordered):
            last = idx == len(ordered) - 1
            connector = LAST_BRANCH if last else BRANCH
            if not entry.is_dir:
                yield f"{ctx.indent}{connector}{entry.name}"
                continue

            yield f"{ctx.indent}{connector}{DIRECTORY_MARKER}{entry.name}"
            child_since_origin = ctx.depth_since_flag_origin + 1 if ctx.max_depth is not None else 0
            if not self.should_descend(ctx, child_since_origin):
                logger.debug("Depth limit reached at %s", entry.path)
                continue
            yield from self.walk(
                replace(
                    ctx,
                    path=entry.path,
                    indent=ctx.indent + (SPACE_INDENT if last else PIPE_INDENT),
                    prioritized_names=(),
                    depth=ctx.depth + 1,
                    depth_since_flag_origin=child_since_origin,
                )
            )


def render_tree(
    root: Path,
    registry: FlagRegistry,
    ignore_filter: IgnoreFilter,
    invocation_root: Path,
    prioritized_names: Sequence[str] = (),
) -> list[str]:
    """Return the lines printed below ``root`` (without its header line)."""
    walker = TreeWalker(registry, ignore_filter, invocation_root)
    return list(walker.walk(WalkContext(path=root, prioritized_names=tuple(prioritized_names))))


__all__ = [
    "TreeWalker",
    "WalkContext",
    "render_tree",
]
