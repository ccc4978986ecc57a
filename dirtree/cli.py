"""Command-line front door for dirtree.

Parses positional targets, ``dir:flags`` tokens and ``-ff`` flags files,
builds the flag registry, picks the roots to walk, then prints each tree.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import load_config, load_default_flags_file, load_extra_ignore_names, resolve_log_level
from .gitignore import ALWAYS_IGNORE_NAMES, IgnoreFilter, find_repo_root
from .registry import FlagRegistryBuilder, is_flag_token, load_flags_file
from .walker import TreeWalker, WalkContext

logger = logging.getLogger(__name__)

CURRENT_DIR = "."
LOG_FORMAT = "%(levelname)s: %(message)s"
FLAGS_FILE_OPTION = "-ff"

_EPILOG = f"""\
per-directory flags (use as "directory:flags", quoted as one argument):
  -d N, --depth N                 maximum recursion depth below that directory
  -s, --structure-only            show directories only, no files
  -f N, --files-only-at-level N   show files only at walk depth N

flags file format:
  one directory:flags pair per line; blank lines and # comments are ignored
    pg_data:-d 1 -s
    logs:-f 2
    tmp:-d 0

behavior:
  no arguments or only '.'      show the current directory
  '.' with other directories    show the current directory, listing those first
  only directory paths          show each directory's tree in order

always ignored: {', '.join(sorted(ALWAYS_IGNORE_NAMES))}
Inside a git repository, paths matched by .gitignore are left out.

examples:
  dirtree src lib
  dirtree . src "pg_data:-d 1 -s"
  dirtree -ff flags.txt src
"""


@dataclass(frozen=True)
class RootWalk:
    """One tree to print: header line, directory, and names listed first."""

    header: str
    path: Path
    prioritized_names: tuple[str, ...] = ()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirtree",
        description=(
            "Print a tree of directory contents with ├──/└── connectors. "
            "Respects .gitignore rules and per-directory flags."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "targets",
        nargs="*",
        metavar="target",
        help="Directory path, '.', or 'directory:flags' token.",
    )
    parser.add_argument(
        FLAGS_FILE_OPTION,
        dest="flags_file",
        metavar="FILE",
        default=None,
        help="Load directory-specific flags from FILE.",
    )
    return parser


_stderr_handler: logging.Handler | None = None


def configure_logging(level: int) -> None:
    """Route package log records to the current stderr as ``LEVEL: message``."""
    global _stderr_handler
    package_logger = logging.getLogger("dirtree")
    if _stderr_handler is not None:
        package_logger.removeHandler(_stderr_handler)
    _stderr_handler = logging.StreamHandler(sys.stderr)
    _stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(_stderr_handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


def _resolve_target(target: str, invocation_root: Path) -> Path:
    return invocation_root / target


def _load_flags_file(path: Path, builder: FlagRegistryBuilder) -> None:
    try:
        loaded = load_flags_file(path, builder)
    except OSError:
        logger.warning("Flags file '%s' not found. Ignoring.", path)
        return
    except UnicodeDecodeError as exc:
        logger.warning("Flags file '%s' is not valid UTF-8 (%s). Ignoring.", path, exc.reason)
        return
    logger.debug("Loaded %d flag entries from %s", loaded, path)


def positional_arguments(argv: Sequence[str]) -> list[str]:
    """Return every argument except ``-ff FILE``, in command-line order.

    Unrecognized dash arguments stay in place as positionals.
    """
    positionals: list[str] = []
    idx = 0
    while idx < len(argv):
        arg = argv[idx]
        if arg == FLAGS_FILE_OPTION:
            idx += 2
            continue
        if arg.startswith(FLAGS_FILE_OPTION + "=") or arg == "--":
            idx += 1
            continue
        positionals.append(arg)
        idx += 1
    return positionals


def collect_targets(
    positionals: Sequence[str],
    builder: FlagRegistryBuilder,
) -> tuple[list[str], bool]:
    """Register ``dir:flags`` tokens and return ``(explicit_targets, dot_present)``.

    A flag token whose directory exists is also an explicit target.
    """
    explicit: list[str] = []
    dot_present = False
    for arg in positionals:
        if arg == CURRENT_DIR:
            dot_present = True
        elif is_flag_token(arg):
            directory = builder.register_token(arg)
            if _resolve_target(directory, builder.invocation_root).is_dir():
                explicit.append(directory)
        else:
            explicit.append(arg)
    return explicit, dot_present


def select_roots(
    explicit: Sequence[str],
    dot_present: bool,
    invocation_root: Path,
) -> list[RootWalk]:
    """Turn parsed targets into the walks to perform.

    Missing or non-directory targets are reported and skipped.
    """
    if not explicit:
        return [RootWalk(header=f"{CURRENT_DIR}/", path=invocation_root)]

    existing: list[str] = []
    for target in explicit:
        if _resolve_target(target, invocation_root).is_dir():
            existing.append(target)
        else:
            logger.error("Path '%s' does not exist or is not a directory. Skipping.", target)

    if dot_present:
        prioritized = tuple(dict.fromkeys(Path(target).name for target in existing))
        return [
            RootWalk(
                header=f"{CURRENT_DIR}/",
                path=invocation_root,
                prioritized_names=prioritized,
            )
        ]

    return [
        RootWalk(header=f"{target}/", path=_resolve_target(target, invocation_root))
        for target in existing
    ]


def main(argv: Sequence[str] | None = None, cwd: Path | None = None) -> None:
    """Parse CLI arguments and print one tree per selected root.

    ``cwd`` is primarily for tests; when omitted the current working
    directory is the invocation root.
    """
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args, _unknown = parser.parse_known_args(argv)

    config = load_config()
    configure_logging(resolve_log_level(config=config))

    invocation_root = cwd if cwd is not None else Path.cwd()
    builder = FlagRegistryBuilder(invocation_root)

    if args.flags_file is not None:
        _load_flags_file(_resolve_target(args.flags_file, invocation_root), builder)
    else:
        default_flags = load_default_flags_file(config)
        if default_flags is not None:
            _load_flags_file(default_flags, builder)

    explicit, dot_present = collect_targets(positional_arguments(argv), builder)
    registry = builder.build()
    logger.debug("Targets %s, '.' present: %s, %d flag entries", explicit, dot_present, len(registry))

    repo_root = find_repo_root(invocation_root)
    if repo_root is None:
        logger.warning("Not in a Git repository. .gitignore rules will not be applied.")
    ignore_filter = IgnoreFilter(repo_root, extra_names=load_extra_ignore_names(config))
    walker = TreeWalker(registry, ignore_filter, invocation_root)

    out = sys.stdout
    for root in select_roots(explicit, dot_present, invocation_root):
        out.write(root.header + "\n")
        for line in walker.walk(WalkContext(path=root.path, prioritized_names=root.prioritized_names)):
            out.write(line + "\n")
    out.flush()


if __name__ == "__main__":
    main()
