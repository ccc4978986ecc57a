"""Public package surface for dirtree.

Exports ``main`` for programmatic CLI invocation.
The tree walker, flag registry and ignore filter live in submodules.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
