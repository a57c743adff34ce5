"""Exclude-pattern matching shared by file discovery and rule filtering."""

import fnmatch
from collections.abc import Iterable
from pathlib import Path


def _contains_dirs(parts: tuple[str, ...], dirs: tuple[str, ...]) -> bool:
    n = len(dirs)
    return any(parts[i:i + n] == dirs for i in range(len(parts) - n + 1))


def is_excluded(path: Path, patterns: Iterable[str], is_dir: bool = False) -> bool:
    """Check ``path`` against exclude patterns.

    A pattern ending in ``/`` names directories and matches whole path
    components only, so ``build/`` skips ``app/build/x.js`` but not
    ``app/rebuild/x.js``. Multi-segment forms like ``src/gen/`` must appear
    as consecutive components. Any other pattern is an fnmatch glob tested
    against the file name and the full posix path.
    """
    dir_parts = path.parts if is_dir else path.parent.parts
    posix = path.as_posix()

    for pattern in patterns:
        if pattern.endswith("/"):
            dirs = tuple(p for p in pattern.split("/") if p)
            if dirs and _contains_dirs(dir_parts, dirs):
                return True
        elif fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(posix, pattern):
            return True
    return False
