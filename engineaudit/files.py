"""
engineaudit File Locator — Resolve include/exclude globs into a file list.
"""

import glob
import logging
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = "**/*.js"

# Dependency trees are never the project's own code
EXCLUDED_DIRECTORIES = ("node_modules",)


def _expand(pattern: str, root: Path) -> set[str]:
    return {
        Path(match).as_posix()
        for match in glob.glob(pattern, root_dir=root, recursive=True)
    }


def resolve(
    include_pattern: str = DEFAULT_INCLUDE,
    exclude_pattern: Optional[str] = None,
    excluded_directories: Sequence[str] = EXCLUDED_DIRECTORIES,
    root: str | Path = ".",
) -> list[Path]:
    """Resolve the set of files to audit.

    Args:
        include_pattern: Glob of files to check, relative to root.
        exclude_pattern: Glob of files to leave out, relative to root.
        excluded_directories: Directory names whose contents are always skipped.
        root: Directory the globs are evaluated in.

    Returns:
        Sorted, de-duplicated regular files, relative to root.
    """
    root = Path(root)
    matches = _expand(include_pattern, root)
    if exclude_pattern:
        matches -= _expand(exclude_pattern, root)

    excluded = set(excluded_directories)
    paths = []
    for match in sorted(matches):
        relative = Path(match)
        if excluded.intersection(relative.parts[:-1]):
            continue
        if not (root / relative).is_file():
            continue
        paths.append(relative)

    logger.debug("Resolved %d file(s) from %r", len(paths), include_pattern)
    return paths
