"""Depth-bounded structural scan of a project tree.

Walks the tree from the project root and records directories and files as
StructureEntry items. The rules:

- hidden entries, dependency caches and VCS metadata are never visited;
- the walk stops ``MAX_SCAN_DEPTH`` levels below where it started;
- below ``MAX_FILE_DEPTH`` only important directories are descended into;
- files are recorded only up to ``MAX_FILE_DEPTH``.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from .models import StructureEntry

logger = logging.getLogger(__name__)

DEPENDENCY_CACHE_DIR = "node_modules"

# Directories the scan never enters
EXCLUDED_DIRS: set[str] = {
    DEPENDENCY_CACHE_DIR,
    ".git",
}

# Levels the walk may descend below its starting depth
MAX_SCAN_DEPTH = 3

# Deepest absolute level at which files are recorded and at which
# non-important directories are still descended into
MAX_FILE_DEPTH = 2

IMPORTANT_DIRS: set[str] = {
    "src",
    "app",
    "components",
    "pages",
    "public",
    "tests",
    "cypress",
    "e2e",
    "spec",
    "features",
}

IMPORTANT_FILES: set[str] = {
    "package.json",
    "README.md",
    "index.html",
    "app.js",
    "main.js",
    "index.js",
    "App.jsx",
    "App.tsx",
}

IMPORTANT_EXTENSIONS: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".vue", ".svelte")


def is_skipped(name: str) -> bool:
    """Hidden entries and excluded directories are never recorded."""
    return name.startswith(".") or name in EXCLUDED_DIRS


def is_important_directory(name: str) -> bool:
    return name in IMPORTANT_DIRS


def is_important_file(name: str) -> bool:
    return name in IMPORTANT_FILES or name.endswith(IMPORTANT_EXTENSIONS)


def should_descend(name: str, depth: int) -> bool:
    """Whether to recurse into a directory found at ``depth``."""
    return depth < MAX_FILE_DEPTH or is_important_directory(name)


def records_files_at(depth: int) -> bool:
    return depth <= MAX_FILE_DEPTH


def scan_structure(root: Path, start_depth: int = 0) -> list[StructureEntry]:
    """Scan ``root`` and return its structural entries in walk order.

    ``start_depth`` lets a quick scan begin as if it were already deep in the
    tree, which bounds it to files at the top level and important directories.
    """
    entries: list[StructureEntry] = []
    _walk(root, PurePosixPath(), start_depth, start_depth + MAX_SCAN_DEPTH, entries)
    return entries


def _walk(
    root: Path,
    rel: PurePosixPath,
    depth: int,
    max_depth: int,
    entries: list[StructureEntry],
) -> None:
    if depth > max_depth:
        return

    current = root.joinpath(*rel.parts)
    try:
        children = sorted(current.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.debug("Cannot list %s: %s", current, e)
        return

    for child in children:
        name = child.name
        if is_skipped(name):
            continue

        child_rel = rel / name
        try:
            if child.is_dir():
                important = is_important_directory(name)
                entries.append(
                    StructureEntry(
                        kind="directory",
                        path=str(child_rel),
                        depth=depth,
                        important=important,
                    )
                )
                if should_descend(name, depth):
                    _walk(root, child_rel, depth + 1, max_depth, entries)
            elif child.is_file() and records_files_at(depth):
                entries.append(
                    StructureEntry(
                        kind="file",
                        path=str(child_rel),
                        depth=depth,
                        important=is_important_file(name),
                        extension=child.suffix,
                        size=child.stat().st_size,
                    )
                )
        except OSError as e:
            # Permission problems on a single entry do not stop the scan
            logger.debug("Skipping %s: %s", child, e)
