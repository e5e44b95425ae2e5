"""Tree walker enumerating candidate files below a root path."""

from __future__ import annotations

import logging
import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, List, Tuple

from pathspec import GitIgnoreSpec

from docblocks.domain.blocks.errors import SourceIOError
from docblocks.utils.config import CollectorFilters

logger = logging.getLogger(__name__)

IGNORE_FILES = (".gitignore", ".ignore")

IgnoreRules = List[Tuple[Path, GitIgnoreSpec]]


def iter_candidate_files(root: Path, filters: CollectorFilters | None = None) -> List[Path]:
    """Return the files under ``root`` that pass ``filters``, sorted by path.

    Hidden files and directories are skipped, as is anything matched by a
    ``.gitignore`` or ``.ignore`` file found at or below ``root``. Each ignore
    file applies to its own directory and everything beneath it. A file root
    is returned as-is.
    """

    filters = filters or CollectorFilters()
    if root.is_file():
        return [root]
    if not root.is_dir():
        raise SourceIOError("path does not exist or is not a directory", path=root)

    rules: Dict[Path, IgnoreRules] = {}
    files: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        active = rules.pop(base, []) + _load_ignore_rules(base)

        kept = []
        for name in sorted(dirnames):
            child = base / name
            if name.startswith(".") or _ignored(child, active, is_dir=True):
                logger.debug("%s: ignored directory", safe_relpath(child, root))
                continue
            rules[child] = active
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            if name.startswith("."):
                continue
            path = base / name
            relative = safe_relpath(path, root)
            if _ignored(path, active, is_dir=False):
                logger.debug("%s: ignored by ignore file", relative)
            elif _selected(relative, filters):
                files.append(path)
            else:
                logger.debug("%s: filtered out by collector config", relative)
    return sorted(files)


def _load_ignore_rules(directory: Path) -> IgnoreRules:
    loaded: IgnoreRules = []
    for name in IGNORE_FILES:
        candidate = directory / name
        if not candidate.is_file():
            continue
        try:
            lines = candidate.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("%s: unreadable ignore file skipped: %s", candidate, exc)
            continue
        loaded.append((directory, GitIgnoreSpec.from_lines(lines)))
    return loaded


def _ignored(path: Path, rules: IgnoreRules, *, is_dir: bool) -> bool:
    for base, spec in rules:
        relative = path.relative_to(base).as_posix()
        if spec.match_file(relative + "/" if is_dir else relative):
            return True
    return False


def _selected(relative: str, filters: CollectorFilters) -> bool:
    if any(fnmatch(relative, pattern) for pattern in filters.excludes):
        return False
    if not filters.includes:
        return True
    return any(fnmatch(relative, pattern) for pattern in filters.includes)


def safe_relpath(path: Path, base: Path) -> str:
    """Return POSIX relative path when possible, otherwise absolute."""

    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return str(path)
