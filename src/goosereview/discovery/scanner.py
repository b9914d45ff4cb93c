# src/goosereview/discovery/scanner.py — v1
"""File discovery — deterministic project walk with ignore pruning.

Walks the project with os.scandir, sorting entries by name inside every
directory so repeated runs over an unchanged tree enumerate files in the
same order. Ignored directories are pruned before descending.

Ignore patterns are shell-style globs matched case-sensitively against the
entry name or its posix path relative to the project root:
  - "node_modules"   matches that name anywhere
  - "*.min.js"       matches by name
  - "docs/*.md"      matches by relative path
  - "/build"         anchored to the project root
  - "tmp/"           matches directories only
"""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Iterable, Iterator
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath

from goosereview.discovery.models import CandidateFile, DiscoveryError

logger = logging.getLogger(__name__)

# The tool's own state directory is never part of a review.
DEFAULT_STATE_DIR = ".code-review"


def read_gitignore(project_root: Path) -> list[str]:
    """Return the usable patterns of <root>/.gitignore.

    Blank lines, comments and negations ("!pattern") are dropped.
    """
    path = Path(project_root) / ".gitignore"
    if not path.is_file():
        return []
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return []

    patterns: list[str] = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        patterns.append(line)
    return patterns


def matches_ignore_pattern(name: str, rel_path: str, pattern: str, is_dir: bool) -> bool:
    """Check one entry against one ignore pattern."""
    dir_only = pattern.endswith("/")
    pat = pattern.rstrip("/")
    if not pat or (dir_only and not is_dir):
        return False
    if pat.startswith("/"):
        return fnmatchcase(rel_path, pat[1:])
    if pat.startswith("**/"):
        pat = pat[3:]
    if "/" in pat:
        return fnmatchcase(rel_path, pat)
    return fnmatchcase(name, pat) or fnmatchcase(rel_path, pat)


class FileDiscovery:
    """Lazy, restartable enumeration of analyzable files.

    Every iteration performs a fresh walk and resets the counters below,
    which are final once the iteration is exhausted:
      - total_files: non-ignored regular files seen
      - too_large:   relative paths excluded for exceeding max_file_size
      - errors:      unreadable subtrees
    """

    def __init__(
        self,
        root: Path | str,
        ignore_patterns: Iterable[str] = (),
        extensions: Iterable[str] = (),
        max_file_size: int | None = None,
        directories: Iterable[str] | None = None,
        state_dir: str = DEFAULT_STATE_DIR,
    ) -> None:
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            msg = f"Project root is not a directory: {root_path}"
            raise ValueError(msg)

        self._root = root_path.resolve()
        state = state_dir.strip("/")
        self._patterns = [f"/{state}", *ignore_patterns] if state else list(ignore_patterns)
        self._extensions = frozenset(extensions)
        self._max_file_size = max_file_size
        self._directories = _normalize_directories(directories)

        self.total_files = 0
        self.too_large: list[str] = []
        self.errors: list[DiscoveryError] = []

    @property
    def root(self) -> Path:
        return self._root

    def __iter__(self) -> Iterator[CandidateFile]:
        return self._walk()

    def is_ignored(self, name: str, rel_path: str, is_dir: bool) -> bool:
        return any(
            matches_ignore_pattern(name, rel_path, p, is_dir) for p in self._patterns
        )

    def is_analyzable(self, name: str) -> bool:
        """Case-sensitive extension check (".R" and ".r" are distinct)."""
        ext = os.path.splitext(name)[1]
        return bool(ext) and ext in self._extensions

    # --- Internal helpers ---

    def _walk(self) -> Iterator[CandidateFile]:
        self.total_files = 0
        self.too_large = []
        self.errors = []

        if self._directories is None:
            yield from self._walk_dir(self._root, "")
        else:
            for rel_dir in self._directories:
                if not self._is_inside_root(rel_dir):
                    self._record_error(rel_dir, "Outside project root")
                    continue
                start = self._root / rel_dir
                if not start.is_dir():
                    self._record_error(rel_dir, "Not a directory")
                    continue
                yield from self._walk_dir(start, rel_dir)

        logger.debug(
            "Walked %s: %d files, %d too large, %d unreadable subtrees",
            self._root, self.total_files, len(self.too_large), len(self.errors),
        )

    def _walk_dir(self, directory: Path, rel_dir: str) -> Iterator[CandidateFile]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._record_error(rel_dir or ".", e.strerror or str(e))
            return

        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError:
                continue

            if self.is_ignored(entry.name, rel_path, is_dir):
                continue

            if is_dir:
                yield from self._walk_dir(Path(entry.path), rel_path)
                continue
            if not is_file:
                continue

            self.total_files += 1
            if not self.is_analyzable(entry.name):
                continue

            try:
                size = entry.stat().st_size
            except OSError as e:
                self._record_error(rel_path, e.strerror or str(e))
                continue

            if self._max_file_size is not None and size > self._max_file_size:
                logger.debug("Skipping %s: %d bytes exceeds limit", rel_path, size)
                self.too_large.append(rel_path)
                continue

            yield CandidateFile(
                absolute_path=entry.path,
                relative_path=rel_path,
                size_bytes=size,
            )

    def _is_inside_root(self, rel_dir: str) -> bool:
        """Reject absolute paths, ".." segments and symlinks leaving the root."""
        pure = PurePosixPath(rel_dir)
        if pure.is_absolute() or ".." in pure.parts:
            return False
        return (self._root / rel_dir).resolve().is_relative_to(self._root)

    def _record_error(self, rel_path: str, message: str) -> None:
        logger.warning("Discovery error in %s: %s", rel_path, message)
        self.errors.append(DiscoveryError(path=rel_path, message=message))


def _normalize_directories(directories: Iterable[str] | None) -> list[str] | None:
    """Sort, de-duplicate and drop sub-directories already covered by a parent.

    Absolute and ".." entries are kept as given so the walk can report them.
    """
    if directories is None:
        return None
    cleaned = sorted({posixpath.normpath(d.strip()) for d in directories if d.strip()})
    if not cleaned or "." in cleaned:
        return None
    result: list[str] = []
    for d in cleaned:
        if any(d == kept or d.startswith(kept + "/") for kept in result):
            continue
        result.append(d)
    return result
