"""Source tree walking and snapshot building."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from .config import ScanConfig
from .dependencies import MANIFEST_FILES
from .errors import AnalysisCancelled, FileReadError
from .logging import get_logger
from .models import CodebaseSnapshot, FileRecord

_DEPENDENCY_DIRS = {
    "node_modules",
    "bower_components",
    "jspm_packages",
    "vendor",
    "__pycache__",
    "venv",
    "env",
    "site-packages",
    "dist",
    "build",
    "target",
    "coverage",
}

logger = get_logger("snapshot")


@dataclass(frozen=True)
class IgnoreRule:
    """A gitignore-style pattern. Patterns containing a slash match from the root."""

    pattern: str
    directory_only: bool = False
    anchored: bool = False
    negate: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        directory_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = "/" in line
        line = line.lstrip("/")
        if not line:
            return None
        return cls(line, directory_only, anchored, negate)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    """Apply ``rules`` in order; the last matching rule wins."""
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_excluded_dir(name: str) -> bool:
    return name.startswith(".") or name in _DEPENDENCY_DIRS


def _check_cancel(cancel: Any) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled("Snapshot build cancelled")


class SnapshotBuilder:
    """Walks a source tree to produce an immutable snapshot."""

    def __init__(self, config: ScanConfig | None = None) -> None:
        self.config = config or ScanConfig()
        self._extensions = {ext.lower() for ext in self.config.extensions}

    def build(self, root: str | Path, *, cancel: Optional[Any] = None) -> CodebaseSnapshot:
        """Return a snapshot of analyzable files below ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Snapshot root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Snapshot root is not a directory: {root}")

        rules = self._load_rules(root_path)
        records: List[FileRecord] = []
        skipped = 0
        for path in self._iter_files(root_path, rules):
            _check_cancel(cancel)
            rel_path = path.relative_to(root_path).as_posix()
            try:
                record = self._read_record(root_path, path, rel_path)
            except FileReadError as exc:
                skipped += 1
                logger.debug("Skipping %s", exc)
                continue
            if record is not None:
                records.append(record)

        records.sort(key=lambda record: record.path)
        logger.debug(
            "Snapshot of %s holds %d files (%d unreadable)", root_path, len(records), skipped
        )
        return CodebaseSnapshot(root=str(root_path), files=tuple(records))

    def _load_rules(self, root: Path) -> List[IgnoreRule]:
        lines = list(self.config.exclude_paths)
        gitignore = root / ".gitignore"
        if self.config.respect_gitignore and gitignore.is_file():
            try:
                lines = gitignore.read_text(encoding="utf-8").splitlines() + lines
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Ignoring unreadable .gitignore: %s", exc)
        return [rule for rule in map(IgnoreRule.parse, lines) if rule is not None]

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        # os.walk does not descend into directory symlinks unless asked to.
        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if _is_excluded_dir(name):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if is_ignored(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if is_ignored(rel_path, False, rules):
                    continue
                if not self._is_analyzable(filename):
                    continue
                yield current_dir / filename

    def _is_analyzable(self, filename: str) -> bool:
        if filename in MANIFEST_FILES:
            return True
        return Path(filename).suffix.lower() in self._extensions

    def _read_record(self, root: Path, path: Path, rel_path: str) -> FileRecord | None:
        try:
            if path.is_symlink():
                target = path.resolve()
                if not target.is_relative_to(root):
                    logger.debug("Skipping %s: symlink leaves the snapshot root", rel_path)
                    return None
            size = path.stat().st_size
            if size > self.config.max_file_bytes:
                logger.debug("Skipping %s: %d bytes exceeds limit", rel_path, size)
                return None
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FileReadError(rel_path, "not valid UTF-8 text") from exc
        except OSError as exc:
            raise FileReadError(rel_path, exc.strerror or str(exc)) from exc

        return FileRecord(
            path=rel_path,
            extension=path.suffix.lower(),
            size_bytes=size,
            content=content,
        )


__all__ = ["IgnoreRule", "MANIFEST_FILES", "SnapshotBuilder", "is_ignored"]
