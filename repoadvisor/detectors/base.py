"""Base classes for detector rules."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..errors import AnalysisCancelled
from ..models import CodebaseSnapshot, FileRecord, Signal, SignalSet

TECHNOLOGY_GROUP = "technology"
RISK_GROUP = "risk"
QUALITY_GROUP = "quality"

_SNIPPET_LIMIT = 160


class Detector(ABC):
    """Contract for rules that emit signals from one file record."""

    name: str
    category: str
    group: str

    @abstractmethod
    def detect(self, record: FileRecord) -> List[Signal]:
        """Return at most one signal per file for this detector."""


def line_of(text: str, index: int) -> int:
    """Return 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


def snippet_at(text: str, line: int) -> str:
    lines = text.splitlines()
    if not 0 < line <= len(lines):
        return ""
    snippet = lines[line - 1].strip()
    if len(snippet) > _SNIPPET_LIMIT:
        snippet = snippet[: _SNIPPET_LIMIT - 1] + "…"
    return snippet


@dataclass(frozen=True)
class PatternDetector(Detector):
    """Regex rule over file content and/or path.

    ``unless`` suppresses the signal for the whole file when it matches, so a
    file that imports a validation library never reports unvalidated input.
    """

    name: str
    category: str
    group: str
    pattern: Optional[re.Pattern[str]] = None
    path_pattern: Optional[re.Pattern[str]] = None
    unless: Optional[re.Pattern[str]] = None
    extensions: Optional[FrozenSet[str]] = None
    strength: float = 1.0

    def detect(self, record: FileRecord) -> List[Signal]:
        if self.extensions is not None and record.extension not in self.extensions:
            return []
        if self.path_pattern is not None and not self.path_pattern.search(record.path):
            return []

        line: Optional[int] = None
        snippet: Optional[str] = None
        if self.pattern is not None:
            match = self.pattern.search(record.content)
            if match is None:
                return []
            line = line_of(record.content, match.start())
            snippet = snippet_at(record.content, line)

        if self.unless is not None and self.unless.search(record.content):
            return []

        return [
            Signal(
                name=self.name,
                category=self.category,
                strength=self.strength,
                path=record.path,
                line=line,
                snippet=snippet,
            )
        ]


@dataclass(frozen=True)
class LinePatternDetector(Detector):
    """Rule where a single line must satisfy every pattern."""

    name: str
    category: str
    group: str
    patterns: Tuple[re.Pattern[str], ...] = ()
    unless_line: Optional[re.Pattern[str]] = None
    extensions: Optional[FrozenSet[str]] = None
    strength: float = 1.0

    def detect(self, record: FileRecord) -> List[Signal]:
        if self.extensions is not None and record.extension not in self.extensions:
            return []
        if not self.patterns:
            return []
        for index, line in enumerate(record.content.splitlines(), start=1):
            if self.unless_line is not None and self.unless_line.search(line):
                continue
            if all(pattern.search(line) for pattern in self.patterns):
                return [
                    Signal(
                        name=self.name,
                        category=self.category,
                        strength=self.strength,
                        path=record.path,
                        line=index,
                        snippet=snippet_at(record.content, index),
                    )
                ]
        return []


def pattern(
    name: str,
    category: str,
    group: str,
    regex: str | None = None,
    *,
    path: str | None = None,
    unless: str | None = None,
    extensions: Iterable[str] | None = None,
    strength: float = 1.0,
    flags: int = re.IGNORECASE,
) -> PatternDetector:
    """Shorthand for declaring a :class:`PatternDetector`."""
    return PatternDetector(
        name=name,
        category=category,
        group=group,
        pattern=re.compile(regex, flags) if regex else None,
        path_pattern=re.compile(path, re.IGNORECASE) if path else None,
        unless=re.compile(unless, flags) if unless else None,
        extensions=frozenset(extensions) if extensions is not None else None,
        strength=strength,
    )


def run_detectors(
    detectors: Sequence[Detector],
    snapshot: CodebaseSnapshot,
    *,
    cancel: Optional[Any] = None,
) -> SignalSet:
    """Apply every detector to every file and aggregate the signals."""
    signals: List[Signal] = []
    for record in snapshot.files:
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Detection cancelled")
        for detector in detectors:
            signals.extend(detector.detect(record))
    return SignalSet.from_signals(signals, file_count=len(snapshot.files))


__all__ = [
    "Detector",
    "LinePatternDetector",
    "PatternDetector",
    "QUALITY_GROUP",
    "RISK_GROUP",
    "TECHNOLOGY_GROUP",
    "line_of",
    "pattern",
    "run_detectors",
    "snippet_at",
]
