"""Core data models shared across repoadvisor components."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

TECHNOLOGY = "technology"
RISK = "risk"

UNSPECIFIED = "unspecified application"


@dataclass(frozen=True)
class FileRecord:
    """A text-analyzable file captured in a snapshot."""

    path: str
    extension: str
    size_bytes: int
    content: str

    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)


@dataclass(frozen=True)
class CodebaseSnapshot:
    """Immutable, path-ordered view of a source tree."""

    root: str
    files: Tuple[FileRecord, ...] = ()

    @property
    def total_lines(self) -> int:
        return sum(record.line_count for record in self.files)

    def find(self, path: str) -> Optional[FileRecord]:
        for record in self.files:
            if record.path == path:
                return record
        return None


@dataclass(frozen=True)
class Signal:
    """Fact emitted by one detector for one file."""

    name: str
    category: str
    strength: float
    path: str
    line: Optional[int] = None
    snippet: Optional[str] = None


class SignalSet:
    """Accumulated signals for one analysis run.

    Signals sharing a name are counted, never overwritten. Evidence is kept in
    emission order so affected files can be reported deterministically.
    """

    def __init__(
        self,
        counts: Mapping[str, int],
        evidence: Mapping[str, Tuple[Signal, ...]],
        file_count: int = 0,
    ) -> None:
        self._counts = dict(counts)
        self._evidence = dict(evidence)
        self.file_count = file_count

    @classmethod
    def from_signals(cls, signals: Iterable[Signal], *, file_count: int = 0) -> "SignalSet":
        counts: Dict[str, int] = defaultdict(int)
        evidence: Dict[str, List[Signal]] = defaultdict(list)
        for signal in signals:
            counts[signal.name] += 1
            evidence[signal.name].append(signal)
        return cls(
            counts,
            {name: tuple(items) for name, items in evidence.items()},
            file_count=file_count,
        )

    def count(self, name: str) -> int:
        return self._counts.get(name, 0)

    def has(self, name: str) -> bool:
        return self._counts.get(name, 0) > 0

    def evidence(self, name: str) -> Tuple[Signal, ...]:
        return self._evidence.get(name, ())

    def names(self) -> List[str]:
        return sorted(self._counts)

    def counts(self) -> Dict[str, int]:
        return {name: self._counts[name] for name in sorted(self._counts)}

    def ratio(self, name: str) -> float:
        """Share of snapshot files that emitted ``name``."""
        if self.file_count <= 0:
            return 0.0
        return self.count(name) / self.file_count

    def by_category(self, category: str) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for name in sorted(self._counts):
            items = self._evidence.get(name, ())
            if items and items[0].category == category:
                result[name] = self._counts[name]
        return result


@dataclass(frozen=True)
class BusinessContext:
    """Coarse classification of what the codebase implements."""

    type: str = UNSPECIFIED
    audience: str = "unknown"
    scale: str = "small"
    scores: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AffectedFile:
    path: str
    line_number: Optional[int] = None
    snippet: Optional[str] = None


@dataclass(frozen=True)
class CatalogEntry:
    """Static description of a third-party product."""

    name: str
    company: str
    url: str
    description: str
    pricing: str
    business_impact: str
    implementation_time: str
    complexity: str
    roi: str
    use_cases: Tuple[str, ...] = ()
    group: str = ""


@dataclass(frozen=True)
class Finding:
    """One improvement recommendation produced by a finding rule."""

    id: str
    category: str
    title: str
    description: str
    affected_files: Tuple[AffectedFile, ...] = ()
    impact: float = 0.0
    effort: float = 0.0
    confidence: float = 0.0
    providers: Tuple[CatalogEntry, ...] = ()
    current_solution: Optional[str] = None
    catalog_groups: Tuple[str, ...] = ()
    payback: Optional[str] = None

    @property
    def priority(self) -> str:
        if self.impact >= 8:
            return "high"
        if self.impact >= 6:
            return "medium"
        return "low"


@dataclass(frozen=True)
class PriorScan:
    """Coarse scan result supplied by an external scanner."""

    language: str = "Unknown"
    framework: str = "Unknown"
    endpoints: Tuple[Mapping[str, str], ...] = ()
    auth_flows: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PriorScan":
        endpoints = data.get("endpoints") or ()
        auth_flows = data.get("auth_flows", data.get("authFlows")) or ()
        return cls(
            language=str(data.get("language") or "Unknown"),
            framework=str(data.get("framework") or "Unknown"),
            endpoints=tuple(dict(item) for item in endpoints if isinstance(item, Mapping)),
            auth_flows=tuple(str(item) for item in auth_flows),
        )


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal value of an analysis run."""

    context: BusinessContext
    findings: Tuple[Finding, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-compatible record."""
        findings: List[Dict[str, Any]] = []
        for finding in self.findings:
            payload = asdict(finding)
            payload["affected_files"] = [asdict(item) for item in finding.affected_files]
            payload["providers"] = [
                {**asdict(entry), "use_cases": list(entry.use_cases)} for entry in finding.providers
            ]
            payload["catalog_groups"] = list(finding.catalog_groups)
            payload["priority"] = finding.priority
            findings.append(payload)
        return {
            "context": {
                "type": self.context.type,
                "audience": self.context.audience,
                "scale": self.context.scale,
                "scores": dict(self.context.scores),
            },
            "findings": findings,
            "metadata": _plain(self.metadata),
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


__all__ = [
    "AffectedFile",
    "AnalysisResult",
    "BusinessContext",
    "CatalogEntry",
    "CodebaseSnapshot",
    "FileRecord",
    "Finding",
    "PriorScan",
    "RISK",
    "Signal",
    "SignalSet",
    "TECHNOLOGY",
    "UNSPECIFIED",
]
