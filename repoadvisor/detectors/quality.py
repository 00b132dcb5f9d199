"""Path and manifest based signals about engineering hygiene."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..dependencies import parse_manifest
from ..models import RISK, TECHNOLOGY, FileRecord, Signal
from .base import QUALITY_GROUP, Detector, pattern
from .technology import CODE_EXTENSIONS

_TEST_PATH = r"(^|/)(tests?|__tests__|specs?)/|\.(test|spec)\.[a-z]+$|(^|/)test_[^/]+\.py$|_test\.(py|go)$"


@dataclass(frozen=True)
class RiskyDependencyDetector(Detector):
    """Flags manifests that declare packages known to be risky."""

    name: str = "risk.risky_dependency"
    category: str = RISK
    group: str = QUALITY_GROUP

    def detect(self, record: FileRecord) -> List[Signal]:
        manifest = parse_manifest(record)
        if manifest is None or not manifest.risky:
            return []
        return [
            Signal(
                name=self.name,
                category=self.category,
                strength=float(len(manifest.risky)),
                path=record.path,
                snippet=", ".join(manifest.risky),
            )
        ]


QUALITY_DETECTORS: List[Detector] = [
    pattern("quality.test_suite", TECHNOLOGY, QUALITY_GROUP, path=_TEST_PATH),
    pattern(
        "quality.source_file",
        TECHNOLOGY,
        QUALITY_GROUP,
        path=r"^(?!.*(" + _TEST_PATH + r")).*$",
        extensions=CODE_EXTENSIONS,
    ),
    RiskyDependencyDetector(),
]


__all__ = ["QUALITY_DETECTORS", "RiskyDependencyDetector"]
