"""Selects catalog entries relevant to a finding."""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from ..models import CatalogEntry, Finding
from .impact import roi_percent

MAX_PROVIDERS = 3

COMPLEXITY_BONUS = {"very_low": 3, "low": 2, "medium": 1}
ROI_BONUS_CAP = 5

_WORD = re.compile(r"[a-z]+")


def significant_words(*texts: str) -> FrozenSet[str]:
    """Lowercase alphabetic tokens longer than three characters."""
    words: Set[str] = set()
    for text in texts:
        words.update(token for token in _WORD.findall(text.lower()) if len(token) > 3)
    return frozenset(words)


def roi_bonus(roi: str) -> float:
    return min(roi_percent(roi) / 100, ROI_BONUS_CAP)


class CatalogMatcher:
    """Ranks catalog entries by word overlap, ease of adoption and ROI."""

    def __init__(self, entries: Sequence[CatalogEntry], max_providers: int = MAX_PROVIDERS) -> None:
        self.entries = tuple(entries)
        self.max_providers = max(1, min(MAX_PROVIDERS, max_providers))

    def candidates(self, finding: Finding, entries: Optional[Iterable[CatalogEntry]] = None) -> List[CatalogEntry]:
        pool = list(entries) if entries is not None else list(self.entries)
        if not finding.catalog_groups:
            return pool
        groups = set(finding.catalog_groups)
        return [entry for entry in pool if entry.group in groups]

    def relevance(self, finding: Finding, entry: CatalogEntry) -> int:
        finding_words = significant_words(finding.category, finding.title, finding.description)
        entry_words = significant_words(entry.description, *entry.use_cases)
        return len(finding_words & entry_words)

    def score(self, finding: Finding, entry: CatalogEntry) -> float:
        return (
            self.relevance(finding, entry) * 2
            + COMPLEXITY_BONUS.get(entry.complexity, 0)
            + roi_bonus(entry.roi)
        )

    def match(self, finding: Finding, entries: Optional[Iterable[CatalogEntry]] = None) -> List[CatalogEntry]:
        scored: List[Tuple[float, CatalogEntry]] = []
        for entry in self.candidates(finding, entries):
            if self.relevance(finding, entry) == 0:
                continue
            scored.append((self.score(finding, entry), entry))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in scored[: self.max_providers]]


__all__ = ["COMPLEXITY_BONUS", "CatalogMatcher", "MAX_PROVIDERS", "roi_bonus", "significant_words"]
