"""Scores findings and produces the final ordering."""

from __future__ import annotations

from typing import FrozenSet, List, Mapping, Sequence, Set

from .classifier import API_SERVICE, ECOMMERCE, INTERNAL_TOOL, PUBLIC_SITE
from .config import RankingConfig
from .models import BusinessContext, Finding

DEFAULT_CONTEXT_FIT_BONUS = 4.0

# Finding categories canonically associated with each context type.
CONTEXT_FIT: Mapping[str, FrozenSet[str]] = {
    ECOMMERCE: frozenset(
        {"payment-optimization", "personalization", "advanced-search", "security", "privacy-compliance"}
    ),
    INTERNAL_TOOL: frozenset({"performance", "business-intelligence", "authentication"}),
    API_SERVICE: frozenset({"input-validation", "observability", "security", "performance"}),
    PUBLIC_SITE: frozenset({"product-analytics", "ai-chatbot", "advanced-search", "privacy-compliance"}),
}


class Ranker:
    """Orders findings by business value against implementation cost."""

    def __init__(self, config: RankingConfig | None = None, context_fit_bonus: float | None = None) -> None:
        self.config = config or RankingConfig()
        if self.config.context_fit_bonus is not None:
            bonus = self.config.context_fit_bonus
        elif context_fit_bonus is not None:
            bonus = context_fit_bonus
        else:
            bonus = DEFAULT_CONTEXT_FIT_BONUS
        self.context_fit_bonus = bonus

    def score(self, finding: Finding, context: BusinessContext) -> float:
        score = (
            finding.impact * self.config.impact_weight
            - finding.effort * self.config.effort_weight
            + finding.confidence * self.config.confidence_weight
        )
        if finding.category in CONTEXT_FIT.get(context.type, frozenset()):
            score += self.context_fit_bonus
        return round(score, 6)

    def rank(self, findings: Sequence[Finding], context: BusinessContext) -> List[Finding]:
        # sorted() is stable, so exact ties keep generation order.
        ordered = sorted(findings, key=lambda finding: self.score(finding, context), reverse=True)
        ranked: List[Finding] = []
        seen_ids: Set[str] = set()
        seen_categories: Set[str] = set()
        for finding in ordered:
            if finding.id in seen_ids or finding.category in seen_categories:
                continue
            seen_ids.add(finding.id)
            seen_categories.add(finding.category)
            ranked.append(finding)
            if len(ranked) >= self.config.max_findings:
                break
        return ranked


__all__ = ["CONTEXT_FIT", "DEFAULT_CONTEXT_FIT_BONUS", "Ranker"]
