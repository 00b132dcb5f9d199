"""Business-context classification from aggregated signals."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from .config import ClassifierConfig
from .models import UNSPECIFIED, BusinessContext, PriorScan, SignalSet

ECOMMERCE = "e-commerce"
INTERNAL_TOOL = "internal tool"
API_SERVICE = "api service"
PUBLIC_SITE = "public site"

# Exact density ties resolve to the earliest type listed here.
TYPE_PRIORITY: Tuple[str, ...] = (ECOMMERCE, API_SERVICE, INTERNAL_TOOL, PUBLIC_SITE)

TYPE_WEIGHTS: Mapping[str, Mapping[str, float]] = {
    ECOMMERCE: {
        "tech.payment_processor": 2.5,
        "tech.checkout": 2.0,
        "tech.commerce": 1.5,
        "tech.payment_wallets": 1.0,
        "tech.recommendations": 0.5,
    },
    API_SERVICE: {
        "tech.http_routes": 1.5,
        "tech.api_framework": 1.0,
        "tech.validation_library": 0.5,
    },
    INTERNAL_TOOL: {
        "tech.admin_panel": 2.0,
        "tech.reporting": 1.0,
        "tech.data_management": 1.0,
        "tech.database": 0.5,
    },
    PUBLIC_SITE: {
        "tech.customer_facing": 1.5,
        "tech.marketing_pages": 1.5,
        "tech.frontend": 1.0,
        "tech.analytics": 0.5,
    },
}

AUDIENCE_BY_TYPE: Mapping[str, str] = {
    ECOMMERCE: "customer",
    INTERNAL_TOOL: "internal",
    API_SERVICE: "developers",
    PUBLIC_SITE: "public",
    UNSPECIFIED: "unknown",
}

PRIOR_ENDPOINT_WEIGHT = 0.5

SCALES: Tuple[str, ...] = ("small", "medium", "large", "enterprise")
LINE_BREAKPOINTS: Tuple[int, ...] = (2_000, 20_000, 100_000)
DEPENDENCY_BREAKPOINTS: Tuple[int, ...] = (20, 50, 150)


class ContextClassifier:
    """Turns signal counts into a single business context."""

    def __init__(
        self,
        config: ClassifierConfig | None = None,
        weights: Mapping[str, Mapping[str, float]] | None = None,
    ) -> None:
        self.config = config or ClassifierConfig()
        self.weights = weights or TYPE_WEIGHTS

    def densities(self, signals: SignalSet, prior: Optional[PriorScan] = None) -> Dict[str, float]:
        saturation = self.config.saturation
        scores: Dict[str, float] = {}
        for context_type in TYPE_PRIORITY:
            total = 0.0
            for name, weight in self.weights.get(context_type, {}).items():
                total += weight * min(signals.count(name), saturation)
            scores[context_type] = round(total, 3)
        if prior is not None and prior.endpoints:
            bonus = PRIOR_ENDPOINT_WEIGHT * min(len(prior.endpoints), saturation)
            scores[API_SERVICE] = round(scores[API_SERVICE] + bonus, 3)
        return scores

    def classify(
        self,
        signals: SignalSet,
        *,
        line_count: int = 0,
        dependency_count: int = 0,
        prior: Optional[PriorScan] = None,
    ) -> BusinessContext:
        scores = self.densities(signals, prior)
        best_type = UNSPECIFIED
        best_score = 0.0
        for context_type in TYPE_PRIORITY:
            score = scores[context_type]
            if score > best_score:
                best_type, best_score = context_type, score
        if best_score < self.config.min_evidence:
            best_type = UNSPECIFIED

        return BusinessContext(
            type=best_type,
            audience=AUDIENCE_BY_TYPE[best_type],
            scale=estimate_scale(line_count, dependency_count),
            scores=scores,
        )


def estimate_scale(line_count: int, dependency_count: int) -> str:
    by_lines = sum(1 for limit in LINE_BREAKPOINTS if line_count > limit)
    by_deps = sum(1 for limit in DEPENDENCY_BREAKPOINTS if dependency_count > limit)
    return SCALES[max(by_lines, by_deps)]


__all__ = [
    "API_SERVICE",
    "AUDIENCE_BY_TYPE",
    "ContextClassifier",
    "ECOMMERCE",
    "INTERNAL_TOOL",
    "PUBLIC_SITE",
    "TYPE_PRIORITY",
    "TYPE_WEIGHTS",
    "estimate_scale",
]
