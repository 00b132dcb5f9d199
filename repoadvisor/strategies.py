"""Analysis strategies: one pipeline, several depth profiles."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from .catalog import CatalogMatcher, business_impact, load_catalog, payback_period
from .classifier import ContextClassifier
from .config import AdvisorConfig, default_config
from .dependencies import DependencyInventory, collect_dependencies
from .detectors import QUALITY_GROUP, RISK_GROUP, TECHNOLOGY_GROUP, Detector, discover_detectors, run_detectors
from .findings import FindingGenerator, FindingRule
from .logging import get_logger
from .models import AnalysisResult, BusinessContext, CatalogEntry, CodebaseSnapshot, Finding, PriorScan, SignalSet
from .prescan import coarse_scan
from .ranking import Ranker

logger = get_logger("strategies")

# Severity of privacy-relevant risk signals in the GDPR summary.
PRIVACY_SEVERITY: Mapping[str, str] = {
    "risk.pii_fields": "high",
    "risk.third_party_tracking": "high",
    "risk.client_storage": "medium",
}


class Strategy(Protocol):
    """Anything the analyzer chain can attempt."""

    name: str

    def analyze(
        self,
        snapshot: CodebaseSnapshot,
        prior: Optional[PriorScan] = None,
        cancel: Optional[Any] = None,
    ) -> AnalysisResult:
        ...


@dataclass(frozen=True)
class StrategyProfile:
    """Detector richness and scoring weights for one strategy."""

    name: str
    groups: Tuple[str, ...]
    context_fit_bonus: float
    prescan: bool = False


PROFILES: Dict[str, StrategyProfile] = {
    "deep": StrategyProfile(
        name="deep",
        groups=(TECHNOLOGY_GROUP, RISK_GROUP, QUALITY_GROUP),
        context_fit_bonus=5.0,
        prescan=True,
    ),
    "standard": StrategyProfile(
        name="standard",
        groups=(TECHNOLOGY_GROUP, RISK_GROUP),
        context_fit_bonus=4.0,
    ),
    "baseline": StrategyProfile(
        name="baseline",
        groups=(TECHNOLOGY_GROUP,),
        context_fit_bonus=3.0,
    ),
}


class PipelineStrategy:
    """Runs detection, classification, generation, ranking and catalog matching."""

    def __init__(
        self,
        profile: StrategyProfile,
        catalog: Optional[Sequence[CatalogEntry]] = None,
        config: Optional[AdvisorConfig] = None,
        *,
        detectors: Optional[Sequence[Detector]] = None,
        rules: Optional[Sequence[FindingRule]] = None,
    ) -> None:
        self.profile = profile
        self.name = profile.name
        self.config = config or default_config()
        self._catalog = tuple(catalog) if catalog is not None else None
        self._detectors = list(detectors) if detectors is not None else None
        self.generator = FindingGenerator(rules)
        self.classifier = ContextClassifier(self.config.classifier)
        self.ranker = Ranker(self.config.ranking, context_fit_bonus=profile.context_fit_bonus)

    @property
    def catalog(self) -> Tuple[CatalogEntry, ...]:
        if self._catalog is None:
            self._catalog = load_catalog(self.config.catalog.path)
        return self._catalog

    @property
    def detectors(self) -> Sequence[Detector]:
        if self._detectors is None:
            self._detectors = discover_detectors(self.profile.groups)
        return self._detectors

    def analyze(
        self,
        snapshot: CodebaseSnapshot,
        prior: Optional[PriorScan] = None,
        cancel: Optional[Any] = None,
    ) -> AnalysisResult:
        matcher = CatalogMatcher(self.catalog, self.config.catalog.max_providers)
        signals = run_detectors(self.detectors, snapshot, cancel=cancel)
        inventory = collect_dependencies(snapshot)
        if prior is None and self.profile.prescan:
            prior = coarse_scan(snapshot, inventory)

        context = self.classifier.classify(
            signals,
            line_count=snapshot.total_lines,
            dependency_count=inventory.count,
            prior=prior,
        )
        logger.debug("Strategy %s classified snapshot as %s", self.name, context.type)

        findings = self.generator.generate(snapshot, signals, context)
        ranked = self.ranker.rank(findings, context)
        enriched = tuple(_with_providers(finding, matcher.match(finding)) for finding in ranked)

        metadata = self._metadata(snapshot, signals, inventory, prior, enriched, context)
        return AnalysisResult(context=context, findings=enriched, metadata=metadata)

    def _metadata(
        self,
        snapshot: CodebaseSnapshot,
        signals: SignalSet,
        inventory: DependencyInventory,
        prior: Optional[PriorScan],
        findings: Tuple[Finding, ...],
        context: BusinessContext,
    ) -> Dict[str, Any]:
        return {
            "strategy": self.name,
            "file_count": len(snapshot.files),
            "line_count": snapshot.total_lines,
            "dependency_count": inventory.count,
            "signal_counts": signals.counts(),
            "prior_scan": _prior_summary(prior),
            "privacy": privacy_summary(signals),
            "business_impact": business_impact(findings),
            "summary": {
                "context": context.type,
                "finding_count": len(findings),
                "high_priority": sum(1 for finding in findings if finding.priority == "high"),
            },
        }


def _with_providers(finding: Finding, providers: Sequence[CatalogEntry]) -> Finding:
    payback = payback_period(providers[0]) if providers else None
    return replace(finding, providers=tuple(providers), payback=payback)


def privacy_summary(signals: SignalSet) -> Dict[str, Any]:
    """Count privacy risks by severity, one risk per flagged file."""
    counts = {"high": 0, "medium": 0, "low": 0}
    for name, severity in PRIVACY_SEVERITY.items():
        counts[severity] += signals.count(name)
    return {
        "total_risks": sum(counts.values()),
        **counts,
        "consent_management": signals.has("tech.consent_management"),
    }


def _prior_summary(prior: Optional[PriorScan]) -> Optional[Dict[str, Any]]:
    if prior is None:
        return None
    return {
        "language": prior.language,
        "framework": prior.framework,
        "endpoint_count": len(prior.endpoints),
        "auth_flows": list(prior.auth_flows),
    }


def build_strategies(
    names: Sequence[str],
    config: Optional[AdvisorConfig] = None,
    catalog: Optional[Sequence[CatalogEntry]] = None,
) -> list[PipelineStrategy]:
    strategies = []
    for name in names:
        profile = PROFILES.get(name.lower())
        if profile is None:
            raise ValueError(f"Unknown strategy profile '{name}'")
        strategies.append(PipelineStrategy(profile, catalog, config))
    return strategies


__all__ = [
    "PRIVACY_SEVERITY",
    "PROFILES",
    "PipelineStrategy",
    "Strategy",
    "StrategyProfile",
    "build_strategies",
    "privacy_summary",
]
