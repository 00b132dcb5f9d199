"""Declarative finding rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..classifier import ECOMMERCE, INTERNAL_TOOL, PUBLIC_SITE
from ..models import SignalSet


@dataclass(frozen=True)
class FindingRule:
    """One recommendation the generator can emit.

    A rule fires when every ``requires`` signal is present and either a
    ``triggers`` signal is present or a ``weak`` signal covers no more than its
    share of files. Any ``satisfied_by`` signal suppresses the rule, so a gap is
    only reported when its absence is unambiguous.
    """

    id: str
    category: str
    title: str
    description: str
    impact: float
    effort: float
    confidence: float
    contexts: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()
    triggers: Tuple[str, ...] = ()
    weak: Tuple[Tuple[str, float], ...] = ()
    satisfied_by: Tuple[str, ...] = ()
    catalog_groups: Tuple[str, ...] = ()
    current_solutions: Tuple[Tuple[str, str], ...] = ()
    effort_scales: bool = False
    impact_scales: bool = False

    def applies_to(self, context_type: str) -> bool:
        return not self.contexts or context_type in self.contexts

    def triggered_by(self, signals: SignalSet) -> Tuple[str, ...]:
        """Return the trigger names that matched, empty when the rule stays silent."""
        if not all(signals.has(name) for name in self.requires):
            return ()
        if any(signals.has(name) for name in self.satisfied_by):
            return ()
        hits = tuple(name for name in self.triggers if signals.has(name))
        if hits:
            return hits
        if signals.file_count > 0:
            weak_hits = tuple(name for name, limit in self.weak if signals.ratio(name) <= limit)
            if weak_hits:
                return weak_hits
        return ()

    def current_solution(self, signals: SignalSet) -> Optional[str]:
        for name, label in self.current_solutions:
            if signals.has(name):
                return label
        return None


BUILTIN_RULES: Tuple[FindingRule, ...] = (
    FindingRule(
        id="payment-wallets",
        category="payment-optimization",
        title="Offer digital wallets at checkout",
        description=(
            "Payments are processed ({{ solution or 'card only' }}) but no Apple Pay, Google Pay or "
            "buy-now-pay-later option was found in {{ count }} payment-related file(s). Wallet payments "
            "shorten checkout and typically lift conversion for {{ audience }} traffic."
        ),
        impact=9,
        effort=3,
        confidence=0.9,
        contexts=(ECOMMERCE,),
        triggers=("tech.payment_processor", "tech.checkout"),
        satisfied_by=("tech.payment_wallets",),
        catalog_groups=("payments",),
        current_solutions=(("tech.payment_processor", "existing card processor"),),
    ),
    FindingRule(
        id="product-recommendations",
        category="personalization",
        title="Personalize what {{ audience }} users see",
        description=(
            "The {{ context_type }} exposes products or pages to visitors but nothing recommends related "
            "items. Behaviour-based recommendations raise order value and engagement."
        ),
        impact=8,
        effort=5,
        confidence=0.75,
        contexts=(ECOMMERCE, PUBLIC_SITE),
        triggers=("tech.commerce", "tech.customer_facing"),
        satisfied_by=("tech.recommendations",),
        catalog_groups=("ai_ml",),
    ),
    FindingRule(
        id="assistant-chatbot",
        category="ai-chatbot",
        title="Add an AI assistant for customer questions",
        description=(
            "No chat or support widget was detected. An assistant trained on product and policy content "
            "answers common {{ audience }} questions and deflects support tickets."
        ),
        impact=7,
        effort=4,
        confidence=0.7,
        contexts=(ECOMMERCE, PUBLIC_SITE),
        triggers=("tech.customer_facing", "tech.checkout"),
        satisfied_by=("tech.chat_support",),
        catalog_groups=("ai_ml", "communication"),
    ),
    FindingRule(
        id="hosted-search",
        category="advanced-search",
        title="Replace basic lookups with typo-tolerant search",
        description=(
            "Catalog or record data is queried in {{ count }} file(s) without a search engine. Hosted search "
            "adds relevance ranking, facets and instant results."
        ),
        impact=7,
        effort=4,
        confidence=0.7,
        contexts=(ECOMMERCE, PUBLIC_SITE, INTERNAL_TOOL),
        triggers=("tech.commerce", "tech.data_management"),
        satisfied_by=("tech.search_engine",),
        catalog_groups=("search",),
    ),
    FindingRule(
        id="response-caching",
        category="performance",
        title="Cache hot database reads",
        description=(
            "{{ count }} file(s) talk to the database and no caching layer was found. A shared cache cuts "
            "latency and database load as the {{ scale }} codebase grows."
        ),
        impact=7,
        effort=4,
        confidence=0.75,
        triggers=("tech.database",),
        satisfied_by=("tech.caching",),
        catalog_groups=("caching", "monitoring"),
        effort_scales=True,
    ),
    FindingRule(
        id="managed-auth",
        category="authentication",
        title="Move to a managed identity provider",
        description=(
            "Authentication is implemented in-house ({{ solution }}) across {{ count }} file(s). A managed "
            "provider brings MFA, social login and breach protection without custom crypto code."
        ),
        impact=8,
        effort=5,
        confidence=0.8,
        triggers=("risk.custom_auth",),
        satisfied_by=("tech.auth_provider",),
        catalog_groups=("authentication",),
        current_solutions=(("risk.custom_auth", "hand-rolled password and token handling"),),
    ),
    FindingRule(
        id="reporting-dashboards",
        category="business-intelligence",
        title="Turn stored data into dashboards",
        description=(
            "The {{ context_type }} manages data in {{ count }} file(s) but exposes no reports. A BI layer "
            "lets the team track the numbers that matter without ad hoc queries."
        ),
        impact=7,
        effort=5,
        confidence=0.7,
        contexts=(INTERNAL_TOOL, ECOMMERCE),
        triggers=("tech.data_management", "tech.database"),
        satisfied_by=("tech.reporting",),
        catalog_groups=("business_intelligence",),
    ),
    FindingRule(
        id="sql-injection",
        category="security",
        title="Parameterize SQL built from request data",
        description=(
            "{{ count }} file(s) build SQL strings by concatenating request values, which allows SQL injection. "
            "Use parameterized queries or an ORM and add a web application firewall."
        ),
        impact=10,
        effort=3,
        confidence=0.95,
        triggers=("risk.sql_concatenation",),
        catalog_groups=("security",),
        effort_scales=True,
    ),
    FindingRule(
        id="request-validation",
        category="input-validation",
        title="Validate request payloads",
        description=(
            "Request bodies and query strings are read in {{ count }} file(s) with no validation library in "
            "the codebase. Schema validation rejects malformed input before it reaches business logic."
        ),
        impact=8,
        effort=3,
        confidence=0.85,
        triggers=("risk.unvalidated_input",),
        satisfied_by=("tech.validation_library",),
        catalog_groups=("security",),
        effort_scales=True,
    ),
    FindingRule(
        id="hardcoded-secrets",
        category="secrets-management",
        title="Move hardcoded credentials into a secret store",
        description=(
            "Credentials appear as string literals in {{ count }} file(s)"
            "{% if solution %} even though other code already reads {{ solution }}{% endif %}. "
            "Rotate them and load every secret from the environment or a managed vault."
        ),
        impact=9,
        effort=2,
        confidence=0.85,
        triggers=("risk.hardcoded_secret",),
        catalog_groups=("security",),
        current_solutions=(("tech.secret_manager", "configuration from the environment"),),
        effort_scales=True,
    ),
    FindingRule(
        id="gdpr-consent",
        category="privacy-compliance",
        title="Add consent management for personal data",
        description=(
            "Personal data, cookies or third-party trackers were found in {{ count }} file(s) "
            "({{ signals | join(', ') }}) without a consent mechanism. GDPR requires informed consent and "
            "a documented basis for processing."
        ),
        impact=8,
        effort=5,
        confidence=0.8,
        triggers=("risk.pii_fields", "risk.third_party_tracking", "risk.client_storage"),
        satisfied_by=("tech.consent_management",),
        catalog_groups=("privacy",),
        impact_scales=True,
    ),
    FindingRule(
        id="error-monitoring",
        category="observability",
        title="Add error tracking and structured monitoring",
        description=(
            "{% if solution %}Errors are recorded through {{ solution }}, but nothing collects or alerts on them"
            "{% else %}No error reporting was found{% endif %}. Error tracking with alerts shows failures in "
            "production before users report them."
        ),
        impact=7,
        effort=3,
        confidence=0.8,
        triggers=("risk.console_logging", "tech.http_routes"),
        satisfied_by=("tech.error_tracking",),
        catalog_groups=("monitoring",),
        current_solutions=(
            ("tech.structured_logging", "application logs"),
            ("risk.console_logging", "console output only"),
        ),
    ),
    FindingRule(
        id="product-analytics",
        category="product-analytics",
        title="Measure how visitors use the product",
        description=(
            "The {{ context_type }} renders pages for {{ audience }} users but no analytics were detected. "
            "Funnels and retention data show where visitors drop off."
        ),
        impact=6,
        effort=2,
        confidence=0.7,
        contexts=(PUBLIC_SITE, ECOMMERCE),
        triggers=("tech.customer_facing", "tech.frontend"),
        satisfied_by=("tech.analytics",),
        catalog_groups=("analytics",),
    ),
    FindingRule(
        id="transactional-email",
        category="communication",
        title="Send email through a delivery API",
        description=(
            "Mail is sent via {{ solution }} in {{ count }} file(s). A delivery API improves inbox placement "
            "and adds bounce and open tracking."
        ),
        impact=6,
        effort=2,
        confidence=0.8,
        triggers=("tech.self_hosted_email",),
        satisfied_by=("tech.email_api",),
        catalog_groups=("communication",),
        current_solutions=(("tech.self_hosted_email", "self-hosted SMTP"),),
    ),
    FindingRule(
        id="cloud-media",
        category="media-storage",
        title="Store uploads in managed object storage",
        description=(
            "Uploads are written to {{ solution }} in {{ count }} file(s). Object storage with a CDN scales "
            "independently of the application servers and survives redeploys."
        ),
        impact=6,
        effort=3,
        confidence=0.75,
        triggers=("tech.local_file_storage",),
        satisfied_by=("tech.cloud_storage",),
        catalog_groups=("media_storage",),
        current_solutions=(("tech.local_file_storage", "local disk"),),
    ),
    FindingRule(
        id="risky-dependencies",
        category="dependency-hygiene",
        title="Replace unmaintained or vulnerable packages",
        description=(
            "Dependency manifests declare packages with known maintenance or security problems: "
            "{{ snippets | join('; ') }}. Replace them and enable automated dependency scanning."
        ),
        impact=6,
        effort=3,
        confidence=0.85,
        triggers=("risk.risky_dependency",),
        catalog_groups=("quality",),
    ),
    FindingRule(
        id="test-coverage",
        category="test-coverage",
        title="Grow the automated test suite",
        description=(
            "Only a small share of files are tests. Automated tests with coverage reporting protect the "
            "{{ scale }} codebase against regressions."
        ),
        impact=6,
        effort=6,
        confidence=0.7,
        requires=("quality.source_file",),
        weak=(("quality.test_suite", 0.1),),
        catalog_groups=("quality",),
    ),
)


__all__ = ["BUILTIN_RULES", "FindingRule"]
