"""Tests for repoadvisor.catalog."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoadvisor.catalog import CatalogError, CatalogMatcher, load_catalog, parse_catalog, significant_words
from repoadvisor.catalog.matcher import roi_bonus
from repoadvisor.models import CatalogEntry, Finding


def _entry(name: str, group: str = "search", **overrides) -> CatalogEntry:
    values = dict(
        name=name,
        company="Acme",
        url="https://example.com",
        description="Hosted search with typo tolerance",
        pricing="Free",
        business_impact="Faster discovery",
        implementation_time="1 week",
        complexity="high",
        roi="0%",
        use_cases=("instant search results",),
        group=group,
    )
    values.update(overrides)
    return CatalogEntry(**values)


def _finding(**overrides) -> Finding:
    values = dict(
        id="hosted-search",
        category="advanced-search",
        title="Replace basic lookups with typo-tolerant search",
        description="Hosted search adds relevance ranking and instant results.",
        impact=7,
        effort=4,
        confidence=0.7,
        catalog_groups=("search",),
    )
    values.update(overrides)
    return Finding(**values)


def test_bundled_catalog_loads_and_is_cached() -> None:
    entries = load_catalog()

    assert entries
    assert load_catalog() is entries
    groups = {entry.group for entry in entries}
    assert {"payments", "security", "privacy", "quality", "search"} <= groups
    assert all(entry.use_cases for entry in entries)


def test_invalid_catalog_raises(tmp_path: Path) -> None:
    bad = tmp_path / "catalog.yml"
    bad.write_text("version: 1\ngroups:\n  search:\n    - name: Nameless\n      complexity: trivial\n", encoding="utf-8")

    with pytest.raises(CatalogError):
        load_catalog(bad)


def test_unreadable_catalog_raises(tmp_path: Path) -> None:
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "missing.yml")
    with pytest.raises(CatalogError):
        parse_catalog(["not", "a", "mapping"])


def test_significant_words_and_roi_bonus() -> None:
    assert significant_words("Add AI to the shop-front, now!") == frozenset({"shop", "front"})
    assert roi_bonus("300-500% within 6 months") == 3.0
    assert roi_bonus("900%") == 5
    assert roi_bonus("unknown") == 0.0


def test_match_prefers_relevant_easy_high_roi_entries() -> None:
    matcher = CatalogMatcher(
        [
            _entry("Slow", complexity="very_high"),
            _entry("Easy", complexity="very_low", roi="300%"),
            _entry("Off topic", description="Payroll software", use_cases=("salaries",)),
            _entry("Other group", group="payments"),
        ]
    )

    names = [entry.name for entry in matcher.match(_finding())]

    assert names == ["Easy", "Slow"]


def test_match_keeps_insertion_order_on_ties_and_caps_results() -> None:
    entries = [_entry(f"Entry {i}") for i in range(5)]

    names = [entry.name for entry in CatalogMatcher(entries).match(_finding())]

    assert names == ["Entry 0", "Entry 1", "Entry 2"]
    assert [entry.name for entry in CatalogMatcher(entries, max_providers=1).match(_finding())] == ["Entry 0"]


def test_finding_without_groups_searches_everything() -> None:
    matcher = CatalogMatcher([_entry("Anywhere", group="misc")])

    assert [entry.name for entry in matcher.match(_finding(catalog_groups=()))] == ["Anywhere"]
    assert matcher.match(_finding()) == []


def test_bundled_catalog_covers_payment_and_security_findings() -> None:
    matcher = CatalogMatcher(load_catalog())
    payment = _finding(
        id="payment-wallets",
        category="payment-optimization",
        title="Offer digital wallets at checkout",
        description="No Apple Pay or Google Pay option was found. Wallet payments lift conversion.",
        catalog_groups=("payments",),
    )
    security = _finding(
        id="sql-injection",
        category="security",
        title="Parameterize SQL built from request data",
        description="Files build SQL strings from request values, which allows SQL injection.",
        catalog_groups=("security",),
    )

    payment_providers = matcher.match(payment)
    security_providers = matcher.match(security)

    assert 1 <= len(payment_providers) <= 3
    assert {entry.group for entry in payment_providers} == {"payments"}
    assert 1 <= len(security_providers) <= 3
    assert security_providers[0].name in {"Snyk Code", "Cloudflare WAF"}
