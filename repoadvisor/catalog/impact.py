"""Return on investment estimates derived from matched catalog entries."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Optional, Sequence, Tuple

from ..models import CatalogEntry, Finding

# Lower ROI bound (percent) that must be exceeded for each payback band.
PAYBACK_BANDS: Tuple[Tuple[int, str], ...] = ((300, "2-3 months"), (200, "3-6 months"))
DEFAULT_PAYBACK = "6-12 months"
COST_PER_EFFORT_POINT = 10_000

_FIRST_INT = re.compile(r"\d+")
_DURATION = re.compile(r"(\d+)(?:\s*-\s*(\d+))?\s*(day|week|month)s?\b", re.IGNORECASE)
_DAYS_PER_UNIT = {"day": 1, "week": 7, "month": 28}


def roi_percent(roi: str) -> int:
    """First integer in a free-text ROI such as ``"300-500% within 6 months"``."""
    match = _FIRST_INT.search(roi)
    return int(match.group()) if match else 0


def payback_period(entry: CatalogEntry) -> str:
    percent = roi_percent(entry.roi)
    for threshold, label in PAYBACK_BANDS:
        if percent > threshold:
            return label
    return DEFAULT_PAYBACK


def implementation_weeks(entry: CatalogEntry) -> Optional[Tuple[int, int]]:
    """Rollout span in whole weeks; day counts round up."""
    match = _DURATION.search(entry.implementation_time)
    if not match:
        return None
    days = _DAYS_PER_UNIT[match.group(3).lower()]
    low = int(match.group(1))
    high = int(match.group(2) or low)
    return math.ceil(low * days / 7), math.ceil(high * days / 7)


def business_impact(findings: Sequence[Finding]) -> Dict[str, Any]:
    """Aggregate what adopting each finding's top provider would return.

    Only findings with at least one provider contribute. ``time_to_value`` spans
    the fastest and slowest top-provider rollout and is None when no provider
    states a parsable implementation time.
    """
    backed = [finding for finding in findings if finding.providers]
    spans = [span for span in (implementation_weeks(f.providers[0]) for f in backed) if span]
    time_to_value = None
    if spans:
        time_to_value = f"{min(low for low, _ in spans)}-{max(high for _, high in spans)} weeks"
    return {
        "total_roi_percent": sum(roi_percent(finding.providers[0].roi) for finding in backed),
        "provider_backed_findings": len(backed),
        "implementation_cost": int(sum(finding.effort for finding in backed) * COST_PER_EFFORT_POINT),
        "time_to_value": time_to_value,
    }


__all__ = [
    "COST_PER_EFFORT_POINT",
    "DEFAULT_PAYBACK",
    "PAYBACK_BANDS",
    "business_impact",
    "implementation_weeks",
    "payback_period",
    "roi_percent",
]
