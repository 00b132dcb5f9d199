"""Coarse prior scan: language, framework, endpoints and auth flows."""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List

from .dependencies import DependencyInventory, collect_dependencies, detect_frameworks
from .models import CodebaseSnapshot, PriorScan

_LANGUAGE_BY_SUFFIX = {
    ".py": "Python",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".java": "Java",
    ".kt": "Kotlin",
    ".go": "Go",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cs": "C#",
}

_ROUTE_PATTERNS = (
    re.compile(r"\b(?:app|router)\.(get|post|put|delete|patch)\(\s*['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"@\w+\.(get|post|put|delete|patch)\(\s*['\"]([^'\"]+)['\"]"),
    re.compile(r"@\w+\.route\(\s*['\"]([^'\"]+)['\"]()"),
)

_AUTH_PATTERN = re.compile(r"passport|jsonwebtoken|\bjwt\b|\bauth\b|login", re.IGNORECASE)


def coarse_scan(snapshot: CodebaseSnapshot, inventory: DependencyInventory | None = None) -> PriorScan:
    """Return the quick scan the host would otherwise supply."""
    inventory = inventory or collect_dependencies(snapshot)

    counts = Counter(
        _LANGUAGE_BY_SUFFIX[record.extension]
        for record in snapshot.files
        if record.extension in _LANGUAGE_BY_SUFFIX
    )
    language = counts.most_common(1)[0][0] if counts else "Unknown"

    frameworks = detect_frameworks(inventory)
    framework_labels = [label for labels in frameworks.values() for label in labels]
    framework = ", ".join(framework_labels) if framework_labels else "Unknown"

    endpoints: List[Dict[str, str]] = []
    auth_flows: List[str] = []
    for record in snapshot.files:
        if record.extension not in _LANGUAGE_BY_SUFFIX:
            continue
        for pattern in _ROUTE_PATTERNS:
            for match in pattern.finditer(record.content):
                first, second = match.group(1), match.group(2)
                if second:
                    method, path = first.upper(), second
                else:
                    method, path = "ANY", first
                endpoints.append({"method": method, "path": path, "file": record.path})
        if _AUTH_PATTERN.search(record.content):
            auth_flows.append(record.path)

    return PriorScan(
        language=language,
        framework=framework,
        endpoints=tuple(endpoints),
        auth_flows=tuple(auth_flows),
    )


__all__ = ["coarse_scan"]
