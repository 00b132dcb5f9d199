"""Turns signals and context into findings by evaluating finding rules."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set, Tuple

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from ..errors import RuleEvaluationError
from ..logging import get_logger
from ..models import AffectedFile, BusinessContext, CodebaseSnapshot, Finding, SignalSet
from .rules import BUILTIN_RULES, FindingRule

MAX_AFFECTED_FILES = 10
FILES_PER_EFFORT_STEP = 3

logger = get_logger("findings")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class FindingGenerator:
    """Evaluates every rule once against one analysis run."""

    def __init__(self, rules: Sequence[FindingRule] | None = None) -> None:
        self.rules = tuple(rules) if rules is not None else BUILTIN_RULES
        self._env = Environment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._templates: Dict[str, Template] = {}

    def generate(
        self,
        snapshot: CodebaseSnapshot,
        signals: SignalSet,
        context: BusinessContext,
    ) -> List[Finding]:
        findings: List[Finding] = []
        seen_ids: Set[str] = set()
        seen_categories: Set[str] = set()
        for rule in self.rules:
            if rule.id in seen_ids or rule.category in seen_categories:
                continue
            if not rule.applies_to(context.type):
                continue
            hits = rule.triggered_by(signals)
            if not hits:
                continue
            try:
                finding = self._build(rule, hits, snapshot, signals, context)
            except RuleEvaluationError as exc:
                logger.warning("Skipping rule: %s", exc)
                continue
            findings.append(finding)
            seen_ids.add(rule.id)
            seen_categories.add(rule.category)
        logger.debug("Generated %d finding(s) for %s context", len(findings), context.type)
        return findings

    def _build(
        self,
        rule: FindingRule,
        hits: Tuple[str, ...],
        snapshot: CodebaseSnapshot,
        signals: SignalSet,
        context: BusinessContext,
    ) -> Finding:
        affected = _affected_files(signals, hits + rule.requires)
        solution = rule.current_solution(signals)
        variables: Dict[str, Any] = {
            "context_type": context.type,
            "audience": context.audience,
            "scale": context.scale,
            "count": len(affected),
            "files": [item.path for item in affected],
            "signals": list(hits),
            "snippets": [item.snippet for item in affected if item.snippet],
            "solution": solution,
            "file_total": len(snapshot.files),
        }
        title = self._render(rule, "title", rule.title, variables).strip()
        description = self._render(rule, "description", rule.description, variables).strip()

        impact = rule.impact
        if rule.impact_scales:
            impact += len(hits) - 1
        effort = rule.effort
        if rule.effort_scales:
            effort += len(affected) // FILES_PER_EFFORT_STEP

        return Finding(
            id=rule.id,
            category=rule.category,
            title=title,
            description=description,
            affected_files=affected,
            impact=_clamp(float(impact), 0.0, 10.0),
            effort=_clamp(float(effort), 0.0, 10.0),
            confidence=_clamp(float(rule.confidence), 0.0, 1.0),
            current_solution=solution,
            catalog_groups=rule.catalog_groups,
        )

    def _render(self, rule: FindingRule, field: str, source: str, variables: Dict[str, Any]) -> str:
        key = f"{rule.id}:{field}"
        try:
            template = self._templates.get(key)
            if template is None:
                template = self._env.from_string(source)
                self._templates[key] = template
            return template.render(**variables)
        except TemplateError as exc:
            raise RuleEvaluationError(rule.id, f"{field} template: {exc}") from exc


def _affected_files(signals: SignalSet, names: Sequence[str]) -> Tuple[AffectedFile, ...]:
    seen: Set[str] = set()
    affected: List[AffectedFile] = []
    for name in names:
        for signal in signals.evidence(name):
            if signal.path in seen:
                continue
            seen.add(signal.path)
            affected.append(AffectedFile(path=signal.path, line_number=signal.line, snippet=signal.snippet))
            if len(affected) >= MAX_AFFECTED_FILES:
                return tuple(affected)
    return tuple(affected)


__all__ = ["FindingGenerator", "MAX_AFFECTED_FILES"]
