"""Tests for repoadvisor.detectors."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List

import pytest

from repoadvisor import detectors as detectors_module
from repoadvisor.classifier import TYPE_WEIGHTS
from repoadvisor.detectors import (
    QUALITY_GROUP,
    RISK_GROUP,
    TECHNOLOGY_GROUP,
    Detector,
    discover_detectors,
    run_detectors,
)
from repoadvisor.detectors.base import pattern, snippet_at
from repoadvisor.errors import AnalysisCancelled
from repoadvisor.findings import BUILTIN_RULES
from repoadvisor.models import RISK, TECHNOLOGY, CodebaseSnapshot, FileRecord, Signal
from repoadvisor.strategies import PRIVACY_SEVERITY


def _record(path: str, content: str) -> FileRecord:
    extension = "." + path.rsplit(".", 1)[-1] if "." in path else ""
    return FileRecord(path=path, extension=extension, size_bytes=len(content), content=content)


def _signals(*records: FileRecord, groups=(TECHNOLOGY_GROUP, RISK_GROUP, QUALITY_GROUP)):
    snapshot = CodebaseSnapshot(root="/repo", files=tuple(records))
    return run_detectors(discover_detectors(groups), snapshot)


def test_pattern_detector_reports_first_match_line_and_snippet() -> None:
    detector = pattern("tech.payment_processor", TECHNOLOGY, TECHNOLOGY_GROUP, r"\bstripe\b")
    record = _record("pay.js", "// payments\nconst stripe = require('stripe');\nstripe.charges.create();\n")

    [signal] = detector.detect(record)

    assert signal.name == "tech.payment_processor"
    assert signal.path == "pay.js"
    assert signal.line == 2
    assert signal.snippet == "const stripe = require('stripe');"


def test_pattern_detector_unless_suppresses_whole_file() -> None:
    detector = pattern(
        "risk.unvalidated_input",
        RISK,
        RISK_GROUP,
        r"req\.body",
        unless=r"\bjoi\b",
    )

    assert detector.detect(_record("a.js", "handle(req.body)\n"))
    assert detector.detect(_record("b.js", "const Joi = require('joi');\nhandle(req.body)\n")) == []


def test_pattern_detector_respects_extension_and_path_filters() -> None:
    detector = pattern("quality.test_suite", TECHNOLOGY, QUALITY_GROUP, path=r"(^|/)tests?/", extensions={".py"})

    assert detector.detect(_record("tests/test_app.py", "x"))
    assert detector.detect(_record("tests/app.js", "x")) == []
    assert detector.detect(_record("src/app.py", "x")) == []


def test_snippet_is_trimmed() -> None:
    text = "short\n" + "x" * 400 + "\n"

    assert snippet_at(text, 1) == "short"
    assert len(snippet_at(text, 2)) == 160
    assert snippet_at(text, 9) == ""


def test_sql_concatenation_requires_every_line_condition() -> None:
    flagged = _record(
        "routes.js",
        """app.post('/users', (req, res) => {
  const sql = "SELECT * FROM users WHERE name = '" + req.body.name + "'";
  db.query(sql);
});
""",
    )
    safe = _record("safe.js", "db.query('SELECT * FROM users WHERE id = ?', [id]);\n")

    signals = _signals(flagged, safe)

    evidence = signals.evidence("risk.sql_concatenation")
    assert [item.path for item in evidence] == ["routes.js"]
    assert evidence[0].line == 2


def test_hardcoded_secret_ignores_environment_lookups() -> None:
    leaked = _record("config.js", "const apiKey = 'sk_live_1234567890abcdef';\n")
    env = _record("env.js", "const apiKey = process.env.API_KEY || 'sk_live_1234567890abcdef';\n")

    signals = _signals(leaked, env)

    assert [item.path for item in signals.evidence("risk.hardcoded_secret")] == ["config.js"]


def test_risky_dependency_detector_lists_packages() -> None:
    manifest = _record("package.json", '{"dependencies": {"moment": "2", "lodash": "4", "react": "18"}}')

    signals = _signals(manifest)

    [signal] = signals.evidence("risk.risky_dependency")
    assert signal.snippet == "lodash, moment"
    assert signal.strength == 2.0


def test_risky_dependency_detector_reads_every_python_manifest() -> None:
    pyproject = _record("pyproject.toml", "[project]\ndependencies = [\"request>=2\", \"httpx\"]\n")
    pipfile = _record("Pipfile", "[packages]\nflask = \"*\"\n\n[dev-packages]\nmoment = \"*\"\n")

    signals = _signals(pyproject, pipfile)

    [signal] = signals.evidence("risk.risky_dependency")
    assert signal.path == "pyproject.toml"
    assert signal.snippet == "request"


def test_quality_detectors_split_tests_from_sources() -> None:
    signals = _signals(
        _record("src/app.py", "print('x')\n"),
        _record("tests/test_app.py", "def test_x():\n    pass\n"),
        _record("web/cart.test.js", "test('x', () => {});\n"),
    )

    assert signals.count("quality.test_suite") == 2
    assert [item.path for item in signals.evidence("quality.source_file")] == ["src/app.py"]


def test_signals_accumulate_per_name() -> None:
    signals = _signals(
        _record("a.js", "stripe.checkout()\n"),
        _record("b.js", "const stripe = 1;\n"),
    )

    assert signals.count("tech.payment_processor") == 2
    assert signals.ratio("tech.payment_processor") == 1.0
    assert "tech.payment_processor" in signals.by_category(TECHNOLOGY)


def test_discover_detectors_filters_groups_and_enabled_names() -> None:
    baseline = discover_detectors((TECHNOLOGY_GROUP,))
    assert baseline
    assert {detector.group for detector in baseline} == {TECHNOLOGY_GROUP}

    only = discover_detectors((TECHNOLOGY_GROUP, RISK_GROUP), enabled=["tech.caching", "risk.custom_auth"])
    assert [detector.name for detector in only] == ["tech.caching", "risk.custom_auth"]


def test_discover_detectors_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        discover_detectors((TECHNOLOGY_GROUP,), enabled=["tech.does_not_exist"])


@dataclass(frozen=True)
class _GraphqlDetector(Detector):
    name: str = "tech.graphql"
    category: str = TECHNOLOGY
    group: str = TECHNOLOGY_GROUP

    def detect(self, record: FileRecord) -> List[Signal]:
        if "graphql" not in record.content:
            return []
        return [Signal(self.name, self.category, 1.0, record.path)]


class _EntryPoint:
    name = "graphql"

    @staticmethod
    def load():
        return [_GraphqlDetector()]


def test_discover_detectors_loads_entry_point_plugins(monkeypatch) -> None:
    monkeypatch.setattr(detectors_module, "_iter_entry_points", lambda: [_EntryPoint()])

    names = [detector.name for detector in discover_detectors((TECHNOLOGY_GROUP,))]

    assert "tech.graphql" in names
    assert names.count("tech.graphql") == 1


def test_run_detectors_honours_cancellation() -> None:
    cancel = threading.Event()
    cancel.set()
    snapshot = CodebaseSnapshot(root="/repo", files=(_record("a.js", "x"),))

    with pytest.raises(AnalysisCancelled):
        run_detectors(discover_detectors(), snapshot, cancel=cancel)


def test_every_builtin_signal_has_a_reader() -> None:
    read = set(PRIVACY_SEVERITY)
    read |= {name for weights in TYPE_WEIGHTS.values() for name in weights}
    for rule in BUILTIN_RULES:
        read |= set(rule.triggers + rule.requires + rule.satisfied_by)
        read |= {name for name, _ in rule.weak}
        read |= {name for name, _ in rule.current_solutions}

    builtin = {detector.name for group in detectors_module.BUILTIN_DETECTORS.values() for detector in group}

    assert builtin - read == set()
