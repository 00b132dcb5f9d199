"""Risk signals: personal data, secrets, injection and weak practices."""

from __future__ import annotations

import re
from typing import List

from ..models import RISK
from .base import RISK_GROUP, Detector, LinePatternDetector, pattern
from .technology import CODE_EXTENSIONS, STRUCTURED_LOGGING

_VALIDATION = r"validat(e|ion|or)|\b(joi|yup|zod|ajv|celebrate|pydantic|marshmallow)\b"


def _risk(name: str, regex: str, **kwargs) -> Detector:
    return pattern(f"risk.{name}", RISK, RISK_GROUP, regex, **kwargs)


RISK_DETECTORS: List[Detector] = [
    _risk(
        "pii_fields",
        r"\b(e-?mail|phone(_?number)?|address|birth_?(day|date)|date_of_birth|ssn|personnummer|passport_?number)\b['\"]?\s*[:=]",
        extensions=CODE_EXTENSIONS,
    ),
    _risk("client_storage", r"document\.cookie|localStorage|sessionStorage|res\.cookie\(|set_cookie\("),
    _risk("third_party_tracking", r"google-analytics|googletagmanager|fbq\(|facebook\.net|hotjar|mixpanel"),
    LinePatternDetector(
        name="risk.hardcoded_secret",
        category=RISK,
        group=RISK_GROUP,
        patterns=(
            re.compile(
                r"\b(password|passwd|secret|api[_-]?key|access[_-]?token|private[_-]?key)\w*['\"]?\s*[:=]\s*['\"][^'\"\s]{8,}['\"]",
                re.IGNORECASE,
            ),
        ),
        unless_line=re.compile(r"process\.env|os\.environ|getenv|example|placeholder|<[^>]+>", re.IGNORECASE),
        extensions=CODE_EXTENSIONS,
        strength=2.0,
    ),
    _risk(
        "unvalidated_input",
        r"\breq\.(body|query|params)\b|request\.(form|args|json|get_json)\b|\$_(POST|GET|REQUEST)\b",
        unless=_VALIDATION,
        extensions=CODE_EXTENSIONS,
        strength=1.5,
    ),
    LinePatternDetector(
        name="risk.sql_concatenation",
        category=RISK,
        group=RISK_GROUP,
        patterns=(
            re.compile(r"\b(query|select|insert|update|delete|execute|exec|raw)\b", re.IGNORECASE),
            re.compile(r"['\"`]\s*\+|\+\s*['\"`]|\$\{|%s['\"]\s*%|\bf['\"]", re.IGNORECASE),
            re.compile(r"\breq(uest)?\.|\$\{|\$_(POST|GET|REQUEST)|\bparams\b", re.IGNORECASE),
        ),
        extensions=CODE_EXTENSIONS,
        strength=3.0,
    ),
    _risk(
        "console_logging",
        r"console\.(log|error|warn)\(|^\s*print\(",
        unless=STRUCTURED_LOGGING,
        extensions=CODE_EXTENSIONS,
        flags=re.IGNORECASE | re.MULTILINE,
    ),
    _risk(
        "custom_auth",
        r"\b(bcrypt(js)?|jsonwebtoken|express-session|passlib)\b|jwt\.sign\(|hash_?password",
        extensions=CODE_EXTENSIONS,
    ),
]


__all__ = ["RISK_DETECTORS"]
