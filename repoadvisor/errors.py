"""Exception taxonomy for the analysis engine."""

from __future__ import annotations

from typing import Sequence


class RepoAdvisorError(RuntimeError):
    """Base class for engine errors."""


class FileReadError(RepoAdvisorError):
    """Raised when a single file cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path
        self.reason = reason


class RuleEvaluationError(RepoAdvisorError):
    """Raised when a finding rule cannot be rendered."""

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Rule '{rule_id}' failed: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class AnalysisCancelled(RepoAdvisorError):
    """Raised when the caller's cancel signal is set mid-run."""


class StrategyFailure(RepoAdvisorError):
    """Wraps the exception raised by one strategy of the analyzer chain."""

    def __init__(self, strategy: str, cause: BaseException) -> None:
        super().__init__(f"Strategy '{strategy}' failed: {cause}")
        self.strategy = strategy
        self.cause = cause


class TotalAnalysisFailure(RepoAdvisorError):
    """Raised when every strategy of the analyzer chain failed."""

    def __init__(self, failures: Sequence[StrategyFailure]) -> None:
        names = ", ".join(failure.strategy for failure in failures) or "none"
        super().__init__(f"All analysis strategies failed ({names})")
        self.failures = list(failures)


__all__ = [
    "AnalysisCancelled",
    "FileReadError",
    "RepoAdvisorError",
    "RuleEvaluationError",
    "StrategyFailure",
    "TotalAnalysisFailure",
]
