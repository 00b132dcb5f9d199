"""Analyzer chain: try strategies in order until one succeeds."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import AdvisorConfig, default_config
from .errors import AnalysisCancelled, StrategyFailure, TotalAnalysisFailure
from .logging import get_logger
from .models import AnalysisResult, CatalogEntry, CodebaseSnapshot, PriorScan
from .snapshot import SnapshotBuilder
from .strategies import Strategy, build_strategies

Source = Union[str, Path, CodebaseSnapshot]
PriorInput = Union[PriorScan, Mapping[str, Any], None]


class ChainState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AnalyzerChain:
    """Explicit fallback state machine over interchangeable strategies.

    States move ``pending -> running(i) -> succeeded | failed``. A strategy that
    raises is recorded as a :class:`StrategyFailure` and the next one runs; the
    first success is returned untouched apart from the ``attempts`` record.
    Cancellation is never treated as a failure.

    The chain itself holds no per-run state, so one instance may serve
    concurrent runs. Each run reports its path through ``metadata["attempts"]``.
    """

    def __init__(self, strategies: Sequence[Strategy], *, builder: SnapshotBuilder | None = None) -> None:
        if not strategies:
            raise ValueError("AnalyzerChain requires at least one strategy")
        self.strategies = tuple(strategies)
        self.builder = builder or SnapshotBuilder()
        self.logger = get_logger("chain")

    def run(
        self,
        source: Source,
        *,
        prior: PriorInput = None,
        cancel: Optional[Any] = None,
    ) -> AnalysisResult:
        snapshot = self._snapshot(source, cancel)
        prior_scan = _coerce_prior(prior)

        state = ChainState.PENDING
        failures: List[StrategyFailure] = []
        attempts: List[Dict[str, Any]] = []
        for index, strategy in enumerate(self.strategies):
            state = self._transition(state, ChainState.RUNNING, index)
            self.logger.info("Running strategy %s (%d/%d)", strategy.name, index + 1, len(self.strategies))
            try:
                result = strategy.analyze(snapshot, prior_scan, cancel)
            except AnalysisCancelled:
                self._transition(state, ChainState.FAILED, index)
                self.logger.info("Analysis cancelled during strategy %s", strategy.name)
                raise
            except Exception as exc:
                failures.append(StrategyFailure(strategy.name, exc))
                attempts.append({"strategy": strategy.name, "state": ChainState.FAILED.value, "error": str(exc)})
                self.logger.warning("Strategy %s failed: %s", strategy.name, exc)
                continue

            attempts.append({"strategy": strategy.name, "state": ChainState.SUCCEEDED.value, "error": None})
            self._transition(state, ChainState.SUCCEEDED, index)
            self.logger.info("Strategy %s succeeded with %d finding(s)", strategy.name, len(result.findings))
            metadata = dict(result.metadata)
            metadata["attempts"] = attempts
            return AnalysisResult(context=result.context, findings=result.findings, metadata=metadata)

        self._transition(state, ChainState.FAILED, None)
        self.logger.error("All %d strategies failed", len(self.strategies))
        raise TotalAnalysisFailure(failures)

    def _snapshot(self, source: Source, cancel: Optional[Any]) -> CodebaseSnapshot:
        if isinstance(source, CodebaseSnapshot):
            return source
        return self.builder.build(Path(source), cancel=cancel)

    def _transition(self, current: ChainState, target: ChainState, index: Optional[int]) -> ChainState:
        self.logger.debug("Chain state %s -> %s (strategy index %s)", current.value, target.value, index)
        return target


def _coerce_prior(prior: PriorInput) -> Optional[PriorScan]:
    if prior is None or isinstance(prior, PriorScan):
        return prior
    return PriorScan.from_mapping(prior)


def build_default_chain(
    config: Optional[AdvisorConfig] = None,
    catalog: Optional[Sequence[CatalogEntry]] = None,
) -> AnalyzerChain:
    config = config or default_config()
    strategies = build_strategies(config.chain.strategies, config, catalog)
    return AnalyzerChain(strategies, builder=SnapshotBuilder(config.scan))


def analyze(
    source: Source,
    *,
    config: Optional[AdvisorConfig] = None,
    prior: PriorInput = None,
    cancel: Optional[Any] = None,
) -> AnalysisResult:
    """Analyze a source tree or snapshot with the default strategy chain."""
    return build_default_chain(config).run(source, prior=prior, cancel=cancel)


__all__ = ["AnalyzerChain", "ChainState", "analyze", "build_default_chain"]
