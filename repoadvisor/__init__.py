"""Heuristic codebase classification and improvement recommendations."""

from .chain import AnalyzerChain, analyze, build_default_chain
from .config import AdvisorConfig, load_config
from .errors import AnalysisCancelled, RepoAdvisorError, StrategyFailure, TotalAnalysisFailure
from .models import AnalysisResult, BusinessContext, CodebaseSnapshot, Finding, PriorScan
from .snapshot import SnapshotBuilder

__version__ = "0.1.0"

__all__ = [
    "AdvisorConfig",
    "AnalysisCancelled",
    "AnalysisResult",
    "AnalyzerChain",
    "BusinessContext",
    "CodebaseSnapshot",
    "Finding",
    "PriorScan",
    "RepoAdvisorError",
    "SnapshotBuilder",
    "StrategyFailure",
    "TotalAnalysisFailure",
    "analyze",
    "build_default_chain",
    "load_config",
]
