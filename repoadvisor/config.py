"""Configuration loading for repoadvisor (repoadvisor.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import yaml

CONFIG_FILENAME = "repoadvisor.yml"

DEFAULT_EXTENSIONS = [
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".kt",
    ".php",
    ".rb",
    ".go",
    ".cs",
    ".vue",
    ".svelte",
    ".html",
    ".htm",
    ".ejs",
    ".hbs",
]

DEFAULT_STRATEGIES = ["deep", "standard", "baseline"]

_N = TypeVar("_N", int, float)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScanConfig:
    """Snapshot builder settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)
    max_file_bytes: int = 1_000_000
    respect_gitignore: bool = True


@dataclass
class ClassifierConfig:
    """Context classifier thresholds."""

    min_evidence: float = 3.0
    saturation: int = 5


@dataclass
class RankingConfig:
    """Weights of the ranking score and result bounds."""

    impact_weight: float = 2.0
    effort_weight: float = 1.0
    confidence_weight: float = 10.0
    context_fit_bonus: Optional[float] = None
    max_findings: int = 10


@dataclass
class CatalogConfig:
    """Provider catalog location and match bounds."""

    path: Optional[Path] = None
    max_providers: int = 3


@dataclass
class ChainConfig:
    """Analyzer chain strategy order."""

    strategies: List[str] = field(default_factory=lambda: list(DEFAULT_STRATEGIES))


@dataclass
class AdvisorConfig:
    """Represents the settings defined in repoadvisor.yml."""

    root: Path
    scan: ScanConfig = field(default_factory=ScanConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)


def default_config() -> AdvisorConfig:
    return AdvisorConfig(root=Path.cwd())


def load_config(config_path: Path) -> AdvisorConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AdvisorConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        extensions = _as_str_list(scan_data.get("extensions"))
        if extensions:
            scan.extensions = [_normalise_extension(ext) for ext in extensions]
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))
        max_bytes = _as_number(scan_data.get("max_file_bytes"), int)
        if max_bytes is not None and max_bytes > 0:
            scan.max_file_bytes = max_bytes
        respect = _as_bool(scan_data.get("respect_gitignore"))
        if respect is not None:
            scan.respect_gitignore = respect

    classifier = ClassifierConfig()
    classifier_data = _as_dict(data.get("classifier"))
    if classifier_data:
        min_evidence = _as_number(classifier_data.get("min_evidence"), float)
        if min_evidence is not None:
            classifier.min_evidence = min_evidence
        saturation = _as_number(classifier_data.get("saturation"), int)
        if saturation is not None and saturation > 0:
            classifier.saturation = saturation

    ranking = RankingConfig()
    ranking_data = _as_dict(data.get("ranking"))
    if ranking_data:
        for key in ("impact_weight", "effort_weight", "confidence_weight"):
            value = _as_number(ranking_data.get(key), float)
            if value is not None:
                setattr(ranking, key, value)
        ranking.context_fit_bonus = _as_number(ranking_data.get("context_fit_bonus"), float)
        max_findings = _as_number(ranking_data.get("max_findings"), int)
        if max_findings is not None and max_findings > 0:
            ranking.max_findings = max_findings

    catalog = CatalogConfig()
    catalog_data = _as_dict(data.get("catalog"))
    if catalog_data:
        path_str = _as_str(catalog_data.get("path"))
        catalog.path = root / path_str if path_str else None
        max_providers = _as_number(catalog_data.get("max_providers"), int)
        if max_providers is not None:
            catalog.max_providers = min(3, max(1, max_providers))

    chain = ChainConfig()
    chain_data = _as_dict(data.get("chain"))
    if chain_data:
        strategies = _as_str_list(chain_data.get("strategies"))
        if strategies:
            chain.strategies = strategies

    return AdvisorConfig(
        root=root,
        scan=scan,
        classifier=classifier,
        ranking=ranking,
        catalog=catalog,
        chain=chain,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_number(value: Any, kind: Callable[[Any], _N]) -> Optional[_N]:
    """Coerce a YAML scalar with ``kind``; booleans and malformed text give None."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        return kind(value)
    except ValueError:
        return None


_BOOL_WORDS = {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _BOOL_WORDS.get(value.strip().lower())
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AdvisorConfig",
    "CatalogConfig",
    "ChainConfig",
    "ClassifierConfig",
    "ConfigError",
    "RankingConfig",
    "ScanConfig",
    "default_config",
    "load_config",
]
