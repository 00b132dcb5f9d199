"""Loads and caches the provider catalog."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..errors import RepoAdvisorError
from ..logging import get_logger
from ..models import CatalogEntry
from .schema import CatalogDocument

DEFAULT_CATALOG_PATH = Path(__file__).with_name("data") / "catalog.yml"

logger = get_logger("catalog")

_CACHE: Dict[Path, Tuple[CatalogEntry, ...]] = {}


class CatalogError(RepoAdvisorError):
    """Raised when the catalog dataset is missing or invalid."""


def load_catalog(path: Optional[Path] = None) -> Tuple[CatalogEntry, ...]:
    """Return catalog entries in file order, loading each dataset only once."""
    catalog_path = Path(path).resolve() if path is not None else DEFAULT_CATALOG_PATH
    cached = _CACHE.get(catalog_path)
    if cached is not None:
        return cached
    entries = parse_catalog(_read(catalog_path), source=catalog_path.name)
    logger.debug("Loaded %d catalog entries from %s", len(entries), catalog_path)
    _CACHE[catalog_path] = entries
    return entries


def parse_catalog(data: object, *, source: str = "catalog") -> Tuple[CatalogEntry, ...]:
    try:
        document = CatalogDocument.model_validate(data)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog in {source}: {exc}") from exc

    entries = []
    for group, items in document.groups.items():
        for item in items:
            entries.append(
                CatalogEntry(
                    name=item.name,
                    company=item.company,
                    url=item.url,
                    description=item.description,
                    pricing=item.pricing,
                    business_impact=item.business_impact,
                    implementation_time=item.implementation_time,
                    complexity=item.complexity,
                    roi=item.roi,
                    use_cases=tuple(item.use_cases),
                    group=group,
                )
            )
    return tuple(entries)


def clear_cache() -> None:
    _CACHE.clear()


def _read(path: Path) -> object:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Unable to read catalog {path}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogError(f"Failed to parse {path.name}: {exc}") from exc


__all__ = ["CatalogError", "DEFAULT_CATALOG_PATH", "clear_cache", "load_catalog", "parse_catalog"]
