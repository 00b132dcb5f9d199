"""Provider catalog: dataset loading, finding matching and ROI estimates."""

from .impact import business_impact, payback_period, roi_percent
from .loader import DEFAULT_CATALOG_PATH, CatalogError, clear_cache, load_catalog, parse_catalog
from .matcher import CatalogMatcher, significant_words

__all__ = [
    "CatalogError",
    "CatalogMatcher",
    "DEFAULT_CATALOG_PATH",
    "business_impact",
    "clear_cache",
    "load_catalog",
    "parse_catalog",
    "payback_period",
    "roi_percent",
    "significant_words",
]
