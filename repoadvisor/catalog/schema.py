"""Validation models for the catalog dataset."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field

Complexity = Literal["very_low", "low", "medium", "high", "very_high"]


class CatalogItem(BaseModel):
    name: str = Field(min_length=1)
    company: str
    url: str
    description: str
    pricing: str
    business_impact: str
    implementation_time: str
    complexity: Complexity
    roi: str
    use_cases: List[str] = Field(default_factory=list)


class CatalogDocument(BaseModel):
    version: int
    groups: Dict[str, List[CatalogItem]]


__all__ = ["CatalogDocument", "CatalogItem", "Complexity"]
