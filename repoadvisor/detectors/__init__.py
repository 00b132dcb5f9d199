"""Detector rule sets and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import (
    QUALITY_GROUP,
    RISK_GROUP,
    TECHNOLOGY_GROUP,
    Detector,
    LinePatternDetector,
    PatternDetector,
    run_detectors,
)
from .quality import QUALITY_DETECTORS
from .risk import RISK_DETECTORS
from .technology import TECHNOLOGY_DETECTORS

_ENTRY_POINT_GROUP = "repoadvisor.detectors"

BUILTIN_DETECTORS: dict[str, Sequence[Detector]] = {
    TECHNOLOGY_GROUP: TECHNOLOGY_DETECTORS,
    RISK_GROUP: RISK_DETECTORS,
    QUALITY_GROUP: QUALITY_DETECTORS,
}


def discover_detectors(
    groups: Sequence[str] = (TECHNOLOGY_GROUP, RISK_GROUP, QUALITY_GROUP),
    enabled: Sequence[str] | None = None,
) -> List[Detector]:
    """Return detectors for the requested groups, honoring optional enabled names.

    Plugins registered under the ``repoadvisor.detectors`` entry point group
    join the set when their ``group`` is requested.
    """

    wanted_groups = {group.lower() for group in groups}
    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    detectors: List[Detector] = []
    seen: Set[str] = set()

    def _add(detector: Detector) -> None:
        key = detector.name.lower()
        if detector.group.lower() not in wanted_groups:
            return
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        detectors.append(detector)
        seen.add(key)

    for group in groups:
        for detector in BUILTIN_DETECTORS.get(group.lower(), ()):
            _add(detector)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - plugin import failures vary
            raise RuntimeError(f"Failed to load detector entry point '{entry.name}': {exc}") from exc
        for detector in _coerce_detectors(loaded):
            _add(detector)

    if enabled_set:
        known = {d.name.lower() for group in BUILTIN_DETECTORS.values() for d in group}
        missing = sorted(name for name in enabled_set - seen if name not in known)
        if missing:
            raise ValueError(f"Unknown detectors requested: {', '.join(missing)}")

    return detectors


def _coerce_detectors(obj: object) -> List[Detector]:
    if isinstance(obj, Detector):
        return [obj]
    if isinstance(obj, type) and issubclass(obj, Detector):
        return [obj()]
    if isinstance(obj, (list, tuple)):
        return [item for entry in obj for item in _coerce_detectors(entry)]
    if callable(obj):
        factory: Callable[[], object] = obj
        return _coerce_detectors(factory())
    raise TypeError("Detector entry point must be a Detector, a list of detectors, or a factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BUILTIN_DETECTORS",
    "Detector",
    "LinePatternDetector",
    "PatternDetector",
    "QUALITY_GROUP",
    "RISK_GROUP",
    "TECHNOLOGY_GROUP",
    "discover_detectors",
    "run_detectors",
]
