"""Dependency manifest parsing over snapshot records."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .logging import get_logger
from .models import CodebaseSnapshot, FileRecord

# Packages widely reported as unmaintained or compromised.
RISKY_PACKAGES = {"lodash", "moment", "request", "node-serialize", "event-stream"}

logger = get_logger("dependencies")

Declared = Tuple[List[str], List[str]]

_REQUIREMENT_NAME = re.compile(r"[<>=!~;\[ ]")


@dataclass(frozen=True)
class Manifest:
    """Runtime and development dependencies declared by one manifest file."""

    ecosystem: str
    runtime: Tuple[str, ...] = ()
    dev: Tuple[str, ...] = ()

    @property
    def risky(self) -> Tuple[str, ...]:
        return risky_packages(self.runtime)


@dataclass(frozen=True)
class DependencyInventory:
    """Declared dependencies grouped by ecosystem, dev dependencies pooled."""

    python: Tuple[str, ...] = ()
    node: Tuple[str, ...] = ()
    java: Tuple[str, ...] = ()
    go: Tuple[str, ...] = ()
    ruby: Tuple[str, ...] = ()
    php: Tuple[str, ...] = ()
    dev: Tuple[str, ...] = ()

    @property
    def runtime(self) -> Tuple[str, ...]:
        names = set(self.python) | set(self.node) | set(self.java)
        names |= set(self.go) | set(self.ruby) | set(self.php)
        return tuple(sorted(names))

    @property
    def count(self) -> int:
        return len(set(self.runtime) | set(self.dev))

    @property
    def risky(self) -> Tuple[str, ...]:
        return risky_packages(self.runtime)


def risky_packages(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(name for name in set(names) if name.lower() in RISKY_PACKAGES))


def collect_dependencies(snapshot: CodebaseSnapshot) -> DependencyInventory:
    """Parse every dependency manifest captured in the snapshot."""
    runtime: Dict[str, Set[str]] = defaultdict(set)
    dev: Set[str] = set()
    for record in snapshot.files:
        manifest = parse_manifest(record)
        if manifest is None:
            continue
        runtime[manifest.ecosystem].update(manifest.runtime)
        dev.update(manifest.dev)

    return DependencyInventory(
        **{ecosystem: tuple(sorted(names)) for ecosystem, names in runtime.items()},
        dev=tuple(sorted(dev)),
    )


def parse_manifest(record: FileRecord) -> Optional[Manifest]:
    """Return the dependencies declared by ``record``, or None for non-manifests."""
    filename = record.path.rsplit("/", 1)[-1]
    entry = MANIFEST_PARSERS.get(filename)
    if entry is None:
        return None
    ecosystem, parser = entry
    runtime, dev = parser(record.content)
    return Manifest(ecosystem, tuple(runtime), tuple(dev))


def parse_requirements(content: str) -> List[str]:
    packages: List[str] = []
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = _REQUIREMENT_NAME.split(stripped, maxsplit=1)[0].strip()
        if name:
            packages.append(name)
    return packages


def parse_pyproject(content: str) -> List[str]:
    data = _load_toml(content, "pyproject.toml")
    declared: List[object] = []
    project = data.get("project")
    if isinstance(project, dict):
        declared.extend(project.get("dependencies") or [])
        for extra in (project.get("optional-dependencies") or {}).values():
            declared.extend(extra or [])

    poetry = data.get("tool", {}).get("poetry", {}) if isinstance(data.get("tool"), dict) else {}
    if isinstance(poetry, dict):
        declared.extend((poetry.get("dependencies") or {}).keys())

    names = {_REQUIREMENT_NAME.split(dep, maxsplit=1)[0].strip() for dep in declared if isinstance(dep, str)}
    return sorted(name for name in names if name and name.lower() != "python")


def parse_pipfile(content: str) -> Declared:
    data = _load_toml(content, "Pipfile")
    return _table_keys(data, "packages"), _table_keys(data, "dev-packages")


def parse_package_json(content: str) -> Declared:
    data = _load_json(content)
    return _table_keys(data, "dependencies"), _table_keys(data, "devDependencies")


def parse_composer_json(content: str) -> Declared:
    data = _load_json(content)

    def _packages(key: str) -> List[str]:
        # Platform requirements such as php or ext-json are not packages.
        return [name for name in _table_keys(data, key) if "/" in name]

    return _packages("require"), _packages("require-dev")


_GO_REQUIRE = re.compile(r"^(?:require\s+)?([\w.\-~/]+)\s+v\S+")


def parse_go_mod(content: str) -> Declared:
    modules: List[str] = []
    in_block = False
    for raw_line in content.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if line.startswith("require ("):
            in_block = True
            continue
        if in_block and line == ")":
            in_block = False
            continue
        if in_block or line.startswith("require "):
            match = _GO_REQUIRE.match(line)
            if match:
                modules.append(match.group(1))
    return sorted(set(modules)), []


_GEM = re.compile(r"""^gem\s+['"]([^'"]+)['"]""")
_GEM_GROUP = re.compile(r"^group\b(.*)\bdo\b")


def parse_gemfile(content: str) -> Declared:
    runtime: List[str] = []
    dev: List[str] = []
    dev_group = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        group = _GEM_GROUP.match(line)
        if group:
            dev_group = bool(re.search(r":(development|test)\b", group.group(1)))
            continue
        if line == "end":
            dev_group = False
            continue
        gem = _GEM.match(line)
        if gem:
            (dev if dev_group else runtime).append(gem.group(1))
    return sorted(set(runtime)), sorted(set(dev))


def parse_pom(content: str) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        logger.debug("Ignoring unparsable pom.xml: %s", exc)
        return deps

    namespace = root.tag[: root.tag.index("}") + 1] if root.tag.startswith("{") else ""
    for dep in root.iter(f"{namespace}dependency"):
        group = dep.findtext(f"{namespace}groupId", default="")
        artifact = dep.findtext(f"{namespace}artifactId", default="")
        if group and artifact:
            deps.add(f"{group}:{artifact}")
    return deps


_GRADLE_RUNTIME_CONFIGURATIONS = {"implementation", "api", "compile", "compileOnly", "runtimeOnly"}

# Configuration name, then a quoted group:artifact[:version] coordinate.
_GRADLE_DEPENDENCY = re.compile(
    r"""^(\w+)\s*\(?\s*['"]([\w\-.]+:[\w\-.]+)(?::[^'"]*)?['"]"""
)


def parse_gradle(content: str) -> Declared:
    runtime: Set[str] = set()
    dev: Set[str] = set()
    for raw_line in content.splitlines():
        match = _GRADLE_DEPENDENCY.match(raw_line.strip())
        if not match:
            continue
        configuration, coordinate = match.groups()
        if configuration.startswith("test"):
            dev.add(coordinate)
        elif configuration in _GRADLE_RUNTIME_CONFIGURATIONS:
            runtime.add(coordinate)
    return sorted(runtime), sorted(dev)


def _load_toml(content: str, filename: str) -> Dict[str, object]:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        logger.debug("Ignoring unparsable %s: %s", filename, exc)
        return {}


def _load_json(content: str) -> Dict[str, object]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.debug("Ignoring unparsable JSON manifest: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def _table_keys(data: Dict[str, object], key: str) -> List[str]:
    table = data.get(key)
    return sorted(table) if isinstance(table, dict) else []


MANIFEST_PARSERS: Dict[str, Tuple[str, Callable[[str], Declared]]] = {
    "requirements.txt": ("python", lambda text: (parse_requirements(text), [])),
    "pyproject.toml": ("python", lambda text: (parse_pyproject(text), [])),
    "Pipfile": ("python", parse_pipfile),
    "package.json": ("node", parse_package_json),
    "composer.json": ("php", parse_composer_json),
    "go.mod": ("go", parse_go_mod),
    "Gemfile": ("ruby", parse_gemfile),
    "pom.xml": ("java", lambda text: (sorted(parse_pom(text)), [])),
    "build.gradle": ("java", parse_gradle),
    "build.gradle.kts": ("java", parse_gradle),
}

MANIFEST_FILES = frozenset(MANIFEST_PARSERS)

_FRAMEWORKS: Dict[str, Tuple[Tuple[str, ...], Dict[str, str]]] = {
    "Python": (("python",), {"fastapi": "FastAPI", "django": "Django", "flask": "Flask"}),
    "JavaScript": (
        ("node", "dev"),
        {
            "express": "Express",
            "fastify": "Fastify",
            "koa": "Koa",
            "@nestjs/core": "NestJS",
            "next": "Next.js",
            "react": "React",
            "vue": "Vue.js",
        },
    ),
    "Go": (
        ("go",),
        {
            "github.com/gin-gonic/gin": "Gin",
            "github.com/labstack/echo/v4": "Echo",
            "github.com/gofiber/fiber/v2": "Fiber",
        },
    ),
    "Ruby": (("ruby",), {"rails": "Ruby on Rails", "sinatra": "Sinatra"}),
    "PHP": (("php",), {"laravel/framework": "Laravel", "symfony/framework-bundle": "Symfony"}),
}


def detect_frameworks(inventory: DependencyInventory) -> Dict[str, List[str]]:
    """Return framework labels per language from declared dependencies."""
    frameworks: Dict[str, List[str]] = {}
    for language, (fields, mapping) in _FRAMEWORKS.items():
        declared = {dep.lower() for field_name in fields for dep in getattr(inventory, field_name)}
        labels = [label for key, label in mapping.items() if key in declared]
        if labels:
            frameworks[language] = labels

    if any("spring-boot" in dep.lower() or "springframework" in dep.lower() for dep in inventory.java):
        frameworks["Java"] = ["Spring Boot"]
    return frameworks


__all__ = [
    "DependencyInventory",
    "MANIFEST_FILES",
    "MANIFEST_PARSERS",
    "Manifest",
    "RISKY_PACKAGES",
    "collect_dependencies",
    "detect_frameworks",
    "parse_composer_json",
    "parse_gemfile",
    "parse_go_mod",
    "parse_gradle",
    "parse_manifest",
    "parse_package_json",
    "parse_pipfile",
    "parse_pom",
    "parse_pyproject",
    "parse_requirements",
    "risky_packages",
]
