"""Lazily-read view of the configuration artifacts in a cloned repository.

Every accessor is defensive: a missing, unreadable or malformed file reads
as empty, never as an error. Files are read at most once per context.
"""

from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

COMPOSE_FILES = ("docker-compose.yml", "docker-compose.yaml", "compose.yml", "compose.yaml")
ENV_FILES = (".env", ".env.example", ".env.sample", "example.env")
ORCHESTRATION_DIRS = ("k8s", "kubernetes")


@dataclass(frozen=True, slots=True)
class Manifest:
    """Dependency manifest (package.json, or pyproject.toml as a fallback)."""

    source: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    description: str | None = None

    @property
    def all_dependencies(self) -> dict[str, str]:
        return {**self.dependencies, **self.dev_dependencies}

    def has_any(self, *names: str) -> bool:
        deps = self.all_dependencies
        return any(name in deps for name in names)


class RepoContext:
    """Read-only access to the files the detection rules inspect."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def exists(self, relpath: str) -> bool:
        return (self.root / relpath).exists()

    def is_dir(self, relpath: str) -> bool:
        return (self.root / relpath).is_dir()

    @cached_property
    def top_level(self) -> frozenset[str]:
        try:
            return frozenset(p.name for p in self.root.iterdir())
        except OSError:
            return frozenset()

    @cached_property
    def manifest(self) -> Manifest:
        package_json = self.root / "package.json"
        if package_json.is_file():
            return _parse_package_json(package_json)
        pyproject = self.root / "pyproject.toml"
        if pyproject.is_file():
            return _parse_pyproject(pyproject)
        return Manifest()

    @cached_property
    def compose_text(self) -> str:
        return "\n".join(read_text(self.root / name) for name in COMPOSE_FILES)

    @cached_property
    def dockerfile_text(self) -> str:
        return read_text(self.root / "Dockerfile")

    @cached_property
    def orchestration_text(self) -> str:
        """Kubernetes manifests: top-level ``*k8s*.yaml`` files plus ``k8s/`` and ``kubernetes/``."""
        paths: list[Path] = []
        for name in sorted(self.top_level):
            if "k8s" in name and name.endswith((".yaml", ".yml")):
                paths.append(self.root / name)
        for dirname in ORCHESTRATION_DIRS:
            directory = self.root / dirname
            if directory.is_dir():
                paths.extend(sorted(p for p in directory.iterdir() if p.suffix in (".yaml", ".yml")))
        return "\n".join(read_text(p) for p in paths if p.is_file())

    @cached_property
    def env_texts(self) -> list[str]:
        """Contents of the env files that exist, in ``ENV_FILES`` order."""
        return [read_text(self.root / name) for name in ENV_FILES if (self.root / name).is_file()]

    @cached_property
    def script_text(self) -> str:
        return " ".join(self.manifest.scripts.values()).lower()


# ─── Manifest parsers ────────────────────────────────────────


def _parse_package_json(path: Path) -> Manifest:
    try:
        data = json.loads(read_text(path))
    except (json.JSONDecodeError, ValueError):
        logger.warning("Malformed package.json at %s", path)
        return Manifest(source="package.json")
    if not isinstance(data, dict):
        return Manifest(source="package.json")

    description = data.get("description")
    return Manifest(
        source="package.json",
        dependencies=_str_dict(data.get("dependencies")),
        dev_dependencies=_str_dict(data.get("devDependencies")),
        scripts=_str_dict(data.get("scripts")),
        description=description.strip() or None if isinstance(description, str) else None,
    )


def _parse_pyproject(path: Path) -> Manifest:
    try:
        data = tomllib.loads(read_text(path))
    except (tomllib.TOMLDecodeError, ValueError):
        logger.warning("Malformed pyproject.toml at %s", path)
        return Manifest(source="pyproject.toml")

    project = data.get("project") if isinstance(data.get("project"), dict) else {}
    poetry = data.get("tool", {}).get("poetry", {}) if isinstance(data.get("tool"), dict) else {}
    if not isinstance(poetry, dict):
        poetry = {}

    deps = _requirements_dict(project.get("dependencies"))
    deps.update(
        {k: v for k, v in _str_dict(poetry.get("dependencies")).items() if k.lower() != "python"}
    )

    dev: dict[str, str] = {}
    optional = project.get("optional-dependencies")
    if isinstance(optional, dict):
        for group in optional.values():
            dev.update(_requirements_dict(group))
    dev.update(_str_dict(poetry.get("dev-dependencies")))

    description = project.get("description") or poetry.get("description")
    return Manifest(
        source="pyproject.toml",
        dependencies=deps,
        dev_dependencies=dev,
        scripts=_str_dict(project.get("scripts")),
        description=description.strip() or None if isinstance(description, str) else None,
    )


_REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*(.*)$")


def _requirements_dict(raw: object) -> dict[str, str]:
    """``["fastapi>=0.100", "httpx"]`` → ``{"fastapi": ">=0.100", "httpx": ""}``."""
    result: dict[str, str] = {}
    if not isinstance(raw, list):
        return result
    for item in raw:
        if not isinstance(item, str):
            continue
        m = _REQUIREMENT.match(item.split(";", maxsplit=1)[0])
        if m:
            result[m.group(1).lower()] = m.group(2).strip()
    return result


def _str_dict(raw: object) -> dict[str, str]:
    """Keep a mapping's keys; non-string values (tables, lists) become empty strings."""
    if not isinstance(raw, dict):
        return {}
    return {str(k): v if isinstance(v, str) else "" for k, v in raw.items()}


def read_text(path: Path) -> str:
    """Read a text file, returning "" if it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        if path.exists():
            logger.warning("Could not read %s: %s", path, exc)
        return ""
