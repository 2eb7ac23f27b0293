"""Technology-stack inference for a cloned repository.

Framework, database and required-service detection are priority-ordered
rule lists (see ``analysis.rules``); the list order is the precedence.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from template_scanner.analysis.context import Manifest, RepoContext
from template_scanner.analysis.rules import Rule, all_matches, dedupe, first_match, text_rule
from template_scanner.errors import AnalysisError
from template_scanner.models import NO_SERVICES, TechStack

logger = logging.getLogger(__name__)

ENV_EXAMPLE_FILES = (".env.example", ".env.sample", "example.env", ".env.template")


def _dep(label: str, *names: str) -> Rule[RepoContext]:
    return Rule(label, lambda ctx: ctx.manifest.has_any(*names))


def _compose(label: str, pattern: str, flags: int = 0) -> Rule[RepoContext]:
    compiled = re.compile(pattern, flags)
    return Rule(label, lambda ctx: bool(compiled.search(ctx.compose_text)))


def _scripts(label: str, needle: str) -> Rule[RepoContext]:
    return Rule(label, lambda ctx: needle in ctx.script_text)


def _dockerfile(label: str, pattern: str) -> Rule[RepoContext]:
    compiled = re.compile(pattern, re.IGNORECASE)
    return Rule(label, lambda ctx: bool(compiled.search(ctx.dockerfile_text)))


def _orchestration(label: str, pattern: str) -> Rule[RepoContext]:
    compiled = re.compile(pattern, re.IGNORECASE)
    return Rule(label, lambda ctx: bool(compiled.search(ctx.orchestration_text)))


def _env_var(label: str, pattern: str) -> Rule[RepoContext]:
    compiled = re.compile(rf"^\s*(?:export\s+)?{pattern}\w*\s*=", re.IGNORECASE | re.MULTILINE)
    return Rule(label, lambda ctx: any(compiled.search(text) for text in ctx.env_texts))


def _layout(label: str, *relpaths: str) -> Rule[RepoContext]:
    return Rule(label, lambda ctx: any(ctx.exists(p) for p in relpaths))


# ─── Rule lists ──────────────────────────────────────────────

FRAMEWORK_RULES: list[Rule[RepoContext]] = [
    # Manifest dependency keys, meta-frameworks before the libraries they wrap
    _dep("Next.js", "next"),
    _dep("Nuxt.js", "nuxt"),
    _dep("SvelteKit", "@sveltejs/kit", "sveltekit"),
    _dep("React", "react"),
    _dep("Vue", "vue"),
    _dep("Angular", "@angular/core"),
    _dep("Express", "express"),
    _dep("Ember", "ember-source", "ember"),
    _dep("Django", "django"),
    _dep("FastAPI", "fastapi"),
    _dep("Flask", "flask"),
    # Directory-structure fallbacks
    Rule("Next.js", lambda ctx: ctx.is_dir("src/app")),
    _layout("Angular", "angular.json"),
    _layout("Nuxt.js", "nuxt.config.js", "nuxt.config.ts"),
]

DATABASE_RULES: list[Rule[RepoContext]] = [
    _compose("PostgreSQL", r"postgres"),
    _compose("MySQL", r"mysql"),
    _compose("MongoDB", r"mongodb|image:\s*['\"]?mongo\b"),
    _compose("Redis", r"redis"),
    _compose("MariaDB", r"mariadb"),
    _dep("PostgreSQL", "pg", "psycopg", "psycopg2", "psycopg2-binary", "asyncpg"),
    _dep("MySQL", "mysql", "mysql2", "pymysql", "mysqlclient"),
    _dep("MongoDB", "mongodb", "mongoose", "pymongo", "motor"),
    _dep("Redis", "redis", "ioredis"),
    _dep("SQLite", "sqlite3", "better-sqlite3", "aiosqlite"),
]

# Applied to each env file in turn; the first file with any match decides.
ENV_DATABASE_RULES: list[Rule[str]] = [
    text_rule("PostgreSQL", r"postgres", re.IGNORECASE),
    text_rule("MySQL", r"mysql", re.IGNORECASE),
    text_rule("MongoDB", r"mongo", re.IGNORECASE),
    text_rule("Redis", r"redis", re.IGNORECASE),
    text_rule("SQLite", r"sqlite", re.IGNORECASE),
]

# Tiers in precedence order; every matching rule contributes a service.
SERVICE_RULES: list[Rule[RepoContext]] = [
    _compose("PostgreSQL", r"postgres"),
    _compose("MySQL", r"mysql"),
    _compose("MongoDB", r"mongodb"),
    _compose("Redis", r"redis"),
    _compose("Nginx", r"nginx"),
    _compose("Elasticsearch", r"elasticsearch"),
    _compose("RabbitMQ", r"rabbitmq"),
    _scripts("Redis", "redis"),
    _scripts("Nginx", "nginx"),
    _scripts("RabbitMQ", "rabbitmq"),
    _dockerfile("Nginx", r"nginx"),
    _dockerfile("Redis", r"redis"),
    _orchestration("PostgreSQL", r"postgres"),
    _orchestration("Redis", r"redis"),
    _env_var("Redis", "REDIS"),
    _env_var("RabbitMQ", r"(?:RABBITMQ|AMQP)"),
    _env_var("Elasticsearch", r"(?:ELASTICSEARCH|ELASTIC_)"),
]

_RANGE_PREFIX = re.compile(r"^[\s^~=<>!v]+")
_PRERELEASE = re.compile(r"(?:^|[-.\d])(?:alpha|beta|rc|canary|next|pre)", re.IGNORECASE)


# ─── Detectors ───────────────────────────────────────────────


def detect_framework(ctx: RepoContext) -> str:
    return first_match(FRAMEWORK_RULES, ctx) or "Unknown"


def detect_database(ctx: RepoContext) -> str:
    """Compose file, then manifest, then env files (in ``ENV_FILES`` order)."""
    found = first_match(DATABASE_RULES, ctx)
    if found:
        return found
    for text in ctx.env_texts:
        found = first_match(ENV_DATABASE_RULES, text)
        if found:
            return found
    return "None"


def detect_required_services(ctx: RepoContext) -> list[str]:
    """Services inferred from compose, scripts, Dockerfile, Kubernetes and env files."""
    services = dedupe(all_matches(SERVICE_RULES, ctx))
    return services or [NO_SERVICES]


def is_potentially_outdated(version: str) -> bool:
    """True for pre-1.0 (``0.x``) or pre-release (``-beta``, ``rc1``...) version specs."""
    bare = _RANGE_PREFIX.sub("", version)
    return bare.startswith("0.") or bool(_PRERELEASE.search(version))


def analyze_dependencies(manifest: Manifest) -> tuple[list[str], list[str], list[str]]:
    """Return (core, dev, potentially_outdated) dependency names, in manifest order."""
    core = list(manifest.dependencies)
    dev = list(manifest.dev_dependencies)
    outdated = [
        name
        for name, version in manifest.dependencies.items()
        if version and is_potentially_outdated(version)
    ]
    return core, dev, outdated


def has_env_example(root: Path) -> bool:
    return any((root / name).is_file() for name in ENV_EXAMPLE_FILES)


# ─── Public API ──────────────────────────────────────────────


def inspect_tech_stack(root: Path) -> TechStack:
    """Synchronous analysis of a clone directory.

    Raises:
        AnalysisError: If ``root`` does not exist or is not a directory.
    """
    if not root.is_dir():
        raise AnalysisError(f"Cannot analyze '{root}': path does not exist or is not a directory.")

    ctx = RepoContext(root)
    core, dev, outdated = analyze_dependencies(ctx.manifest)
    stack = TechStack(
        framework=detect_framework(ctx),
        database=detect_database(ctx),
        required_services=detect_required_services(ctx),
        dependencies=core,
        dev_dependencies=dev,
        potentially_outdated=outdated,
        has_env_example=has_env_example(root),
    )
    logger.debug("Tech stack for %s: %s / %s", root, stack.framework, stack.database)
    return stack


async def analyze_tech_stack(path: str | Path) -> TechStack:
    """Run ``inspect_tech_stack`` off the event loop."""
    return await asyncio.to_thread(inspect_tech_stack, Path(path))
