"""Extract human-authored feature bullets from a README."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from template_scanner.analysis.context import Manifest, RepoContext, read_text
from template_scanner.models import UNKNOWN_FEATURE

logger = logging.getLogger(__name__)

README_FILES = ("README.md", "readme.md", "Readme.md", "README")
FEATURE_HEADINGS = ("features", "功能", "特性")

MAX_SECTION_FEATURES = 5
MAX_FALLBACK_FEATURES = 3

_HEADING = re.compile(r"^#{1,6}\s*(.*?)\s*#*$")
_BULLET = re.compile(r"^[-*]\s+(.*)$")
_RULE = re.compile(r"^([-*_])(\s*\1){2,}$")


def parse_readme_features(readme: str) -> list[str]:
    """Return feature bullets from a README's features section.

    The section is the first heading whose text mentions "features", "功能"
    or "特性"; it ends at the next heading. Up to 5 ``-``/``*`` bullets are
    taken from it. Without such a section, the first 3 bullets anywhere in
    the document are used instead.
    """
    lines = [line.strip() for line in readme.splitlines()]

    features: list[str] = []
    in_section = False
    for line in lines:
        heading = _HEADING.match(line)
        if heading:
            if in_section:
                break
            title = heading.group(1).lower()
            in_section = any(word in title for word in FEATURE_HEADINGS)
            continue
        if in_section:
            item = _bullet_text(line)
            if item:
                features.append(item)
                if len(features) == MAX_SECTION_FEATURES:
                    break

    if features:
        return features

    for line in lines:
        item = _bullet_text(line)
        if item:
            features.append(item)
            if len(features) == MAX_FALLBACK_FEATURES:
                break
    return features


def extract_core_features(root: str | Path, manifest: Manifest | None = None) -> list[str]:
    """README features, else the manifest description, else ``["Unknown"]``."""
    root = Path(root)
    readme_path = next((root / n for n in README_FILES if (root / n).is_file()), None)

    features: list[str] = []
    if readme_path is not None:
        features = parse_readme_features(read_text(readme_path))
    else:
        logger.info("No README in %s, falling back to manifest description", root)

    if not features:
        manifest = manifest if manifest is not None else RepoContext(root).manifest
        if manifest.description:
            features = [manifest.description]

    return features or [UNKNOWN_FEATURE]


def _bullet_text(line: str) -> str:
    if _RULE.match(line):
        return ""
    m = _BULLET.match(line)
    return m.group(1).strip() if m else ""
