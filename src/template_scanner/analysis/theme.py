"""Theme color extraction from stylesheets."""

from __future__ import annotations

import re
from pathlib import Path

from template_scanner.analysis.context import read_text
from template_scanner.analysis.loc import iter_files
from template_scanner.models import DEFAULT_THEME_COLORS

STYLESHEET_EXTENSIONS = frozenset({".css", ".scss", ".less"})
COLORS_PER_FILE = 2

_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


def extract_theme_colors(root: str | Path) -> list[str]:
    """First two ``#rrggbb`` literals of every stylesheet, flattened in walk order."""
    colors: list[str] = []
    for path in iter_files(Path(root), STYLESHEET_EXTENSIONS):
        colors.extend(_HEX_COLOR.findall(read_text(path))[:COLORS_PER_FILE])
    return colors or list(DEFAULT_THEME_COLORS)
