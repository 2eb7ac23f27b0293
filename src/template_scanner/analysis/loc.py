"""Source walking and line-of-code counting."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from template_scanner.analysis.context import read_text

SKIP_DIRS = frozenset(
    {"node_modules", ".git", "dist", "build", ".next", "vendor", "__pycache__", ".venv", "venv"}
)

CODE_EXTENSIONS = frozenset(
    {
        ".js", ".ts", ".jsx", ".tsx",  # JavaScript/TypeScript
        ".py",
        ".go",
        ".java",
        ".rb",
        ".php",
        ".c", ".cpp", ".h",
        ".rs",
        ".html", ".css", ".scss",  # markup and styles
    }
)

_COMMENT_PREFIXES = ("//", "#", "/*", "*", "<!--")


def iter_files(root: Path, extensions: frozenset[str] | None = None) -> Iterator[Path]:
    """Yield regular files under ``root`` in sorted order, skipping dependency/build/VCS dirs.

    Symlinks are neither followed nor yielded so a clone cannot point the
    walk outside its own directory.
    """
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for name in sorted(filenames):
            path = Path(dirpath, name)
            if path.is_symlink():
                continue
            if extensions is not None and path.suffix.lower() not in extensions:
                continue
            yield path


def count_lines(text: str) -> int:
    """Count non-blank lines that do not start with a common comment marker."""
    count = 0
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(_COMMENT_PREFIXES):
            count += 1
    return count


def count_loc(root: str | Path) -> int:
    """Total lines of code across ``CODE_EXTENSIONS`` files under ``root``."""
    return sum(count_lines(read_text(p)) for p in iter_files(Path(root), CODE_EXTENSIONS))
