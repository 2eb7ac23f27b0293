"""Tests for analysis/theme.py -- stylesheet color extraction."""

from __future__ import annotations

from template_scanner.analysis.theme import extract_theme_colors


class TestExtractThemeColors:
    def test_first_two_colors_per_stylesheet(self, make_repo) -> None:
        root = make_repo(
            {
                "a.css": ":root { --p: #FF0000; --s: #00ff00; --t: #0000ff; }",
                "styles/b.scss": "$brand: #123456;",
            }
        )
        assert extract_theme_colors(root) == ["#FF0000", "#00ff00", "#123456"]

    def test_less_files_included(self, make_repo) -> None:
        root = make_repo({"theme.less": "@primary: #abcdef;"})
        assert extract_theme_colors(root) == ["#abcdef"]

    def test_short_hex_ignored(self, make_repo) -> None:
        root = make_repo({"a.css": "a { color: #fff; }"})
        assert extract_theme_colors(root) == ["#3b82f6", "#1e293b"]

    def test_skips_node_modules(self, make_repo) -> None:
        root = make_repo({"node_modules/lib/x.css": "a { color: #111111; }"})
        assert extract_theme_colors(root) == ["#3b82f6", "#1e293b"]

    def test_defaults_without_stylesheets(self, make_repo) -> None:
        assert extract_theme_colors(make_repo({"index.js": ""})) == ["#3b82f6", "#1e293b"]
