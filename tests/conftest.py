"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import FakeHost, FakeQueue, FakeStore, write_tree


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    def _make(files: dict[str, str]) -> Path:
        return write_tree(tmp_path / "repo", files)

    return _make


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost({"README.md": "# Demo\n\n## Features\n\n- Fast\n- Small\n"})
