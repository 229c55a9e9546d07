"""Test configuration and fixtures for chunkreader."""

from pathlib import Path
from typing import Callable

import pytest


def pytest_addoption(parser):
    """Add custom command-line options for tests."""
    parser.addoption("--run-cli-tests", action="store_true", default=False, help="Run CLI integration tests (slow)")


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory that writes bytes (or UTF-8 text) to a fresh temporary file."""
    counter = {"n": 0}

    def _make_file(content, name: str = "") -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"input-{counter['n']}.bin")
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _make_file


@pytest.fixture
def empty_file(make_file) -> Path:
    """A zero-byte file."""
    return make_file(b"", "empty-file.bin")


@pytest.fixture
def large_file(make_file) -> Path:
    """A 100000 byte file with a non-repeating-looking byte pattern."""
    content = bytes((i * 31 + 7) % 251 for i in range(100_000))
    return make_file(content, "large-file.bin")
