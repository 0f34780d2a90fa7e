"""Fixtures for integration tests using a fake compiler and runtime."""

from pathlib import Path

import pytest

from toolchain_e2e.testing.toolchain import FakeToolchain, WriteSourceFn


@pytest.fixture
def toolchain(tmp_path: Path) -> FakeToolchain:
    """Install a fake compiler and runtime."""
    return FakeToolchain.install(tmp_path)


@pytest.fixture
def write_source(toolchain: FakeToolchain) -> WriteSourceFn:
    """Return a function to create source files."""

    def _write(name: str, code: str) -> str:
        (toolchain.sources / name).write_text(code, encoding="utf-8")
        return name

    return _write
