"""Pytest configuration for integration tests."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from stryde.db import init_db


def pytest_collection_modifyitems(items):
    """Mark everything collected from this directory as an integration test."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def db_path():
    """A fresh database in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "stryde.db"
        asyncio.run(init_db(path))
        yield path
