"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed safebom package.
"""

from pathlib import Path

import pytest

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture
def fixture_bytes():
    """Return a loader for raw fixture documents by file name."""
    def load(name: str) -> bytes:
        return (FIXTURES / name).read_bytes()
    return load
