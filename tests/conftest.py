"""
pytest configuration for videogen_client tests.

Adds the repository root to the Python path and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add repository root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from videogen_client.config import ClientConfig  # noqa: E402

from tests.helpers import FakeClock  # noqa: E402

TEST_SECRET = "test-secret-0123456789"


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def config():
    return ClientConfig(
        base_url="https://api.example.com/",
        hmac_secret=TEST_SECRET,
        poll_interval=1.0,
        poll_timeout=5.0,
    )


@pytest.fixture
def fake_clock():
    return FakeClock()
