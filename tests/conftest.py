"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path so `frieda` imports without installing
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from frieda.config import FriConfig  # noqa: E402


@pytest.fixture
def blob() -> bytes:
    """512 bytes: 128 coefficients after encoding."""
    return bytes(range(256)) * 2


@pytest.fixture
def small_blob() -> bytes:
    """32 bytes: 8 coefficients after encoding."""
    return bytes((7 * i + 3) % 256 for i in range(32))


@pytest.fixture
def fast_config() -> FriConfig:
    """Small blowup and grinding so proofs stay quick to build."""
    return FriConfig(blowup_log=2, num_queries=20, pow_bits=4)
