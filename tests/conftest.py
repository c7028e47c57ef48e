"""
pytest configuration for partner_client tests.

Adds src directory to Python path for imports and sets up test environment.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def clear_mock_clients_flag(monkeypatch):
    """Start every test with the bypass flag off."""
    monkeypatch.delenv("USE_MOCK_CLIENTS", raising=False)
