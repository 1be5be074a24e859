"""
Shared fixtures for pytest.
"""
import pytest

from fakes import FakeStore


@pytest.fixture
def fake_store():
	return FakeStore()
