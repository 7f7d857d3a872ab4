"""Shared fixtures."""
import pytest

from tests.fakes import FakeUpstream


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
