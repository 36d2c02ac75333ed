import pytest

from tests.helpers import FakeCounters


@pytest.fixture
def counters() -> FakeCounters:
    return FakeCounters()
