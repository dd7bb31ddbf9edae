import pytest

from tests.helpers import FakeSearchClient


@pytest.fixture
def client():
    return FakeSearchClient()
