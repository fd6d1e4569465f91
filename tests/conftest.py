import pytest

from acfengine import ACFEngine
from tests.helpers import make_engine


@pytest.fixture
def engine() -> ACFEngine:
    return make_engine()
