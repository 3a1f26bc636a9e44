import pytest

from chart_collage.core.config import CollageConfig
from chart_collage.services.media.memory_store import MemoryStore


@pytest.fixture()
def config():
    return CollageConfig(folder="test-collages")


@pytest.fixture()
def store():
    return MemoryStore(folder="test-collages")


@pytest.fixture()
def in_place_store():
    return MemoryStore(folder="test-collages", compose_in_place=True)
