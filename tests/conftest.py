"""
Shared fixtures for the test suite.
"""

from pathlib import Path
from uuid import UUID, uuid4

import pytest

from tests.fakes import FakeMediaTool, InspectableObjectStore
from tubely.infrastructure.records.repository import InMemoryVideoRepository
from tubely.infrastructure.storage.assets import LocalAssetStore


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def repository() -> InMemoryVideoRepository:
    return InMemoryVideoRepository()


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def video(repository, owner_id):
    return repository.create_video(user_id=owner_id, title="Boots and Cats")


@pytest.fixture
def object_store() -> InspectableObjectStore:
    return InspectableObjectStore(bucket_name="tubely-test")


@pytest.fixture
def media_tool() -> FakeMediaTool:
    return FakeMediaTool()


@pytest.fixture
def asset_store(tmp_path) -> LocalAssetStore:
    return LocalAssetStore(root=tmp_path / "assets", base_url="http://localhost:8091")
