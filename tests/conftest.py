import os

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings, settings
from app.main import app
from app.services.bucket_state_services import BucketStateService
from app.services.move_services import MoveService


def write_file(path, size: int) -> str:
    path = os.fspath(path)
    with open(path, "wb") as f:
        f.write(b"\xab" * size)
    return path


@pytest.fixture
def root(tmp_path):
    image_root = tmp_path / "images"
    image_root.mkdir()
    return image_root


@pytest.fixture
def make_settings(root):
    def _make(**overrides):
        values = {"IMAGE_ROOT": str(root), "MAX_BUCKET_PHOTOS": 1200, "MAX_BUCKET_BYTES": 4 * 1024 ** 3}
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def state_service(make_settings):
    return BucketStateService(config=make_settings())


@pytest.fixture
def move_factory(make_settings):
    def _make(**overrides):
        return MoveService(BucketStateService(config=make_settings(**overrides)))
    return _make


@pytest.fixture
def client(root, monkeypatch):
    """TestClient whose shared settings point at a fresh temporary root."""
    monkeypatch.setattr(settings, "IMAGE_ROOT", str(root))
    monkeypatch.setattr(settings, "MAX_BUCKET_PHOTOS", 2)
    monkeypatch.setattr(settings, "MAX_BUCKET_BYTES", 5000)
    with TestClient(app) as c:
        yield c
