import pytest
from fastapi.testclient import TestClient

from main import create_app
from settings import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        upload_dir=tmp_path / "Uploads",
        config_file=tmp_path / "config.json",
    )


@pytest.fixture
def client(settings):
    # Entering the client runs the lifespan: upload dir + config load
    with TestClient(create_app(settings)) as client:
        yield client
