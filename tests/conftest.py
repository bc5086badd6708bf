from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imagedrop.config import Settings
from imagedrop.main import create_app


TEST_UPLOAD_SECRET = "test-upload-secret"


def _write_min_public(public_dir: Path) -> None:
    public_dir.mkdir(parents=True, exist_ok=True)
    (public_dir / "index.html").write_text("<html>gallery</html>", encoding="utf-8")


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    public_dir = tmp_path / "public"
    _write_min_public(public_dir)
    return Settings(
        upload_secret=TEST_UPLOAD_SECRET,
        public_dir=public_dir,
        upload_dir=public_dir / "uploads",
        max_mb=1,
    )


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def upload_dir(settings: Settings) -> Path:
    return settings.upload_dir


@pytest.fixture()
def upload_secret(settings: Settings) -> str:
    return settings.upload_secret
