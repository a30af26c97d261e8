"""Pytest configuration - isolated database, sandbox and components per test."""

import os
from datetime import datetime, timezone

import pytest

# Keep the default data directory out of the source tree during tests
os.environ.setdefault("DATA_DIR", os.path.join(os.path.dirname(__file__), ".data"))

from fastapi.testclient import TestClient  # noqa: E402

from trackdrop.api.access.dto.access import GeoLocation  # noqa: E402
from trackdrop.api.uploads.dto.upload import FileRecord  # noqa: E402
from trackdrop.database import init_db, make_engine, make_session_factory  # noqa: E402
from trackdrop.dependencies import build_services  # noqa: E402
from trackdrop.main import create_app  # noqa: E402

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class FakeGeoLocator:
    """Maps a handful of documentation addresses to fixed locations."""

    table = {
        "203.0.113.5": GeoLocation(country="ES", city="Madrid"),
        "203.0.113.6": GeoLocation(country="ES", city="Sevilla"),
        "198.51.100.7": GeoLocation(country="FR", city="Paris"),
        "192.0.2.8": GeoLocation(country="DE", city="Berlin"),
    }

    def __init__(self):
        self.closed = False

    def lookup(self, ip):
        return self.table.get(ip, GeoLocation())

    def close(self):
        self.closed = True


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path}/test.db")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def files_dir(tmp_path):
    path = tmp_path / "files"
    path.mkdir()
    return path


@pytest.fixture
def services(session_factory, files_dir):
    return build_services(
        session_factory=session_factory,
        files_dir=files_dir,
        geo=FakeGeoLocator(),
        max_file_size=1024 * 1024,
    )


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def make_upload(store, files_dir):
    """Write files into the sandbox and create their session."""

    def _make(upload_id, contents, created_at=None):
        upload_dir = files_dir / upload_id
        upload_dir.mkdir(parents=True, exist_ok=True)
        records = []
        for index, (name, data) in enumerate(contents.items()):
            stored_name = f"{index:03d}.bin"
            (upload_dir / stored_name).write_bytes(data)
            records.append(FileRecord(
                original_name=name,
                stored_name=stored_name,
                size_bytes=len(data),
                mime_type="text/plain",
            ))
        return store.create(
            upload_id, records, sum(r.size_bytes for r in records), created_at=created_at
        )

    return _make


@pytest.fixture
def test_client(services):
    """FastAPI test client bound to the isolated services"""
    return TestClient(create_app(services=services))
