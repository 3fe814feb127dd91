"""
Pytest configuration and fixtures for Volunteer Activities API tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.limiter import limiter
from app.main import app
from app.media_storage import UploadResult, get_media_storage
from app.models.activity import Activity

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


class FakeMediaStorage:
    """In-memory stand-in for the Cloudinary storage."""

    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self.failing_uploads = set()
        self.fail_destroy = False

    def upload(self, content, filename, content_type):
        if filename in self.failing_uploads:
            raise RuntimeError(f"upload of {filename} rejected")
        self.uploads.append((filename, content_type, content))
        resource_type = "video" if content_type.startswith("video/") else "image"
        stem = filename.split(".")[0]
        extension = "mp4" if resource_type == "video" else "webp"
        public_id = f"volunteer-activities/{stem}"
        return UploadResult(
            url=f"https://res.cloudinary.com/demo/{resource_type}/upload/v1/{public_id}.{extension}",
            public_id=public_id,
            resource_type=resource_type,
        )

    def destroy(self, public_id, resource_type="image"):
        self.destroyed.append((public_id, resource_type))
        if self.fail_destroy:
            raise RuntimeError("media host unavailable")
        return {"result": "ok"}


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.pop(get_db, None)
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def media_storage():
    """Replace the media host with an in-memory fake."""
    storage = FakeMediaStorage()
    app.dependency_overrides[get_media_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_media_storage, None)


@pytest.fixture(scope="function")
def client(db, media_storage):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def make_activity(db):
    """Factory inserting activities with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "title": f"Activity {counter['n']}",
            "description": "Helping out in the neighbourhood",
            "date": datetime(2024, 6, 1, 9, 0),
            "location": "Community Hall",
            "participants": 20,
            "status": "upcoming",
            "category": "Xã hội",
            "images": [],
            "videos": [],
        }
        fields.update(overrides)
        activity = Activity(**fields)
        db.add(activity)
        db.commit()
        db.refresh(activity)
        return activity

    return _make


@pytest.fixture
def valid_payload():
    return {
        "title": "Beach Cleanup",
        "description": "Collecting plastic waste along the shoreline",
        "date": "2024-07-15T08:00:00Z",
        "location": "My Khe Beach, Da Nang",
        "participants": 40,
        "category": "Môi trường",
        "images": ["https://res.cloudinary.com/demo/image/upload/v1/volunteer-activities/beach.webp"],
    }
