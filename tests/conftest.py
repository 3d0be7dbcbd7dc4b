import os
import tempfile

# Settings are read once (lru_cache); configure the environment before app modules are imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="swipe-feed-uploads-")
os.environ["ADMIN_PASSWORD"] = "letmein"
os.environ["REDIS_URL"] = ""
os.environ["S3_BUCKET"] = ""
os.environ["MAX_UPLOAD_MB"] = "1"
os.environ["TOKEN_ADDRESS"] = "0x" + "ab" * 20
os.environ["REQUIRED_BALANCE"] = "10000"
os.environ["CHAIN_ID"] = "8453"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.sessions import InMemorySessionStore, get_session_store
from app.database import Base, get_db
from app.main import app
from app.services.blob_storage import BlobStorageError, get_blob_storage

MAX_UPLOAD_BYTES = 1024 * 1024
ADMIN_PASSWORD = "letmein"


class RecordingBlobStorage:
    """In-memory blob store that records every call."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_put = False
        self.fail_delete = False

    def public_url(self, key: str) -> str:
        return f"https://cdn.example.test/{key}"

    def put(self, key, fileobj, content_type):
        self.calls.append(("put", key))
        if self.fail_put:
            raise BlobStorageError("put failed")
        self.objects[key] = fileobj.read()
        return self.public_url(key)

    def delete(self, key):
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise BlobStorageError("delete failed")
        self.objects.pop(key, None)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def blob_storage():
    return RecordingBlobStorage()


@pytest.fixture
def client(engine, session_store, blob_storage):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['token']}"}
