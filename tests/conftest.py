import os
import tempfile
import uuid

_TEST_DIR = tempfile.mkdtemp(prefix="neopdf-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR}/test.db"
os.environ["LOCAL_STORAGE_DIR"] = os.path.join(_TEST_DIR, "uploads")
for _name in ("DEDUP_SCOPE", "RECORD_DUPLICATE_UPLOADS", "IDENTITY_HEADER"):
    os.environ.pop(_name, None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from app.api.deps import get_store  # noqa: E402
from app.config import settings  # noqa: E402
from app.db import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.pdf import Activity, Document  # noqa: E402
from tests.mocks import RecordingObjectStore  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.execute(delete(Activity))
        session.execute(delete(Document))
        session.commit()
        session.close()


@pytest.fixture
def owner_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def other_owner_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def object_store(tmp_path):
    return RecordingObjectStore(tmp_path / "objects")


@pytest.fixture
def client(db_session, object_store):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_store] = lambda: object_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(owner_id):
    return {settings.identity_header: owner_id}


@pytest.fixture
def other_auth_headers(other_owner_id):
    return {settings.identity_header: other_owner_id}
