"""
Test Configuration and Fixtures

Everything runs in-process: SQLite in memory for the relational tables, a
dict for blob storage, a frozen clock for rate limiting. No network.
"""
import io
from datetime import datetime, timedelta, timezone

import pytest
from docx import Document
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resumeflow.api.deps import get_blob_store, get_clock, get_ocr_client, get_scoring_client
from resumeflow.core.auth import create_access_token, hash_password
from resumeflow.core.config import Settings, get_settings
from resumeflow.core.errors import NotFoundError
from resumeflow.db.postgres import get_db
from resumeflow.db.schema import create_schema, users
from resumeflow.main import create_app
from resumeflow.services.rate_limiter import RateLimiter
from resumeflow.services.resume_store import ResumeStore

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class InMemoryBlobStore:
    """Dict-backed stand-in for GridFSBlobStore."""

    def __init__(self):
        self.objects = {}

    def upload(self, key, data, content_type=None, owner_id=None):
        self.objects[key] = data

    def download(self, key):
        if key not in self.objects:
            raise NotFoundError("File not found in storage")
        return self.objects[key]

    def delete(self, key):
        return self.objects.pop(key, None) is not None


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


def _pdf_escape(text):
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages):
    """
    Build a minimal PDF with one text line per page.
    An empty string gives a page with no text layer (like a scan).
    """
    count = len(pages)
    page_ids = [4 + 2 * i for i in range(count)]
    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: ("<< /Type /Pages /Kids [%s] /Count %d >>" % (" ".join("%d 0 R" % p for p in page_ids), count)).encode(),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    for page_id, text in zip(page_ids, pages):
        stream = b""
        if text:
            stream = ("BT /F1 12 Tf 72 720 Td (%s) Tj ET" % _pdf_escape(text)).encode("latin-1")
        objects[page_id] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            "/Resources << /Font << /F1 3 0 R >> >> /Contents %d 0 R >>" % (page_id + 1)
        ).encode()
        objects[page_id + 1] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for object_id in sorted(objects):
        offsets[object_id] = len(out)
        out += b"%d 0 obj\n" % object_id + objects[object_id] + b"\nendobj\n"

    xref_at = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for object_id in range(1, size):
        out += b"%010d 00000 n \n" % offsets[object_id]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    return bytes(out)


def make_docx(*paragraphs):
    """Build a .docx whose body holds the given paragraphs (str or list of runs)."""
    document = Document()
    for paragraph in paragraphs:
        if isinstance(paragraph, str):
            document.add_paragraph(paragraph)
        else:
            p = document.add_paragraph()
            for run in paragraph:
                p.add_run(run)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture(scope='function')
def settings():
    return Settings(
        jwt_secret_key="test-secret-key",
        ocr_space_api_key="",
        deepseek_api_key="",
        auto_create_schema=False
    )


@pytest.fixture(scope='function')
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """One session shared by fixtures, services and request handlers."""
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = factory()
    yield db
    db.close()


@pytest.fixture(scope='function')
def clock():
    return FrozenClock()


@pytest.fixture(scope='function')
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture(scope='function')
def rate_limiter(session, clock):
    return RateLimiter(session, clock=clock)


@pytest.fixture(scope='function')
def resume_store(session):
    return ResumeStore(session)


def _create_user(session, email, role="candidate", is_active=True):
    result = session.execute(
        insert(users).values(
            email=email,
            password_hash=hash_password("correct-horse-battery"),
            role=role,
            is_active=is_active
        )
    )
    session.commit()
    return result.inserted_primary_key[0]


@pytest.fixture(scope='function')
def candidate(session):
    return _create_user(session, "candidate@resumeflow.io")


@pytest.fixture(scope='function')
def other_candidate(session):
    return _create_user(session, "someone.else@resumeflow.io")


@pytest.fixture(scope='function')
def admin(session):
    return _create_user(session, "admin@resumeflow.io", role="admin")


@pytest.fixture(scope='function')
def auth_headers(settings):
    """Build an Authorization header for a user id."""
    def _headers(user_id):
        token = create_access_token({"sub": str(user_id)}, settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture(scope='function')
def stored_resume(session, blob_store, resume_store):
    """Store bytes and create the matching record, as the upload endpoint does."""
    def _store(owner_id, content, file_name="resume.pdf", mime_type=PDF_MIME):
        key = f"{owner_id}/{len(blob_store.objects)}-{file_name}"
        blob_store.upload(key, content, content_type=mime_type, owner_id=owner_id)
        return resume_store.create(
            owner_id=owner_id,
            file_name=file_name,
            size_bytes=len(content),
            declared_mime_type=mime_type,
            storage_key=key
        )
    return _store


@pytest.fixture(scope='function')
def overrides():
    """Extra dependency overrides a test wants applied to the app."""
    return {}


@pytest.fixture(scope='function')
def app(session, settings, blob_store, clock, overrides):
    app = create_app()

    def _db():
        yield session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_ocr_client] = lambda: None
    app.dependency_overrides[get_scoring_client] = lambda: None
    app.dependency_overrides.update(overrides)
    return app


@pytest.fixture(scope='function')
def client(app):
    """Test client (lifespan is not run, so no real database is touched)."""
    return TestClient(app)
