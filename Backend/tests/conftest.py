# tests/conftest.py
import io
import os
import tempfile

# Point the app at throwaway storage before anything under app/ is imported.
_TMP_ROOT = tempfile.mkdtemp(prefix="qc-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_ROOT, 'qc.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_ROOT, "uploads")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["ANNOTATION_API_KEY"] = ""

import pytest
from PIL import Image

from app.database import Base, SessionLocal, engine, init_db
from app.errors import AnnotationServiceFailure
from app.services.annotation_service import AnnotationProvider
from app.services.attachment_service import AttachmentManager
from app.services.binary_store import LocalBinaryStore
from app.services.inspection_service import InspectionService
from app.services.job_store import SqlJobStore

init_db()


class FakeAnnotator(AnnotationProvider):
    def __init__(self, reply="Chrome handle fitted, matte black expected."):
        self.reply = reply
        self.calls = []

    def annotate(self, image_bytes, mime_type, prompt):
        self.calls.append((image_bytes, mime_type, prompt))
        if not self.reply:
            raise AnnotationServiceFailure("No content generated.")
        return self.reply


@pytest.fixture(autouse=True)
def reset_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def store():
    return SqlJobStore(SessionLocal)


@pytest.fixture
def binary_store(tmp_path):
    return LocalBinaryStore(str(tmp_path / "blobs"), "qc-images", "http://testserver")


@pytest.fixture
def annotator():
    return FakeAnnotator()


@pytest.fixture
def service(store, binary_store, annotator):
    return InspectionService(store, AttachmentManager(binary_store), annotator)


@pytest.fixture
def client(annotator):
    from fastapi.testclient import TestClient
    from app.deps import get_annotator, job_cache
    from app.main import app

    # tables were just recreated underneath the app-wide cache
    job_cache.refresh()
    app.dependency_overrides[get_annotator] = lambda: annotator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_image_bytes(fmt="PNG", color="red", size=(8, 8)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes()
