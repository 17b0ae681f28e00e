import os
from io import BytesIO
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from sqlmodel import SQLModel, Session, create_engine

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from sigengine.main import app  # noqa: E402
from sigengine import db as db_module  # noqa: E402
from sigengine.db import get_session  # noqa: E402
from sigengine import storage as storage_module  # noqa: E402
from sigengine.routers import signing as signing_router  # noqa: E402


def make_pdf(pages=1, pagesize=letter, text="Agreement") -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize, invariant=1)
    for i in range(pages):
        c.setFont("Helvetica", 14)
        c.drawString(72, pagesize[1] - 72, f"{text} page {i + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_image(size=(300, 100), fmt="PNG", color=(20, 40, 200)) -> bytes:
    buf = BytesIO()
    mode = "RGBA" if fmt == "PNG" else "RGB"
    fill = color + (255,) if mode == "RGBA" else color
    Image.new(mode, size, fill).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def letter_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def png_signature() -> bytes:
    return make_image()


@pytest.fixture(scope="session")
def test_engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("data") / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    return engine


@pytest.fixture
def setup_db(test_engine, monkeypatch):
    monkeypatch.setattr(db_module, "engine", test_engine)
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def mock_storage(monkeypatch) -> Dict[str, bytes]:
    store: Dict[str, bytes] = {}

    def fake_put_bytes(key: str, data: bytes, content_type: str = "application/octet-stream"):
        store[key] = bytes(data)

    def fake_get_bytes(key: str) -> bytes:
        if key not in store:
            raise KeyError(key)
        return store[key]

    for target in (storage_module, signing_router):
        if hasattr(target, "put_bytes"):
            monkeypatch.setattr(target, "put_bytes", fake_put_bytes)
        if hasattr(target, "get_bytes"):
            monkeypatch.setattr(target, "get_bytes", fake_get_bytes)
    return store


@pytest.fixture
def client(test_engine, setup_db, mock_storage):
    def override_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
