import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///./data/vidhub.db")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "fedcba9876543210fedcba9876543210fedcba9876543210fedcba9876543210")
os.environ.setdefault("LOG_LEVEL", "WARNING")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app import models  # noqa: E402,F401
from app.api import deps  # noqa: E402
from app.database import Base  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.media_storage import MediaStorage  # noqa: E402

from helpers import API, PNG_BYTES  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def media_dir(tmp_path):
    return tmp_path / "media"


@pytest.fixture
def client(session_factory, media_dir):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_media_storage] = lambda: MediaStorage(media_dir, "/media")
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def register_user(client):
    def _register(
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = "secret1",
        full_name: str = "Alice Liddell",
        avatar: bool = True,
        cover_image: bool = False,
    ):
        files = {}
        if avatar:
            files["avatar"] = ("avatar.png", PNG_BYTES, "image/png")
        if cover_image:
            files["coverImage"] = ("cover.png", PNG_BYTES, "image/png")
        return client.post(
            f"{API}/register",
            data={"fullName": full_name, "email": email, "username": username, "password": password},
            files=files or None,
        )

    return _register


@pytest.fixture
def login_user(client, register_user):
    """Register (if needed) and log in; returns the login response."""

    def _login(username: str = "alice", email: str | None = None, password: str = "secret1"):
        registered = register_user(username=username, email=email or f"{username}@example.com", password=password)
        assert registered.status_code in (201, 409), registered.text
        response = client.post(f"{API}/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response

    return _login

