"""Shared fixtures: in-memory SQLite database, API client and users."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import get_settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Mayor, Usuario  # noqa: E402
from app.utils.security import create_access_token, hash_password  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _crear_usuario(db_session, username, rol):
    usuario = Usuario(
        username=username,
        email=f"{username}@cronograma.local",
        password_hash=hash_password("Secreto123!"),
        nombre_completo=username.title(),
        rol=rol,
        activo=True,
    )
    db_session.add(usuario)
    db_session.commit()
    db_session.refresh(usuario)
    return usuario


@pytest.fixture
def admin(db_session):
    return _crear_usuario(db_session, "admin", "ADMIN")


@pytest.fixture
def consulta(db_session):
    return _crear_usuario(db_session, "consulta", "CONSULTA")


@pytest.fixture
def admin_headers(admin):
    token = create_access_token({"sub": str(admin.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def consulta_headers(consulta):
    token = create_access_token({"sub": str(consulta.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mayor(db_session):
    registro = Mayor(
        codigo="5200",
        nombre="Cimentación",
        departamento=get_settings().DEPARTAMENTO_CONSTRUCCION,
    )
    db_session.add(registro)
    db_session.commit()
    db_session.refresh(registro)
    return registro
