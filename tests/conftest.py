import os

# Configuración de entorno para tests, antes de importar la app
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "False")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.viewer import Viewer
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.feed_item import ActivityType
from app.services.event_collector import event_collector
from app.services.user_directory import user_directory


# Usar una base de datos en memoria para pruebas
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """
    Engine en memoria nuevo por test: los servicios hacen commit real,
    así que cada test arranca con el esquema vacío.
    """
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """
    Crea una sesión de base de datos fresca para cada test y la cierra al finalizar.
    """
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture(scope="function")
def client(db):
    """
    Crea un cliente de prueba usando una sesión de base de datos de prueba.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_viewer(db):
    """
    Factory de viewers con perfil ya registrado en el directorio.
    """
    def _make(display_name: str, avatar_url: str = None) -> Viewer:
        viewer = Viewer.from_display_name(display_name, avatar_url)
        user_directory.ensure_profile(db, viewer)
        return viewer

    return _make


@pytest.fixture
def alice(make_viewer):
    return make_viewer("Alice Smith")


@pytest.fixture
def bob(make_viewer):
    return make_viewer("Bob Jones")


@pytest.fixture
def carol(make_viewer):
    return make_viewer("Carol White")


@pytest.fixture
def ingest(db):
    """Atajo para guardar productos en el feed de un viewer."""
    def _ingest(viewer: Viewer, *records, activity_type=ActivityType.RECOMMENDED, source="recommended_products"):
        return event_collector.ingest(db, viewer, list(records), activity_type, source)

    return _ingest


def headers_for(viewer: Viewer) -> dict:
    return {"X-User-Id": viewer.user_id, "X-Display-Name": viewer.display_name}


@pytest.fixture
def auth_headers():
    """
    Headers de identidad como los entregaría el gateway.
    """
    return headers_for
