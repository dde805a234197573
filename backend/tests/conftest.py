"""
Configuração compartilhada dos testes.
Cada teste usa um SQLite em memória próprio; a dependência get_db é
substituída para que a API nunca toque o banco configurado.
"""

import os

# antes de qualquer import de gestao_escolar (Settings é lido na importação)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_BACKUP_DIR"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import gestao_escolar.models  # noqa: F401
from gestao_escolar.database import Base, get_db
from gestao_escolar.main import app
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.backup_service import pending_imports


@pytest.fixture
def db():
    """Sessão SQLAlchemy sobre um banco em memória vazio."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def state(db):
    return AppState(db)


@pytest.fixture(autouse=True)
def clear_pending_imports():
    pending_imports.clear()
    yield
    pending_imports.clear()


@pytest.fixture
def client(db):
    """Cliente HTTP de teste ligado ao banco em memória."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
