"""
Configuration partagée pour tous les tests.

- client : override de get_db pour éviter toute connexion réelle à PostgreSQL
- db : session SQLite en mémoire avec le schéma complet, pour vérifier les
  propriétés transactionnelles de la sync (upsert, remplacement des lignes, rollback)
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.schemas.sync import SyncContext

RECEIVED_AT = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Session sur une base SQLite en mémoire, tables créées à partir des modèles."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_context():
    """Fabrique de SyncContext : compte affirmé (None = sync anonyme) et horloge fixe."""

    def _make(account_id=None, received_at=RECEIVED_AT) -> SyncContext:
        return SyncContext(
            account_id=account_id,
            fallback_username="device_sync",
            fallback_full_name="Device Sync",
            received_at=received_at,
        )

    return _make
