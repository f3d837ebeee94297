"""
Configuration de la connexion à la base de données.
PostgreSQL en production, SQLite en mémoire pour les tests transactionnels.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings

# pool_pre_ping : les connexions mortes du pool sont recyclées avant usage
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Crée les tables manquantes (AUTO_CREATE_TABLES=true, développement)."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
