"""
Modèle SQLAlchemy pour les comptes (table héritée `clients`).
Un compte possède les appareils ; le pipeline de sync ne le supprime jamais.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, func

from app.database import Base


class Account(Base):
    __tablename__ = "clients"

    client_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # hash bcrypt ($2…) ou texte clair hérité
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    statut = Column(String(20), default="active", nullable=False)  # active, disabled
    nbr_phones = Column(Integer, default=0, nullable=False)  # quota d'appareils
    expire_date = Column(Date, nullable=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
