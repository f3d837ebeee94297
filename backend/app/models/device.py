"""
Modèles SQLAlchemy pour les appareils terrain et leur historique de positions.

- phone_id : identifiant fourni par l'appareil (pas généré par la BDD)
- client_id : compte propriétaire, fixé à la première sync et jamais réécrit en silence
- locations : journal append-only, une ligne par batch contenant des coordonnées
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, func

from app.database import Base


class Device(Base):
    """Appareil terrain, rattaché à exactement un compte."""
    __tablename__ = "phones"

    phone_id = Column(String(100), primary_key=True)
    phone_name = Column(String(255), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.client_id"), nullable=False)
    last_update = Column(DateTime, nullable=True)  # Dernier contact (sync ou position)


class LocationSample(Base):
    """Position GPS immuable d'un appareil."""
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone_id = Column(String(100), ForeignKey("phones.phone_id", ondelete="CASCADE"), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    date_time = Column(DateTime, nullable=False)  # Horodatage appareil, sinon heure de réception
    created_at = Column(DateTime, server_default=func.now())
