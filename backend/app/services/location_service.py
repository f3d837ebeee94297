"""
Journal des positions (append-only).
Les positions ne sont jamais modifiées ni supprimées par la sync.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.device import LocationSample
from app.schemas.location import LocationCreate, LocationResponse
from app.services.device_registry import get_device
from app.services.sql_utils import naive_utc

logger = logging.getLogger(__name__)


def append_location(
    db: Session,
    device_id: str,
    latitude: Optional[float],
    longitude: Optional[float],
    timestamp: Optional[datetime],
    received_at: datetime,
) -> Optional[LocationSample]:
    """
    Ajoute une position pour l'appareil. No-op si une des coordonnées est absente.
    Sans horodatage appareil, l'heure de réception est utilisée.
    """
    if latitude is None or longitude is None:
        return None

    sample = LocationSample(
        phone_id=device_id,
        latitude=float(latitude),
        longitude=float(longitude),
        date_time=naive_utc(timestamp or received_at),
    )
    db.add(sample)
    logger.debug("Position %s : (%s, %s) à %s", device_id, latitude, longitude, sample.date_time)
    return sample


def record_location(db: Session, data: LocationCreate, received_at: datetime) -> LocationResponse:
    """
    Enregistre une position hors batch de sync et met à jour le dernier contact.
    Lève ValueError si l'appareil est introuvable.
    """
    device = get_device(db, data.phone_id)
    if device is None:
        raise ValueError(f"Appareil {data.phone_id} introuvable.")

    sample = append_location(
        db, device.phone_id, data.latitude, data.longitude, data.date_time, received_at
    )
    device.last_update = naive_utc(received_at)
    db.commit()
    db.refresh(sample)

    return LocationResponse.model_validate(sample)


def list_locations(db: Session, device_id: str, limit: int) -> List[LocationResponse]:
    """Positions d'un appareil, de la plus récente à la plus ancienne."""
    rows = db.execute(
        select(LocationSample)
        .where(LocationSample.phone_id == device_id)
        .order_by(LocationSample.date_time.desc(), LocationSample.id.desc())
        .limit(limit)
    ).scalars().all()
    return [LocationResponse.model_validate(r) for r in rows]


def latest_location(db: Session, device_id: str) -> Optional[LocationResponse]:
    """Dernière position connue, None si l'appareil n'en a aucune."""
    row = db.execute(
        select(LocationSample)
        .where(LocationSample.phone_id == device_id)
        .order_by(LocationSample.date_time.desc(), LocationSample.id.desc())
        .limit(1)
    ).scalar()
    return LocationResponse.model_validate(row) if row else None
