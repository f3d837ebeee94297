"""
Router pour l'historique de positions des appareils (carte, trajets).
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.location import LocationCreate, LocationResponse
from app.services import location_service

router = APIRouter(prefix="/api/locations", tags=["Positions"])


@router.get("", response_model=List[LocationResponse], summary="Historique de positions")
def list_locations(
    phone_id: str = Query(..., min_length=1),
    limit: int = Query(settings.LOCATIONS_DEFAULT_LIMIT, ge=1, le=settings.LOCATIONS_MAX_LIMIT),
    db: Session = Depends(get_db),
):
    """Dernières positions d'un appareil, de la plus récente à la plus ancienne."""
    return location_service.list_locations(db, phone_id, limit)


@router.get("/latest", response_model=Optional[LocationResponse], summary="Dernière position")
def latest_location(phone_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Dernière position connue, null si l'appareil n'a encore rien envoyé."""
    return location_service.latest_location(db, phone_id)


@router.post("", response_model=LocationResponse, status_code=201, summary="Enregistrer une position")
def record_location(data: LocationCreate, db: Session = Depends(get_db)):
    """
    Ajoute une position hors batch de sync (suivi GPS en continu).
    Retourne 404 si l'appareil n'a jamais été synchronisé.
    """
    try:
        return location_service.record_location(db, data, datetime.now(timezone.utc))
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
