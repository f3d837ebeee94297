"""
Router pour la synchronisation appareil → serveur.
Reçoit l'identité de l'appareil, sa position et ses bons (ventes + commandes).
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import get_sync_account_id
from app.config import settings
from app.database import get_db
from app.schemas.sync import SyncContext, SyncRequest, SyncResponse
from app.services import sync_service
from app.services.device_registry import DeviceOwnershipConflict
from app.services.sync_service import SyncValidationError

router = APIRouter(prefix="/api/bon", tags=["Synchronisation appareils"])


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchroniser un appareil (position, ventes, commandes)",
)
def sync_device(
    data: SyncRequest,
    db: Session = Depends(get_db),
    account_id: Optional[int] = Depends(get_sync_account_id),
):
    """
    Intègre un batch envoyé par un appareil terrain, en une seule transaction.

    Comportement :
    - Appareil inconnu → créé et rattaché au compte du token (ou au compte de repli)
    - En-têtes upsertés par NUM_BON, lignes remplacées en entier à chaque envoi
    - Bon sans NUM_BON → ignoré et compté dans stats (salesSkipped / ordersSkipped)
    - Idempotent : renvoyer le même batch donne le même état final

    Codes : 400 device_id manquant, 409 appareil d'un autre compte,
    503 erreur de stockage (renvoyer tout le batch plus tard).
    """
    context = SyncContext(
        account_id=account_id,
        fallback_username=settings.SYNC_ACCOUNT_USERNAME,
        fallback_full_name=settings.SYNC_ACCOUNT_FULL_NAME,
        received_at=datetime.now(timezone.utc),
    )
    try:
        return sync_service.sync_batch(db, data, context)
    except SyncValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DeviceOwnershipConflict as e:
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)})
    except SQLAlchemyError:
        raise HTTPException(
            status_code=503,
            detail="Stockage indisponible, le batch n'a pas été enregistré. Réessayer plus tard.",
        )
