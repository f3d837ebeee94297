"""
Routers de consultation des bons synchronisés.
Ventes (BON1/BON2) et commandes en attente (BON1_TEMP/BON2_TEMP).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.document import BonDetail, BonSummary
from app.services import document_store

router = APIRouter(prefix="/api/bon", tags=["Bons"])


def _get_or_404(db: Session, family: str, num_bon: str) -> BonDetail:
    detail = document_store.get_document(db, family, num_bon)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Bon {num_bon} introuvable.")
    return detail


@router.get("/ventes", response_model=List[BonSummary], summary="Lister les ventes d'un appareil")
def list_sales(phone_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Ventes synchronisées par l'appareil, de la plus récente à la plus ancienne."""
    return document_store.list_documents(db, document_store.SALE, phone_id)


@router.get("/ventes/{num_bon}", response_model=BonDetail, summary="Détail d'une vente")
def get_sale(num_bon: str, db: Session = Depends(get_db)):
    """En-tête de la vente et ses lignes, dans l'ordre d'envoi."""
    return _get_or_404(db, document_store.SALE, num_bon)


@router.get("/commandes", response_model=List[BonSummary], summary="Lister les commandes d'un appareil")
def list_orders(phone_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Commandes en attente synchronisées par l'appareil."""
    return document_store.list_documents(db, document_store.ORDER, phone_id)


@router.get("/commandes/{num_bon}", response_model=BonDetail, summary="Détail d'une commande")
def get_order(num_bon: str, db: Session = Depends(get_db)):
    return _get_or_404(db, document_store.ORDER, num_bon)
