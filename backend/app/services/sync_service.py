"""
Service de synchronisation appareil → serveur (ventes, commandes, position).

Déroulement d'un batch, dans UNE transaction :
  Start → appareil résolu → position enregistrée (optionnelle) → bons traités → commit
  ou rollback complet sur toute erreur.

- Idempotence : en-têtes upsertés par NUM_BON, lignes remplacées en bloc.
  Un batch renvoyé après coupure réseau converge vers le même état.
- Un bon invalide (NUM_BON manquant, champ non convertible) est ignoré et compté,
  le reste du batch continue.
- Conflit de propriété (appareil rattaché à un autre compte) : batch rejeté,
  aucune donnée modifiée.
"""

import logging
from typing import Any, List, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.schemas.document import BonDocument
from app.schemas.sync import SyncContext, SyncRequest, SyncResponse, SyncStats
from app.services import device_registry, document_store, location_service
from app.services.device_registry import DeviceOwnershipConflict

logger = logging.getLogger(__name__)


class SyncValidationError(ValueError):
    """Batch rejeté avant tout effet de bord (identifiant d'appareil manquant)."""


def _process_family(
    db: Session,
    family: str,
    documents: List[Any],
    device_id: str,
) -> Tuple[int, int, int, int]:
    """Traite les bons d'une famille dans l'ordre reçu. Retourne (en-têtes, dont créés, lignes, ignorés)."""
    headers_touched = 0
    headers_created = 0
    lines_inserted = 0
    skipped = 0

    for index, raw in enumerate(documents):
        try:
            document = BonDocument.model_validate(raw)
        except ValidationError as exc:
            skipped += 1
            logger.debug(
                "Bon %s #%d ignoré (appareil %s) : %d erreur(s) de validation",
                family, index, device_id, exc.error_count(),
            )
            continue

        status, inserted = document_store.store_document(db, family, document, device_id)
        headers_touched += 1
        if status == "created":
            headers_created += 1
        lines_inserted += inserted

    return headers_touched, headers_created, lines_inserted, skipped


def sync_batch(db: Session, batch: SyncRequest, context: SyncContext) -> SyncResponse:
    """
    Intègre un batch de sync : appareil, position, ventes puis commandes.

    Lève :
    - SyncValidationError si l'identifiant d'appareil est absent (aucune requête SQL)
    - DeviceOwnershipConflict si l'appareil appartient à un autre compte (rollback)
    - toute erreur SQLAlchemy après rollback complet ; l'appareil doit renvoyer le batch
    """
    device_id = batch.device.device_id
    if not device_id:
        raise SyncValidationError("device_id est requis.")

    try:
        device, created = device_registry.resolve_device(
            db, device_id, batch.device.name, context
        )

        location_service.append_location(
            db,
            device.phone_id,
            batch.device.latitude,
            batch.device.longitude,
            batch.device.timestamp,
            context.received_at,
        )

        sales = _process_family(db, document_store.SALE, batch.sales, device.phone_id)
        orders = _process_family(db, document_store.ORDER, batch.orders, device.phone_id)

        db.commit()
    except DeviceOwnershipConflict as exc:
        db.rollback()
        logger.warning(
            "Sync rejetée : appareil %s appartient au compte %s, token du compte %s",
            exc.device_id, exc.owner_id, exc.asserted_id,
        )
        raise
    except Exception:
        db.rollback()
        logger.error("Sync appareil %s annulée, rollback effectué", device_id, exc_info=True)
        raise

    stats = SyncStats(
        sales_headers_touched=sales[0],
        sales_headers_created=sales[1],
        sales_lines_inserted=sales[2],
        sales_skipped=sales[3],
        orders_headers_touched=orders[0],
        orders_headers_created=orders[1],
        orders_lines_inserted=orders[2],
        orders_skipped=orders[3],
    )

    logger.info(
        "Sync appareil=%s : ventes %d bons (%d nouveaux) / %d lignes (%d ignorés), "
        "commandes %d bons (%d nouveaux) / %d lignes (%d ignorés)",
        device_id,
        stats.sales_headers_touched, stats.sales_headers_created,
        stats.sales_lines_inserted, stats.sales_skipped,
        stats.orders_headers_touched, stats.orders_headers_created,
        stats.orders_lines_inserted, stats.orders_skipped,
    )

    return SyncResponse(device_id=device_id, device_created=created, stats=stats)
