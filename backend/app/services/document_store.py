"""
Stockage des bons (ventes et commandes en attente).

Deux opérations d'écriture, toujours exécutées dans la transaction de l'appelant :
- upsert_header : INSERT … ON CONFLICT (NUM_BON) DO UPDATE, dernier écrivain gagnant
- replace_lines : le jeu de lignes du bon est remplacé en entier (jamais fusionné)

Un crash entre la suppression et la réinsertion des lignes est invisible : le
rollback de la transaction restaure l'ancien jeu de lignes.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from app.models.document import OrderHeader, OrderLine, SaleHeader, SaleLine
from app.schemas.document import (
    BonDetail,
    BonDocument,
    BonHeaderIn,
    BonHeaderOut,
    BonLineIn,
    BonLineOut,
    BonSummary,
)
from app.services.sql_utils import upsert_insert

logger = logging.getLogger(__name__)

SALE = "sale"
ORDER = "order"

FAMILIES = {
    SALE: (SaleHeader, SaleLine),
    ORDER: (OrderHeader, OrderLine),
}


def _models(family: str):
    try:
        return FAMILIES[family]
    except KeyError:
        raise ValueError(f"Famille de bons inconnue : {family}")


def header_values(header: BonHeaderIn, device_id: str) -> Dict:
    """
    Valeurs de colonnes d'un en-tête, avec les défauts hérités du schéma MySQL :
    LIVRER / IS_IMPORTED / IS_EXPORTED à 0, LATITUDE / LONGITUDE à 0 (et non NULL).
    """
    values = header.model_dump()
    for key in ("latitude", "longitude", "livrer", "is_imported", "is_exported"):
        if values[key] is None:
            values[key] = 0
    values["phone_id"] = device_id
    return values


def line_values(line: BonLineIn, num_bon: str, line_no: int, default_depot: Optional[str]) -> Dict:
    values = line.model_dump()
    if values["qte"] is None:
        values["qte"] = 0
    if values["code_depot"] is None:
        values["code_depot"] = default_depot
    values["num_bon"] = num_bon
    values["line_no"] = line_no
    return values


def upsert_header(db: Session, family: str, header: BonHeaderIn, device_id: str) -> str:
    """
    Insère ou écrase l'en-tête du bon `header.num_bon`.
    Retourne "created" ou "updated". Toutes les colonnes sont réécrites.
    """
    header_model, _ = _models(family)
    table = header_model.__table__
    values = header_values(header, device_id)

    existing = db.execute(
        select(table.c.id).where(table.c.num_bon == header.num_bon).with_for_update()
    ).scalar()

    stmt = upsert_insert(db, table).values(**values)
    update_set = {key: stmt.excluded[key] for key in values if key != "num_bon"}
    update_set["synced_at"] = func.now()
    db.execute(
        stmt.on_conflict_do_update(index_elements=[table.c.num_bon], set_=update_set)
    )
    return "updated" if existing is not None else "created"


def replace_lines(
    db: Session,
    family: str,
    num_bon: str,
    lines: Sequence[BonLineIn],
    default_depot: Optional[str] = None,
) -> int:
    """
    Remplace tout le jeu de lignes du bon : suppression puis réinsertion dans
    l'ordre reçu, LINE_NO réattribué de 1 à n. Retourne le nombre de lignes insérées.
    """
    _, line_model = _models(family)
    table = line_model.__table__

    db.execute(delete(table).where(table.c.num_bon == num_bon))

    rows = [
        line_values(line, num_bon, line_no, default_depot)
        for line_no, line in enumerate(lines, start=1)
    ]
    if rows:
        db.execute(insert(table), rows)
    return len(rows)


def store_document(db: Session, family: str, document: BonDocument, device_id: str) -> Tuple[str, int]:
    """En-tête + remplacement des lignes d'un bon. Retourne (created|updated, nb lignes)."""
    status = upsert_header(db, family, document.header, device_id)
    inserted = replace_lines(
        db, family, document.header.num_bon, document.lines, document.header.code_depot
    )
    logger.debug(
        "Bon %s %s (%s) : %d lignes", family, document.header.num_bon, status, inserted
    )
    return status, inserted


# --- Lecture ---

def list_documents(db: Session, family: str, device_id: str) -> List[BonSummary]:
    """Bons d'un appareil, du plus récent au plus ancien (DATE_BON, HEURE)."""
    header_model, _ = _models(family)
    headers = db.execute(
        select(header_model)
        .where(header_model.phone_id == device_id)
        .order_by(header_model.date_bon.desc(), header_model.heure.desc(), header_model.id.desc())
    ).scalars().all()

    return [
        BonSummary(
            num_bon=h.num_bon,
            code_client=h.code_client,
            nom_client=h.code_client,
            date_bon=h.date_bon,
            heure=h.heure,
            tot_ht=h.tot_ht,
            verser=h.verser,
            livrer=h.livrer,
            code_depot=h.code_depot,
            blocage=h.blocage,
        )
        for h in headers
    ]


def get_document(db: Session, family: str, num_bon: str) -> Optional[BonDetail]:
    """En-tête + lignes d'un bon (lignes par LINE_NO). None si le bon est inconnu."""
    header_model, line_model = _models(family)
    header = db.execute(
        select(header_model).where(header_model.num_bon == num_bon)
    ).scalar()
    if header is None:
        return None

    lines = db.execute(
        select(line_model)
        .where(line_model.num_bon == num_bon)
        .order_by(line_model.line_no)
    ).scalars().all()

    return BonDetail(
        header=BonHeaderOut.model_validate(header),
        items=[BonLineOut.model_validate(line) for line in lines],
    )
