"""
Registre des appareils : résolution ou création paresseuse d'un appareil et
de son compte propriétaire.

Création race-safe : INSERT … ON CONFLICT DO NOTHING sur la contrainte unique
(phone_id, username), puis relecture. Deux premières syncs concurrentes du même
appareil aboutissent à une seule ligne phones et une seule ligne clients.
"""

import logging
import secrets
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.device import Device
from app.schemas.sync import SyncContext
from app.services.sql_utils import naive_utc, upsert_insert

logger = logging.getLogger(__name__)


class DeviceOwnershipConflict(ValueError):
    """L'appareil appartient déjà à un autre compte que celui affirmé par la sync."""

    code = "DEVICE_OWNERSHIP_CONFLICT"

    def __init__(self, device_id: str, owner_id: int, asserted_id: int):
        self.device_id = device_id
        self.owner_id = owner_id
        self.asserted_id = asserted_id
        super().__init__(f"L'appareil '{device_id}' est enregistré sur un autre compte.")


def get_device(db: Session, device_id: str) -> Optional[Device]:
    return db.execute(select(Device).where(Device.phone_id == device_id)).scalar()


def get_or_create_sync_account(db: Session, username: str, full_name: str) -> Account:
    """
    Retourne le compte de repli des syncs anonymes, créé au premier besoin.
    Mot de passe aléatoire : ce compte ne sert jamais à se connecter.
    """
    stmt = (
        upsert_insert(db, Account.__table__)
        .values(
            username=username,
            password=secrets.token_urlsafe(32),
            full_name=full_name,
            is_admin=False,
            statut="active",
            nbr_phones=0,
        )
        .on_conflict_do_nothing(index_elements=[Account.__table__.c.username])
    )
    db.execute(stmt)
    return db.execute(select(Account).where(Account.username == username)).scalar_one()


def check_ownership(device: Device, context: SyncContext) -> None:
    """
    Lève DeviceOwnershipConflict si le contexte affirme un compte différent du propriétaire.
    Une sync anonyme n'affirme aucun compte : elle ne peut pas entrer en conflit.
    """
    if context.account_id is None:
        return
    if device.client_id != context.account_id:
        raise DeviceOwnershipConflict(device.phone_id, device.client_id, context.account_id)


def _select_for_update(db: Session, device_id: str) -> Optional[Device]:
    return db.execute(
        select(Device).where(Device.phone_id == device_id).with_for_update()
    ).scalar()


def _may_rename(db: Session, device: Device, context: SyncContext) -> bool:
    if context.account_id is not None:
        return device.client_id == context.account_id
    # Sync anonyme : seuls les appareils encore sur le compte de repli sont renommés
    owner = db.execute(select(Account.username).where(Account.client_id == device.client_id)).scalar()
    return owner == context.fallback_username


def resolve_device(
    db: Session,
    device_id: str,
    suggested_name: Optional[str],
    context: SyncContext,
) -> Tuple[Device, bool]:
    """
    Résout l'appareil `device_id`, en le créant s'il est inconnu.

    - Inconnu : rattaché au compte affirmé par le token, sinon au compte de repli
      (créé si absent). Nom = suggested_name ou l'identifiant lui-même.
    - Connu : last_update mis à jour ; le nom n'est changé que si suggested_name est
      non vide, différent, et que l'appareil passe le contrôle de propriété.

    La ligne est relue avec verrou (FOR UPDATE) jusqu'à la fin de la transaction.
    Retourne (appareil, créé). Lève DeviceOwnershipConflict si l'appareil appartient
    à un autre compte que celui du contexte.
    """
    name = (suggested_name or "").strip() or None
    now = naive_utc(context.received_at)

    device = _select_for_update(db, device_id)
    created = False
    if device is None:
        if context.account_id is not None:
            owner_id = context.account_id
        else:
            owner_id = get_or_create_sync_account(
                db, context.fallback_username, context.fallback_full_name
            ).client_id

        result = db.execute(
            upsert_insert(db, Device.__table__)
            .values(phone_id=device_id, phone_name=name or device_id, client_id=owner_id, last_update=now)
            .on_conflict_do_nothing(index_elements=[Device.__table__.c.phone_id])
        )
        # rowcount 0 : une sync concurrente a inséré l'appareil entre-temps
        created = result.rowcount == 1
        device = _select_for_update(db, device_id)

    if created:
        logger.info("Nouvel appareil %s rattaché au compte %s", device_id, device.client_id)
        return device, True

    check_ownership(device, context)

    device.last_update = now
    if name and name != device.phone_name and _may_rename(db, device, context):
        logger.debug("Appareil %s renommé : %r → %r", device_id, device.phone_name, name)
        device.phone_name = name
    db.flush()
    return device, False
