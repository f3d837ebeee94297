"""
Utilitaires SQL partagés par les services de sync.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert_insert(db: Session, table):
    """
    INSERT supportant ON CONFLICT pour le dialecte de la session.

    PostgreSQL en production, SQLite pour les tests : les deux exposent
    on_conflict_do_nothing / on_conflict_do_update avec la même signature.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Ramène un horodatage en UTC sans fuseau, format des colonnes DateTime.
    Un horodatage déjà naïf est considéré comme UTC et retourné tel quel.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
