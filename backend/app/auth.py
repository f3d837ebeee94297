"""
Lecture du token Bearer présenté par un appareil.

L'émission des tokens (login, phone-auth) est gérée ailleurs : ici on se contente
de décoder le JWT pour savoir quel compte la sync affirme. Sans token, la sync
est anonyme et rattache les nouveaux appareils au compte de repli.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.account import Account

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def get_sync_account_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[int]:
    """
    Dépendance FastAPI : id du compte affirmé par le token, None si pas de token.
    401 si le token est invalide ou le compte inconnu, 403 si le compte est désactivé.
    """
    if not credentials or not credentials.credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload or payload.get("client_id") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide ou expiré.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        client_id = int(payload["client_id"])
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide ou expiré.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    statut = db.execute(select(Account.statut).where(Account.client_id == client_id)).scalar()
    if statut is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Compte introuvable.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if statut.lower() == "disabled":
        logger.info("Sync refusée : compte %s désactivé", client_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Compte désactivé.")
    return client_id
