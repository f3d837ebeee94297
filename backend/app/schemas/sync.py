"""
Schémas Pydantic pour la synchronisation appareil → serveur.
Endpoint : POST /api/bon/sync

Les bons sont reçus bruts (dict) : chaque bon est validé individuellement par le
service, un bon invalide est ignoré et compté sans faire échouer le batch.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings


class DeviceInfo(BaseModel):
    """Identité et dernière position de l'appareil émetteur."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    device_id: Optional[str] = Field(
        None, max_length=100, validation_alias=AliasChoices("device_id", "phone_id")
    )
    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "device_name"))
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timestamp: Optional[datetime] = None  # Heure de capture côté appareil

    @field_validator("device_id", "name")
    @classmethod
    def strip_or_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("name")
    @classmethod
    def name_fits_column(cls, v: Optional[str]) -> Optional[str]:
        # phones.phone_name est un VARCHAR(255)
        return v[:255] if v else v


class SyncRequest(BaseModel):
    """Corps de la requête batch de synchronisation (clés bon1 / bon1_temp acceptées pour l'app historique)."""

    device: DeviceInfo = Field(default_factory=DeviceInfo)
    sales: List[Any] = Field(default_factory=list, validation_alias=AliasChoices("sales", "bon1"))
    orders: List[Any] = Field(default_factory=list, validation_alias=AliasChoices("orders", "bon1_temp"))

    @field_validator("device", mode="before")
    @classmethod
    def null_device_is_empty(cls, v):
        return {} if v is None else v

    @field_validator("sales", "orders", mode="before")
    @classmethod
    def null_list_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("sales", "orders")
    @classmethod
    def batch_not_too_large(cls, v: List[Any]) -> List[Any]:
        if len(v) > settings.MAX_DOCUMENTS_PER_BATCH:
            raise ValueError(
                f"Batch trop grand : maximum {settings.MAX_DOCUMENTS_PER_BATCH} bons par famille."
            )
        return v


class SyncContext(BaseModel):
    """
    Contexte explicite d'une sync : compte affirmé par le token (None = anonyme),
    compte de repli et horloge de réception. Construit par le router.
    """

    account_id: Optional[int] = None
    fallback_username: str
    fallback_full_name: str
    received_at: datetime


class SyncStats(BaseModel):
    """
    Compteurs par famille. headers_created = en-têtes nouveaux parmi headers_touched,
    skipped = bons ignorés car invalides (NUM_BON manquant, champ trop long, etc.).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sales_headers_touched: int = 0
    sales_headers_created: int = 0
    sales_lines_inserted: int = 0
    sales_skipped: int = 0
    orders_headers_touched: int = 0
    orders_headers_created: int = 0
    orders_lines_inserted: int = 0
    orders_skipped: int = 0


class SyncResponse(BaseModel):
    """Rapport de synchronisation retourné à l'appareil."""

    success: bool = True
    device_id: str
    device_created: bool = False
    stats: SyncStats
