"""
Schémas Pydantic pour l'historique de positions des appareils.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class LocationCreate(BaseModel):
    """Position envoyée hors batch de sync (POST /api/locations)."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone_id: str
    latitude: float
    longitude: float
    date_time: Optional[datetime] = None

    @field_validator("phone_id")
    @classmethod
    def phone_id_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("phone_id ne peut pas être vide.")
        return v.strip()

    @field_validator("latitude")
    @classmethod
    def valid_latitude(cls, v: float) -> float:
        if not -90 <= v <= 90:
            raise ValueError("Latitude hors limites [-90, 90].")
        return v

    @field_validator("longitude")
    @classmethod
    def valid_longitude(cls, v: float) -> float:
        if not -180 <= v <= 180:
            raise ValueError("Longitude hors limites [-180, 180].")
        return v


class LocationResponse(BaseModel):
    phone_id: str
    latitude: float
    longitude: float
    date_time: datetime

    model_config = {"from_attributes": True}
