"""
Schémas Pydantic pour les bons (ventes BON1/BON2, commandes BON1_TEMP/BON2_TEMP).

Les clés JSON reprennent les noms de colonnes hérités de l'application mobile
(NUM_BON, CODE_BARRE, …) : alias en majuscules, attributs Python en snake_case.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TEXT_HEADER_FIELDS = (
    "code_client", "date_bon", "heure", "mode_tarif", "code_depot", "mode_rg",
    "code_vendeur", "timbre_check", "exportation", "blocage", "date_liv",
)
TEXT_LINE_FIELDS = ("code_barre", "produit", "destock_type", "destock_code_barre", "code_depot")

# Bornes des colonnes INTEGER (32 bits)
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1

_LEGACY_CONFIG = ConfigDict(
    alias_generator=str.upper,
    populate_by_name=True,
    coerce_numbers_to_str=True,
    extra="ignore",
)


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class BonHeaderIn(BaseModel):
    """En-tête d'un bon tel qu'envoyé par l'appareil. Seul NUM_BON est obligatoire."""

    model_config = _LEGACY_CONFIG

    num_bon: str = Field(max_length=50)
    code_client: Optional[str] = Field(None, max_length=50)
    date_bon: Optional[str] = Field(None, max_length=20)
    heure: Optional[str] = Field(None, max_length=20)
    nbr_p: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX)
    tot_qte: Optional[float] = None
    mode_tarif: Optional[str] = Field(None, max_length=50)
    code_depot: Optional[str] = Field(None, max_length=50)
    mode_rg: Optional[str] = Field(None, max_length=50)
    code_vendeur: Optional[str] = Field(None, max_length=50)
    tot_ht: Optional[float] = None
    tot_tva: Optional[float] = None
    timbre: Optional[float] = None
    timbre_check: Optional[str] = Field(None, max_length=5)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    remise: Optional[float] = None
    montant_achat: Optional[float] = None
    ancien_solde: Optional[float] = None
    exportation: Optional[str] = Field(None, max_length=5)
    blocage: Optional[str] = Field(None, max_length=5)
    verser: Optional[float] = None
    livrer: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX)
    date_liv: Optional[str] = Field(None, max_length=20)
    is_imported: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX)
    is_exported: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX)

    @field_validator("num_bon")
    @classmethod
    def num_bon_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("NUM_BON ne peut pas être vide.")
        return v.strip()

    @field_validator(*TEXT_HEADER_FIELDS, mode="before")
    @classmethod
    def empty_text_is_null(cls, v):
        return _blank_to_none(v)


class BonLineIn(BaseModel):
    """Ligne d'un bon (article). Aucune identité propre hors de son bon."""

    model_config = _LEGACY_CONFIG

    code_barre: Optional[str] = Field(None, max_length=100)
    produit: Optional[str] = Field(None, max_length=255)
    nbre_colis: Optional[float] = None
    colissage: Optional[float] = None
    qte_grat: Optional[float] = None
    qte: Optional[float] = None
    pv_ht: Optional[float] = None
    pa_ht: Optional[float] = None
    destock_type: Optional[str] = Field(None, max_length=50)
    destock_code_barre: Optional[str] = Field(None, max_length=100)
    destock_qte: Optional[float] = None
    tva: Optional[float] = None
    code_depot: Optional[str] = Field(None, max_length=50)

    @field_validator(*TEXT_LINE_FIELDS, mode="before")
    @classmethod
    def empty_text_is_null(cls, v):
        return _blank_to_none(v)


class BonDocument(BaseModel):
    """Un bon complet : en-tête + lignes (clé `lines`, ou `items` pour les anciennes versions de l'app)."""

    header: BonHeaderIn
    lines: List[BonLineIn] = Field(
        default_factory=list,
        validation_alias=AliasChoices("lines", "items"),
    )

    @field_validator("lines", mode="before")
    @classmethod
    def null_lines_is_empty(cls, v):
        return [] if v is None else v


class BonHeaderOut(BonHeaderIn):
    phone_id: Optional[str] = Field(None, alias="phone_id")

    model_config = ConfigDict(from_attributes=True)


class BonLineOut(BonLineIn):
    record_id: int = Field(alias="RECORDID")
    num_bon: str
    line_no: int

    model_config = ConfigDict(from_attributes=True)


class BonSummary(BaseModel):
    """Ligne de la liste des bons d'un appareil (NOM_CLIENT = CODE_CLIENT, pas de table clients côté terrain)."""

    model_config = ConfigDict(alias_generator=str.upper, populate_by_name=True, from_attributes=True)

    num_bon: str
    code_client: Optional[str] = None
    nom_client: Optional[str] = None
    date_bon: Optional[str] = None
    heure: Optional[str] = None
    tot_ht: Optional[float] = None
    verser: Optional[float] = None
    livrer: Optional[int] = None
    code_depot: Optional[str] = None
    blocage: Optional[str] = None


class BonDetail(BaseModel):
    """En-tête + lignes d'un bon, lignes dans l'ordre d'envoi."""
    header: BonHeaderOut
    items: List[BonLineOut]
