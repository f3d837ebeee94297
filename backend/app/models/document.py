"""
Modèles SQLAlchemy pour les bons (documents de vente et commandes en attente).

Deux paires de tables structurellement identiques, noms hérités de l'application mobile :
- BON1 / BON2           : ventes finalisées (en-tête / lignes)
- BON1_TEMP / BON2_TEMP : commandes en attente (en-tête / lignes)

NUM_BON est la clé naturelle d'un en-tête. Les lignes n'ont pas d'identité propre :
elles sont supprimées et recréées en bloc à chaque resync du bon.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import declared_attr

from app.database import Base


class BonHeaderMixin:
    """Colonnes communes aux en-têtes BON1 et BON1_TEMP."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    num_bon = Column("NUM_BON", String(50), unique=True, nullable=False, key="num_bon")
    code_client = Column("CODE_CLIENT", String(50), nullable=True, key="code_client")
    date_bon = Column("DATE_BON", String(20), nullable=True, key="date_bon")  # Format appareil (ex. 21/11/2025)
    heure = Column("HEURE", String(20), nullable=True, key="heure")
    nbr_p = Column("NBR_P", Integer, nullable=True, key="nbr_p")
    tot_qte = Column("TOT_QTE", Float, nullable=True, key="tot_qte")
    mode_tarif = Column("MODE_TARIF", String(50), nullable=True, key="mode_tarif")
    code_depot = Column("CODE_DEPOT", String(50), nullable=True, key="code_depot")
    mode_rg = Column("MODE_RG", String(50), nullable=True, key="mode_rg")
    code_vendeur = Column("CODE_VENDEUR", String(50), nullable=True, key="code_vendeur")
    tot_ht = Column("TOT_HT", Float, nullable=True, key="tot_ht")
    tot_tva = Column("TOT_TVA", Float, nullable=True, key="tot_tva")
    timbre = Column("TIMBRE", Float, nullable=True, key="timbre")
    timbre_check = Column("TIMBRE_CHECK", String(5), nullable=True, key="timbre_check")
    latitude = Column("LATITUDE", Float, nullable=False, default=0, key="latitude")
    longitude = Column("LONGITUDE", Float, nullable=False, default=0, key="longitude")
    remise = Column("REMISE", Float, nullable=True, key="remise")
    montant_achat = Column("MONTANT_ACHAT", Float, nullable=True, key="montant_achat")
    ancien_solde = Column("ANCIEN_SOLDE", Float, nullable=True, key="ancien_solde")
    exportation = Column("EXPORTATION", String(5), nullable=True, key="exportation")
    blocage = Column("BLOCAGE", String(5), nullable=True, key="blocage")
    verser = Column("VERSER", Float, nullable=True, key="verser")
    livrer = Column("LIVRER", Integer, nullable=False, default=0, key="livrer")
    date_liv = Column("DATE_LIV", String(20), nullable=True, key="date_liv")
    is_imported = Column("IS_IMPORTED", Integer, nullable=False, default=0, key="is_imported")
    is_exported = Column("IS_EXPORTED", Integer, nullable=False, default=0, key="is_exported")
    synced_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @declared_attr
    def phone_id(cls):
        return Column(String(100), ForeignKey("phones.phone_id"), nullable=True, index=True)


class BonLineMixin:
    """Colonnes communes aux lignes BON2 et BON2_TEMP."""

    record_id = Column("RECORDID", Integer, primary_key=True, autoincrement=True, key="record_id")
    num_bon = Column("NUM_BON", String(50), nullable=False, index=True, key="num_bon")
    line_no = Column("LINE_NO", Integer, nullable=False, key="line_no")  # 1..n, réattribué à chaque resync
    code_barre = Column("CODE_BARRE", String(100), nullable=True, key="code_barre")
    produit = Column("PRODUIT", String(255), nullable=True, key="produit")
    nbre_colis = Column("NBRE_COLIS", Float, nullable=True, key="nbre_colis")
    colissage = Column("COLISSAGE", Float, nullable=True, key="colissage")
    qte_grat = Column("QTE_GRAT", Float, nullable=True, key="qte_grat")
    qte = Column("QTE", Float, nullable=False, default=0, key="qte")
    pv_ht = Column("PV_HT", Float, nullable=True, key="pv_ht")
    pa_ht = Column("PA_HT", Float, nullable=True, key="pa_ht")
    destock_type = Column("DESTOCK_TYPE", String(50), nullable=True, key="destock_type")
    destock_code_barre = Column("DESTOCK_CODE_BARRE", String(100), nullable=True, key="destock_code_barre")
    destock_qte = Column("DESTOCK_QTE", Float, nullable=True, key="destock_qte")
    tva = Column("TVA", Float, nullable=True, key="tva")
    code_depot = Column("CODE_DEPOT", String(50), nullable=True, key="code_depot")


class SaleHeader(BonHeaderMixin, Base):
    """En-tête d'un bon de vente finalisé."""
    __tablename__ = "BON1"


class SaleLine(BonLineMixin, Base):
    __tablename__ = "BON2"


class OrderHeader(BonHeaderMixin, Base):
    """En-tête d'une commande en attente."""
    __tablename__ = "BON1_TEMP"


class OrderLine(BonLineMixin, Base):
    __tablename__ = "BON2_TEMP"
