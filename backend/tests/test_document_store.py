"""
Tests du stockage des bons : valeurs par défaut, upsert des en-têtes,
remplacement des lignes, lecture (liste + détail).
"""

import pytest
from pydantic import ValidationError

from app.models.account import Account
from app.models.device import Device
from app.schemas.document import BonDocument, BonHeaderIn, BonLineIn
from app.services import document_store
from app.services.document_store import (
    get_document,
    header_values,
    line_values,
    list_documents,
    replace_lines,
    store_document,
    upsert_header,
)


def make_document(num_bon="B1", lines=None, **header) -> BonDocument:
    return BonDocument.model_validate({
        "header": {"NUM_BON": num_bon, **header},
        "lines": lines if lines is not None else [{"CODE_BARRE": "X", "QTE": 2}],
    })


@pytest.fixture
def device(db):
    account = Account(username="demo", password="demo")
    db.add(account)
    db.flush()
    d = Device(phone_id="dev1", phone_name="Demo", client_id=account.client_id)
    db.add(d)
    db.commit()
    return d


# ============================================================
# Valeurs de colonnes
# ============================================================

def test_header_values_defauts():
    values = header_values(BonHeaderIn(num_bon="B1"), "dev1")

    assert values["num_bon"] == "B1"
    assert values["phone_id"] == "dev1"
    assert values["latitude"] == 0
    assert values["longitude"] == 0
    assert values["livrer"] == 0
    assert values["is_imported"] == 0
    assert values["is_exported"] == 0
    assert values["tot_ht"] is None
    assert values["date_liv"] is None


def test_header_values_conserve_les_valeurs():
    header = BonHeaderIn.model_validate({"NUM_BON": "B1", "LATITUDE": "36.7", "LIVRER": 1, "TOT_HT": 105})
    values = header_values(header, "dev1")

    assert values["latitude"] == 36.7
    assert values["livrer"] == 1
    assert values["tot_ht"] == 105


def test_line_values_depot_du_bon_par_defaut():
    values = line_values(BonLineIn(code_barre="X"), "B1", 3, "DEPOT1")

    assert values["num_bon"] == "B1"
    assert values["line_no"] == 3
    assert values["qte"] == 0
    assert values["code_depot"] == "DEPOT1"


def test_num_bon_nettoye():
    assert BonHeaderIn.model_validate({"NUM_BON": "  B1 "}).num_bon == "B1"


def test_longueurs_des_colonnes_respectees():
    with pytest.raises(ValidationError):
        BonHeaderIn.model_validate({"NUM_BON": "X" * 51})
    with pytest.raises(ValidationError):
        BonHeaderIn.model_validate({"NUM_BON": "B1", "TIMBRE_CHECK": "oui-oui"})
    with pytest.raises(ValidationError):
        BonLineIn.model_validate({"PRODUIT": "P" * 256})

    assert BonHeaderIn.model_validate({"NUM_BON": "X" * 50}).num_bon == "X" * 50


@pytest.mark.parametrize("field", ["NBR_P", "LIVRER", "IS_IMPORTED", "IS_EXPORTED"])
def test_entiers_bornes_a_32_bits(field):
    with pytest.raises(ValidationError):
        BonHeaderIn.model_validate({"NUM_BON": "B1", field: 2**31})

    assert getattr(BonHeaderIn.model_validate({"NUM_BON": "B1", field: 2**31 - 1}), field.lower()) == 2**31 - 1


def test_famille_inconnue():
    with pytest.raises(ValueError, match="inconnue"):
        replace_lines(None, "invoice", "B1", [])


# ============================================================
# Écriture
# ============================================================

def test_upsert_header_created_puis_updated(db, device):
    assert upsert_header(db, document_store.SALE, BonHeaderIn(num_bon="B1"), "dev1") == "created"
    assert upsert_header(db, document_store.SALE, BonHeaderIn(num_bon="B1"), "dev1") == "updated"


def test_replace_lines_retourne_le_nombre(db, device):
    lines = [BonLineIn(code_barre="A"), BonLineIn(code_barre="B")]

    assert replace_lines(db, document_store.ORDER, "C1", lines) == 2
    assert replace_lines(db, document_store.ORDER, "C1", lines[:1]) == 1


def test_store_document(db, device):
    status, inserted = store_document(db, document_store.SALE, make_document("B1"), "dev1")

    assert status == "created"
    assert inserted == 1


# ============================================================
# Lecture
# ============================================================

def test_get_document_introuvable(db):
    assert get_document(db, document_store.SALE, "NOPE") is None


def test_get_document_en_tete_et_lignes(db, device):
    store_document(
        db,
        document_store.SALE,
        make_document("B1", TOT_HT=105, lines=[{"CODE_BARRE": "A", "QTE": 1}, {"CODE_BARRE": "B", "QTE": 2}]),
        "dev1",
    )
    db.commit()

    detail = get_document(db, document_store.SALE, "B1")

    assert detail.header.num_bon == "B1"
    assert detail.header.tot_ht == 105
    assert detail.header.phone_id == "dev1"
    assert [item.code_barre for item in detail.items] == ["A", "B"]
    assert [item.line_no for item in detail.items] == [1, 2]

    dumped = detail.model_dump(by_alias=True)
    assert dumped["header"]["NUM_BON"] == "B1"
    assert dumped["items"][0]["CODE_BARRE"] == "A"
    assert "RECORDID" in dumped["items"][0]


def test_list_documents_par_appareil(db, device):
    store_document(db, document_store.ORDER, make_document("C1", CODE_CLIENT="CL01", DATE_BON="2025-11-20"), "dev1")
    store_document(db, document_store.ORDER, make_document("C2", DATE_BON="2025-11-21"), "dev1")
    store_document(db, document_store.ORDER, make_document("C3"), "autre")
    db.commit()

    summaries = list_documents(db, document_store.ORDER, "dev1")

    assert [s.num_bon for s in summaries] == ["C2", "C1"]
    assert summaries[1].nom_client == "CL01"
    assert list_documents(db, document_store.SALE, "dev1") == []
