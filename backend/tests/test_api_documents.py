"""
Tests d'intégration API pour la consultation des bons.
Endpoints : GET /api/bon/ventes, /api/bon/ventes/{num_bon}, /api/bon/commandes, /api/bon/commandes/{num_bon}
"""

from unittest.mock import patch

from app.schemas.document import BonDetail, BonHeaderOut, BonLineOut, BonSummary


def make_detail(num_bon="B1") -> BonDetail:
    return BonDetail(
        header=BonHeaderOut(num_bon=num_bon, tot_ht=105.0, phone_id="dev1", livrer=0),
        items=[BonLineOut(record_id=10, num_bon=num_bon, line_no=1, code_barre="X", qte=2)],
    )


def test_list_ventes(client):
    """Liste des ventes → clés héritées en majuscules."""
    with patch("app.routers.documents.document_store.list_documents") as mock:
        mock.return_value = [BonSummary(num_bon="B1", code_client="C01", nom_client="C01")]
        response = client.get("/api/bon/ventes", params={"phone_id": "dev1"})

    assert response.status_code == 200
    assert response.json()[0]["NUM_BON"] == "B1"
    assert response.json()[0]["NOM_CLIENT"] == "C01"
    assert mock.call_args[0][1:] == ("sale", "dev1")


def test_list_ventes_sans_phone_id(client):
    response = client.get("/api/bon/ventes")
    assert response.status_code == 422


def test_list_commandes(client):
    with patch("app.routers.documents.document_store.list_documents") as mock:
        mock.return_value = []
        response = client.get("/api/bon/commandes", params={"phone_id": "dev1"})

    assert response.status_code == 200
    assert response.json() == []
    assert mock.call_args[0][1] == "order"


def test_detail_vente(client):
    with patch("app.routers.documents.document_store.get_document") as mock:
        mock.return_value = make_detail("B1")
        response = client.get("/api/bon/ventes/B1")

    assert response.status_code == 200
    data = response.json()
    assert data["header"]["NUM_BON"] == "B1"
    assert data["header"]["phone_id"] == "dev1"
    assert data["items"][0]["RECORDID"] == 10
    assert data["items"][0]["QTE"] == 2


def test_detail_commande_introuvable(client):
    with patch("app.routers.documents.document_store.get_document") as mock:
        mock.return_value = None
        response = client.get("/api/bon/commandes/C404")

    assert response.status_code == 404
    assert mock.call_args[0][1:] == ("order", "C404")
