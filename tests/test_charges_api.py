# tests/test_charges_api.py
import uuid

from app.core.errors import RemoteCallFailure
from app.domain.entities.card import CardStatus


def _charge(client, card_id, amount=60.00, currency="USD", **extra):
    return client.post(
        "/api/v1/charges",
        json={"cardId": card_id, "amount": amount, "currency": currency, **extra},
    )


def test_create_charge_response_shape(charge_client, card_gateway):
    card_id = card_gateway.add_card(amount="100.00")

    resp = _charge(charge_client, card_id, description="Order #1", metadata={"order": 1})
    assert resp.status_code == 201
    body = resp.json()

    uuid.UUID(body["id"])
    assert body["cardId"] == card_id
    assert body["status"] == "succeeded"
    assert body["amount"] == 60.0
    assert body["currency"] == "USD"
    assert body["description"] == "Order #1"
    assert body["metadata"] == {"order": 1}
    assert body["createdAt"]

    fetched = charge_client.get(f"/api/v1/charges/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == body["id"]


def test_invalid_request(charge_client, card_gateway):
    resp = _charge(charge_client, "not-a-uuid")
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_REQUEST"

    resp = charge_client.post("/api/v1/charges", json={"amount": 1})
    assert resp.status_code == 400
    assert set(resp.json()) == {"code", "message"}
    assert card_gateway.calls == []


def test_error_codes(charge_client, card_gateway):
    assert _charge(charge_client, str(uuid.uuid4())).json()["code"] == "CARD_NOT_FOUND"

    used = card_gateway.add_card(status=CardStatus.USED)
    resp = _charge(charge_client, used)
    assert resp.status_code == 422
    assert resp.json()["code"] == "CARD_NOT_CHARGEABLE"

    small = card_gateway.add_card(amount="5.00")
    resp = _charge(charge_client, small, amount=5.01)
    assert resp.status_code == 422
    assert resp.json()["code"] == "INSUFFICIENT_FUNDS"

    euro = card_gateway.add_card(currency="EUR")
    resp = _charge(charge_client, euro, currency="USD")
    assert resp.status_code == 422
    assert resp.json()["code"] == "CURRENCY_MISMATCH"


def test_card_update_failure_leaves_no_charge(charge_client, card_gateway):
    card_id = card_gateway.add_card()
    card_gateway.fail_update = RemoteCallFailure("boom")

    resp = _charge(charge_client, card_id)
    assert resp.status_code == 500
    assert resp.json()["code"] == "CARD_UPDATE_FAILED"

    listed = charge_client.get("/api/v1/charges", params={"cardId": card_id})
    assert listed.status_code == 200
    assert listed.json() == []


def test_card_service_down_is_internal_error(charge_client, card_gateway):
    card_id = card_gateway.add_card()
    card_gateway.fail_fetch = RemoteCallFailure("connection refused")

    resp = _charge(charge_client, card_id)
    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_SERVER_ERROR"


def test_list_and_get_charges(charge_client, card_gateway):
    card_id = card_gateway.add_card()
    created = _charge(charge_client, card_id).json()

    listed = charge_client.get("/api/v1/charges", params={"cardId": card_id}).json()
    assert [c["id"] for c in listed] == [created["id"]]

    assert charge_client.get("/api/v1/charges", params={"cardId": "x"}).status_code == 400
    assert charge_client.get("/api/v1/charges/bad-id").json()["code"] == "INVALID_ID"
    missing = charge_client.get(f"/api/v1/charges/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "CHARGE_NOT_FOUND"


def test_health(charge_client):
    body = charge_client.get("/api/v1/health").json()
    assert body["status"]["indicator"] == "operational"
