import json

import httpx
from fastapi.testclient import TestClient
from idvdemo.api import invites

INVITEE = {
    "firstName": "Jane",
    "lastName": "Roe",
    "phone": "(555) 987-6543",
    "email": "jane@example.com",
    "birthDate": "02/03/1985",
}


def test_send_invite(client: TestClient, vouched_api):
    upstream = vouched_api.post("/api/invites").mock(
        return_value=httpx.Response(200, json={"id": "inv-1", "status": "sent"})
    )

    r = client.post("/ial2/send-invite", json=INVITEE)

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["invite"] == {"id": "inv-1", "status": "sent"}
    expected = {
        "parameters": {
            "firstName": "Jane",
            "lastName": "Roe",
            "phone": "+15559876543",
            "email": "jane@example.com",
            "birthDate": "02/03/1985",
            "callbackURL": "http://testserver/webhook-callback",
        }
    }
    assert body["sentPayload"] == expected
    assert json.loads(upstream.calls.last.request.content) == expected


def test_callback_url_uses_public_base_url(client: TestClient, vouched_api, override_settings):
    override_settings(public_base_url="https://demo.example.com/")
    upstream = vouched_api.post("/api/invites").mock(
        return_value=httpx.Response(200, json={"id": "inv-1"})
    )

    client.post("/ial2/send-invite", json=INVITEE)

    sent = json.loads(upstream.calls.last.request.content)
    assert sent["parameters"]["callbackURL"] == "https://demo.example.com/webhook-callback"


def test_missing_phone_rejected(client: TestClient, vouched_api):
    upstream = vouched_api.post("/api/invites")

    r = client.post("/ial2/send-invite", json={"firstName": "Jane", "lastName": "Roe"})

    assert r.status_code == 400
    assert r.json()["code"] == "MISSING_REQUIRED_FIELDS"
    assert not upstream.called


def test_upstream_rejection(client: TestClient, vouched_api):
    vouched_api.post("/api/invites").mock(
        return_value=httpx.Response(401, json={"message": "invalid key"})
    )

    r = client.post("/ial2/send-invite", json=INVITEE)

    assert r.status_code == 400
    assert r.json()["code"] == "HTTP_401"


def test_missing_key(client: TestClient, override_settings):
    override_settings(vouched_private_api_key="")

    r = client.post("/ial2/send-invite", json=INVITEE)

    assert r.status_code == 503
    assert r.json()["code"] == "MISSING_API_KEY"


def test_unexpected_error_is_500(client: TestClient, vouched_api, monkeypatch):
    def broken_payload(req, callback_url):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(invites, "invite_payload", broken_payload)
    upstream = vouched_api.post("/api/invites")

    r = client.post("/ial2/send-invite", json=INVITEE)

    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Server Error"
    assert body["code"] == "INTERNAL_SERVER_ERROR"
    assert body["details"] == "kaboom"
    assert not upstream.called
