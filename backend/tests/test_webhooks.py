import base64
import json

from fastapi.testclient import TestClient
from idvdemo.core.errors import StoreUnavailable
from idvdemo.storage.kv import KeyValueStore


def _jwt(claims) -> str:
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"eyJhbGciOiJIUzI1NiJ9.{payload}.sig"


def test_callback_is_acknowledged_and_listed(client: TestClient):
    payload = {"id": "job-1", "status": "completed", "result": {"success": True}}

    r = client.post("/webhook-callback", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Webhook received successfully"
    assert body["timestamp"].endswith("Z")

    r = client.get("/webhook-callback")
    assert r.status_code == 200
    responses = r.json()["responses"]
    assert len(responses) == 1
    assert responses[0]["data"] == payload
    assert "timestamp" in responses[0]


def test_buffer_keeps_the_ten_newest(client: TestClient):
    for i in range(15):
        assert client.post("/webhook-callback", json={"id": f"job-{i}"}).status_code == 200

    responses = client.get("/webhook-callback").json()["responses"]

    assert [r["data"]["id"] for r in responses] == [f"job-{i}" for i in range(14, 4, -1)]


def test_empty_buffer(client: TestClient):
    assert client.get("/webhook-callback").json() == {"responses": []}


def test_delete_clears_buffer(client: TestClient):
    client.post("/webhook-callback", json={"id": "job-1"})

    r = client.delete("/webhook-callback")

    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert client.get("/webhook-callback").json() == {"responses": []}


def test_invalid_json_callback_rejected(client: TestClient):
    r = client.post(
        "/webhook-callback",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_store_failure_returns_500(client: TestClient, redis_server):
    redis_server.connected = False

    r = client.post("/webhook-callback", json={"id": "job-1"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Error processing webhook"
    assert body["error"]

    r = client.get("/webhook-callback")
    assert r.status_code == 500
    assert r.json()["responses"] == []
    assert r.json()["error"]

    r = client.delete("/webhook-callback")
    assert r.status_code == 500
    assert r.json()["success"] is False


def test_token_round_trip_through_legacy_endpoint(client: TestClient):
    token = _jwt({"job_id": "abc123"})

    r = client.post("/webhook", json={"job": {"token": token}, "status": "completed"})
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "message": "Webhook received successfully",
        "jobToken": token,
        "extractedJobId": "abc123",
    }

    r = client.get("/webhook", params={"token": token})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["data"]["status"] == "completed"
    assert data["extractedJobId"] == "abc123"
    assert data["originalToken"] == token


def test_vendor_callback_is_found_by_session_token(client: TestClient):
    token = _jwt({"job_id": "job-42"})
    client.post("/webhook-callback", json={"id": "job-42", "token": token})

    r = client.get("/webhook", params={"token": token})

    assert r.status_code == 200
    assert r.json()["data"]["data"]["id"] == "job-42"


def test_lookup_before_arrival_is_404(client: TestClient):
    r = client.get("/webhook", params={"token": "not-arrived-yet"})

    assert r.status_code == 404
    assert r.json() == {"error": "Webhook data not found"}


def test_lookup_without_token_is_400(client: TestClient):
    r = client.get("/webhook")

    assert r.status_code == 400
    assert r.json() == {"error": "Missing token parameter"}


def test_legacy_post_without_token(client: TestClient):
    r = client.post("/webhook", json={"status": "completed"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["jobToken"] is None
    assert body["extractedJobId"] is None


def test_debug_endpoint_reports_store_and_responses(client: TestClient):
    r = client.post("/debug-webhook")
    assert r.status_code == 200
    injected = r.json()["injected"]
    assert injected["id"].startswith("debug-test-")
    assert injected["_debug"] is True

    r = client.get("/debug-webhook")
    assert r.status_code == 200
    body = r.json()
    assert body["kv"] == "connected"
    assert body["store"]["url"] == "redis://localhost:6379/2"
    assert body["responses"][0]["data"] == injected


def test_debug_endpoint_reports_store_errors(client: TestClient, redis_server):
    redis_server.connected = False

    r = client.get("/debug-webhook")

    assert r.status_code == 200
    assert r.json()["kv"].startswith("error: ")
    assert r.json()["responses"] is None


def test_null_callback_body_is_kept(client: TestClient):
    r = client.post(
        "/webhook-callback", content=b"null", headers={"Content-Type": "application/json"}
    )
    assert r.status_code == 200

    responses = client.get("/webhook-callback").json()["responses"]
    assert len(responses) == 1
    assert "data" in responses[0]
    assert responses[0]["data"] is None


def test_index_write_shares_the_buffer_transaction(client: TestClient, monkeypatch):
    async def failing_put(self, key, value, ttl=None):
        raise StoreUnavailable("put should not be used for callbacks")

    monkeypatch.setattr(KeyValueStore, "put", failing_put)

    r = client.post("/webhook-callback", json={"id": "j", "token": "t"})
    assert r.status_code == 200

    assert len(client.get("/webhook-callback").json()["responses"]) == 1
    r = client.get("/webhook", params={"token": "t"})
    assert r.status_code == 200
    assert r.json()["data"]["data"] == {"id": "j", "token": "t"}


def test_failed_callback_leaves_nothing_behind(client: TestClient, monkeypatch):
    async def failing_push(self, *args, **kwargs):
        raise StoreUnavailable("connection reset")

    monkeypatch.setattr(KeyValueStore, "push_capped", failing_push)

    r = client.post("/webhook-callback", json={"id": "j", "token": "t"})
    assert r.status_code == 500

    monkeypatch.undo()
    assert client.get("/webhook-callback").json() == {"responses": []}
    assert client.get("/webhook", params={"token": "t"}).status_code == 404


def test_lookup_store_failure_returns_500(client: TestClient, redis_server):
    redis_server.connected = False

    r = client.get("/webhook", params={"token": "t"})

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to retrieve webhook data"
    assert r.json()["details"]
