from pymongo.errors import ServerSelectionTimeoutError

from healthconnect.services import metrics


def test_store_fault_is_500_with_detail(client, patient, monkeypatch):
    _, headers = patient

    def _down(*args, **kwargs):
        raise ServerSelectionTimeoutError("down")

    monkeypatch.setattr(metrics, "_upsert", _down)
    res = client.post("/goals/add", headers=headers, json={"type": "water", "value": 1})
    assert res.status_code == 500
    assert res.json()["detail"] == "Database error: down"


def test_unhandled_error_is_500_with_request_id(client, store, patient, monkeypatch):
    _, headers = patient

    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(metrics, "_upsert", _boom)
    res = client.post(
        "/goals/add",
        headers={**headers, "x-request-id": "req-42"},
        json={"type": "water", "value": 1},
    )
    assert res.status_code == 500
    assert "boom" in res.json()["detail"]
    assert res.headers["x-request-id"] == "req-42"
    event = store.audit_events.find_one({"action": "server_error"})
    assert event["request"]["request_id"] == "req-42"
