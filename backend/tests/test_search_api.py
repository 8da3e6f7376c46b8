import pytest
from starlette.websockets import WebSocketDisconnect

from taskify.storage.errors import StoreError
from taskify.storage.local_store import LocalTasksStore

USER_A = {"X-User-Id": "userA"}


def seed(client, headers):
    client.post("/tasks", headers=headers, json={"title": "Plan sprint", "description": "backlog"})
    client.post("/tasks", headers=headers, json={"title": "Airplane tickets"})
    client.post("/notes", headers=headers, json={"title": "Retro", "content": "plan the next one"})


@pytest.mark.parametrize("mode", ["user", "guest"])
def test_search_ranks_tasks_and_notes(client, guest_headers, mode):
    headers = USER_A if mode == "user" else guest_headers
    seed(client, headers)

    r = client.get("/search", headers=headers, params={"q": "plan"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["query"] == "plan"
    assert [(h["kind"], h["record"]["title"], h["score"]) for h in data["results"]] == [
        ("task", "Plan sprint", 100),
        ("task", "Airplane tickets", 60),
        ("note", "Retro", 40),
    ]


def test_blank_and_unmatched_queries_are_empty(client):
    seed(client, USER_A)
    for q in ("", "   ", "zzz"):
        r = client.get("/search", headers=USER_A, params={"q": q})
        assert r.status_code == 200
        assert r.json()["status"] == "empty"
        assert r.json()["results"] == []


def test_guest_without_data_gets_empty_result(client, guest_headers):
    r = client.get("/search", headers=guest_headers, params={"q": "plan"})
    assert r.status_code == 200
    assert r.json()["status"] == "empty"


def test_search_is_scoped_to_the_caller(client):
    seed(client, USER_A)
    r = client.get("/search", headers={"X-User-Id": "userB"}, params={"q": "plan"})
    assert r.json()["results"] == []


def test_store_failure_is_reported_not_emptied(client, guest_headers, monkeypatch):
    def broken(self, term):
        raise StoreError("disk gone")

    monkeypatch.setattr(LocalTasksStore, "search_tasks", broken)
    r = client.get("/search", headers=guest_headers, params={"q": "plan"})
    assert r.status_code == 503
    assert r.json()["detail"] == "Search failed"


def test_search_requires_credentials(client):
    assert client.get("/search", params={"q": "plan"}).status_code == 401


def test_live_search_debounces_keystrokes(client, guest_headers):
    client.post("/tasks", headers=guest_headers, json={"title": "apple pie"})

    with client.websocket_connect("/search/live", headers=guest_headers) as ws:
        for text in ("a", "ap", "app", "appl", "apple"):
            ws.send_text(text)
        msg = ws.receive_json()

    assert msg["seq"] == 1
    assert msg["query"] == "apple"
    assert msg["status"] == "ok"
    assert [h["record"]["title"] for h in msg["results"]] == ["apple pie"]


def test_live_search_reports_failures(client, guest_headers, monkeypatch):
    def broken(self, term):
        raise StoreError("disk gone")

    monkeypatch.setattr(LocalTasksStore, "search_tasks", broken)
    with client.websocket_connect("/search/live", headers=guest_headers) as ws:
        ws.send_text("plan")
        msg = ws.receive_json()

    assert msg["status"] == "error"
    assert msg["results"] == []
    assert "disk gone" in msg["reason"]


def test_live_search_rejects_anonymous_clients(client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/search/live") as ws:
            ws.receive_json()
    assert excinfo.value.code == 1008


def test_live_search_closes_on_binary_frames(client, guest_headers):
    with client.websocket_connect("/search/live", headers=guest_headers) as ws:
        ws.send_bytes(b"plan")
        with pytest.raises(WebSocketDisconnect) as excinfo:
            ws.receive_json()
    assert excinfo.value.code == 1003
