USER_A = {"X-User-Id": "userA"}
USER_B = {"X-User-Id": "userB"}


def create(client, headers, **body):
    r = client.post("/tasks", headers=headers, json={"title": "task", **body})
    assert r.status_code == 201, r.text
    return r.json()


def test_task_crud_for_signed_in_user(client):
    task = create(client, USER_A, title="Report", description="Q3", category="work",
                  priority="high", due_date="2026-11-01")
    assert task["status"] == "pending"
    assert task["due_date"] == "2026-11-01"
    assert task["user_id"] == "userA"

    r = client.get(f"/tasks/{task['id']}", headers=USER_A)
    assert r.status_code == 200
    assert r.json() == task

    r = client.put(f"/tasks/{task['id']}", headers=USER_A, json={"status": "completed"})
    assert r.status_code == 200
    updated = r.json()
    assert updated["status"] == "completed"
    assert updated["title"] == "Report"
    assert updated["priority"] == "high"
    assert updated["updated_at"] > task["updated_at"]

    r = client.delete(f"/tasks/{task['id']}", headers=USER_A)
    assert r.status_code == 204
    assert client.get(f"/tasks/{task['id']}", headers=USER_A).status_code == 404


def test_task_access_is_isolated_per_user(client):
    task = create(client, USER_A, title="private")

    assert client.get(f"/tasks/{task['id']}", headers=USER_B).status_code == 404
    assert client.put(f"/tasks/{task['id']}", headers=USER_B, json={"title": "x"}).status_code == 404
    assert client.delete(f"/tasks/{task['id']}", headers=USER_B).status_code == 404
    assert client.get("/tasks", headers=USER_B).json() == []
    assert client.get(f"/tasks/{task['id']}", headers=USER_A).json()["title"] == "private"


def test_invalid_task_id_is_rejected(client):
    assert client.get("/tasks/not-a-uuid", headers=USER_A).status_code == 422


def test_invalid_values_are_rejected(client):
    assert client.post("/tasks", headers=USER_A, json={"title": ""}).status_code == 422
    assert client.post("/tasks", headers=USER_A, json={"title": "x", "status": "done"}).status_code == 422
    assert client.post("/tasks", headers=USER_A, json={"title": "x", "priority": "urgent"}).status_code == 422
    assert client.post("/tasks", headers=USER_A, json={"title": "x", "due_date": "tomorrow"}).status_code == 422

    task = create(client, USER_A)
    assert client.put(f"/tasks/{task['id']}", headers=USER_A, json={"title": None}).status_code == 422


def test_list_filters_and_stats(client):
    create(client, USER_A, title="a", category="work")
    create(client, USER_A, title="b", category="home", status="in-progress")
    create(client, USER_A, title="c", category="work", status="completed")

    r = client.get("/tasks", headers=USER_A, params={"category": "work"})
    assert [t["title"] for t in r.json()] == ["c", "a"]
    r = client.get("/tasks", headers=USER_A, params={"status": "in-progress"})
    assert [t["title"] for t in r.json()] == ["b"]
    assert client.get("/tasks", headers=USER_A, params={"status": "bogus"}).status_code == 422

    r = client.get("/tasks/stats", headers=USER_A)
    assert r.json() == {"total": 3, "pending": 1, "in_progress": 1, "completed": 1}


def test_guest_tasks_live_in_their_profile(client, guest_headers):
    task = create(client, guest_headers, title="offline task")
    assert task["user_id"] == "guest"

    assert [t["id"] for t in client.get("/tasks", headers=guest_headers).json()] == [task["id"]]

    other_profile = {**guest_headers, "X-Guest-Profile": "someone-else"}
    assert client.get("/tasks", headers=other_profile).json() == []

    # guest data never reaches the row-store
    assert client.get("/tasks", headers=USER_A).json() == []

    r = client.put(f"/tasks/{task['id']}", headers=guest_headers, json={"status": "in-progress"})
    assert r.status_code == 200
    assert r.json()["title"] == "offline task"
    assert client.delete(f"/tasks/{task['id']}", headers=guest_headers).status_code == 204


def test_guest_mode_needs_no_credentials(client):
    r = client.get("/tasks", headers={"X-Taskify-Mode": "guest"})
    assert r.status_code == 200


def test_invalid_guest_profile(client):
    r = client.get("/tasks", headers={"X-Taskify-Mode": "guest", "X-Guest-Profile": "../escape"})
    assert r.status_code == 400


def test_corrupt_guest_storage_is_a_server_error(client, guest_headers, tmp_path):
    profile = tmp_path / "guest" / "tester"
    profile.mkdir(parents=True)
    (profile / "taskify_tasks.json").write_text("{oops", encoding="utf-8")

    r = client.get("/tasks", headers=guest_headers)
    assert r.status_code == 500
    assert r.json() == {"detail": "Storage error"}
