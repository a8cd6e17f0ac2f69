import uuid

def test_creator_becomes_member(client, owner):
    r = client.post(
        "/projects",
        json={"name": "site", "git_repo": "https://example.com/acme/site"},
        headers=owner.headers,
    )
    assert r.status_code == 201, r.text
    project = r.json()
    assert project["created_by"] == owner.id

    r = client.get(f"/projects/{project['id']}/members", headers=owner.headers)
    assert [m["user_id"] for m in r.json()] == [owner.id]

    r = client.get("/projects", headers=owner.headers)
    assert project["id"] in {p["id"] for p in r.json()}

def test_non_member_is_blocked(client, outsider, shared_project):
    pid = shared_project["id"]

    assert client.get(f"/projects/{pid}", headers=outsider.headers).status_code == 403
    assert client.put(f"/projects/{pid}", json={"name": "hacked"}, headers=outsider.headers).status_code == 403
    assert client.get(f"/tasks/project/{pid}", headers=outsider.headers).status_code == 403

    r = client.post("/tasks", json={"project_id": pid, "title": "x", "size": "S"}, headers=outsider.headers)
    assert r.status_code == 403

    r = client.get("/projects", headers=outsider.headers)
    assert pid not in {p["id"] for p in r.json()}

def test_missing_project_is_404(client, owner):
    missing = uuid.uuid4()
    assert client.get(f"/projects/{missing}", headers=owner.headers).status_code == 404
    r = client.post("/tasks", json={"project_id": str(missing), "title": "x", "size": "S"}, headers=owner.headers)
    assert r.status_code == 404

def test_member_can_edit_but_not_delete(client, collaborator, shared_project):
    pid = shared_project["id"]

    r = client.put(f"/projects/{pid}", json={"description": "notes"}, headers=collaborator.headers)
    assert r.status_code == 200
    assert r.json()["description"] == "notes"

    assert client.delete(f"/projects/{pid}", headers=collaborator.headers).status_code == 403

def test_membership_management(client, owner, collaborator, outsider, shared_project):
    pid = shared_project["id"]

    # only the creator manages members
    r = client.post(f"/projects/{pid}/members", json={"user_id": outsider.id}, headers=collaborator.headers)
    assert r.status_code == 403

    r = client.post(f"/projects/{pid}/members", json={"user_id": str(uuid.uuid4())}, headers=owner.headers)
    assert r.status_code == 404

    r = client.delete(f"/projects/{pid}/members/{owner.id}", headers=owner.headers)
    assert r.status_code == 400

    r = client.delete(f"/projects/{pid}/members/{collaborator.id}", headers=owner.headers)
    assert r.status_code == 200
    assert client.get(f"/projects/{pid}", headers=collaborator.headers).status_code == 403

def test_delete_project_removes_tasks(client, owner, shared_project):
    pid = shared_project["id"]
    r = client.post("/tasks", json={"project_id": pid, "title": "x", "size": "S"}, headers=owner.headers)
    task_id = r.json()["id"]

    r = client.delete(f"/projects/{pid}", headers=owner.headers)
    assert r.status_code == 200

    assert client.get(f"/projects/{pid}", headers=owner.headers).status_code == 404
    assert client.get(f"/tasks/{task_id}", headers=owner.headers).status_code == 404
