from taskboard.models.enums import ProjectRole, Role, TaskStatus
from tests.conftest import headers_for

def test_create_project_seeds_members(client, make, org):
    dh = make.user(org, Role.department_head)
    lead = make.user(org, Role.project_lead)
    dev = make.user(org)

    r = client.post(
        "/projects",
        json={
            "name": " Apollo ",
            "key": "apo",
            "description": "moon",
            "project_lead_id": str(lead.id),
            "member_ids": [str(dev.id), str(dh.id)],
        },
        headers=headers_for(dh),
    )
    assert r.status_code == 201
    p = r.json()["data"]
    assert p["key"] == "APO"
    assert p["name"] == "Apollo"
    assert p["owner_id"] == str(dh.id)
    roles = {m["user_id"]: m["role"] for m in p["members"]}
    assert roles == {str(dh.id): "manager", str(lead.id): "manager", str(dev.id): "developer"}

    # the lead may now manage it
    r = client.patch(f"/projects/{p['id']}", json={"status": "paused"}, headers=headers_for(lead))
    assert r.status_code == 200

def test_duplicate_project_key(client, make, org):
    dh = make.user(org, Role.department_head)
    make.project(dh, key="DUP")
    r = client.post("/projects", json={"name": "x", "key": "dup", "description": "d"}, headers=headers_for(dh))
    assert r.status_code == 400

def test_project_key_must_be_alphanumeric(client, make, org):
    dh = make.user(org, Role.department_head)
    r = client.post("/projects", json={"name": "x", "key": "A-B", "description": "d"}, headers=headers_for(dh))
    assert r.status_code == 400

def test_unknown_member_id_is_rejected(client, make):
    org_a, org_b = make.org("acme"), make.org("globex")
    dh = make.user(org_a, Role.department_head)
    foreign = make.user(org_b)
    r = client.post(
        "/projects",
        json={"name": "x", "key": "FOR1", "description": "d", "member_ids": [str(foreign.id)]},
        headers=headers_for(dh),
    )
    assert r.status_code == 400

def test_member_add_is_an_upsert(client, make, org):
    dh = make.user(org, Role.department_head)
    dev = make.user(org)
    project = make.project(dh)
    h = headers_for(dh)

    for role in ("viewer", "developer"):
        r = client.post(
            f"/projects/{project.id}/members",
            json={"user_id": str(dev.id), "role": role},
            headers=h,
        )
        assert r.status_code == 200
    members = r.json()["data"]["members"]
    assert [(m["user_id"], m["role"]) for m in members] == [(str(dev.id), "developer")]

def test_member_removal(client, make, org):
    dh = make.user(org, Role.department_head)
    dev = make.user(org)
    stranger = make.user(org)
    project = make.project(dh, members=[(dev, ProjectRole.developer)])
    h = headers_for(dh)

    assert client.delete(f"/projects/{project.id}/members/{dh.id}", headers=h).status_code == 400
    assert client.delete(f"/projects/{project.id}/members/{stranger.id}", headers=h).status_code == 404

    r = client.delete(f"/projects/{project.id}/members/{dev.id}", headers=h)
    assert r.status_code == 200
    assert r.json()["data"]["members"] == []

    # removal revokes access straight away
    assert client.get(f"/projects/{project.id}", headers=headers_for(dev)).status_code == 403

def test_department_head_cannot_delete_someone_elses_project(client, make, org):
    dh1 = make.user(org, Role.department_head)
    dh2 = make.user(org, Role.department_head)
    project = make.project(dh1)
    assert client.delete(f"/projects/{project.id}", headers=headers_for(dh2)).status_code == 403

def test_project_list_pagination_and_search(client, make, org):
    dh = make.user(org, Role.department_head)
    for i in range(5):
        make.project(dh, key=f"PAG{i}")
    h = headers_for(dh)

    r = client.get("/projects", params={"page": 2, "limit": 2}, headers=h)
    data = r.json()["data"]
    assert len(data["projects"]) == 2
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    r = client.get("/projects", params={"search": "pag3"}, headers=h)
    assert [p["key"] for p in r.json()["data"]["projects"]] == ["PAG3"]

    r = client.get("/projects", params={"limit": 1000}, headers=h)
    assert r.status_code == 400

def test_task_status_tracks_completion(client, make, org):
    dh = make.user(org, Role.department_head)
    project = make.project(dh)
    task = make.task(project, dh)
    h = headers_for(dh)

    r = client.put(f"/tasks/{task.id}/status", json={"status": "done"}, headers=h)
    assert r.status_code == 200
    assert r.json()["data"]["completed_at"] is not None

    # any status may follow any other
    r = client.put(f"/tasks/{task.id}/status", json={"status": "todo"}, headers=h)
    assert r.json()["data"]["status"] == "todo"
    assert r.json()["data"]["completed_at"] is None

    r = client.put(f"/tasks/{task.id}/status", json={"status": "blocked"}, headers=h)
    assert r.status_code == 400

def test_comments_and_dependencies(client, make, org):
    dh = make.user(org, Role.department_head)
    dev = make.user(org)
    project = make.project(dh, members=[(dev, ProjectRole.developer)])
    a = make.task(project, dh)
    b = make.task(project, dh)

    r = client.post(f"/tasks/{a.id}/comments", json={"content": " looks good "}, headers=headers_for(dev))
    assert r.status_code == 201
    comments = r.json()["data"]["comments"]
    assert [(c["author_id"], c["content"]) for c in comments] == [(str(dev.id), "looks good")]

    h = headers_for(dh)
    assert client.post(f"/tasks/{a.id}/dependencies", json={"task_id": str(a.id)}, headers=h).status_code == 400
    r = client.post(
        f"/tasks/{a.id}/dependencies",
        json={"task_id": str(b.id), "type": "blocks"},
        headers=h,
    )
    assert r.status_code == 201
    assert r.json()["data"]["dependencies"] == [{"depends_on_id": str(b.id), "type": "blocks"}]

def test_task_list_filters(client, make, org):
    dh = make.user(org, Role.department_head)
    dev = make.user(org)
    p1 = make.project(dh, members=[(dev, ProjectRole.developer)])
    p2 = make.project(dh)
    make.task(p1, dh, assignee=dev, status=TaskStatus.in_progress, title="wire up login")
    make.task(p1, dh, title="write docs")
    make.task(p2, dh, title="p2 only")
    h = headers_for(dh)

    def titles(**params):
        r = client.get("/tasks", params=params, headers=h)
        assert r.status_code == 200
        return sorted(t["title"] for t in r.json()["data"]["tasks"])

    assert titles(project=str(p1.id)) == ["wire up login", "write docs"]
    assert titles(status="in-progress") == ["wire up login"]
    assert titles(assignee=str(dev.id)) == ["wire up login"]
    assert titles(search="docs") == ["write docs"]

    # a team member cannot list a project they are not on
    r = client.get("/tasks", params={"project": str(p2.id)}, headers=headers_for(dev))
    assert r.status_code == 403

def test_my_teams_and_stats(client, make, org):
    dh = make.user(org, Role.department_head)
    dev = make.user(org)
    project = make.project(dh, members=[(dev, ProjectRole.developer)])
    make.task(project, dh, assignee=dev, status=TaskStatus.done)
    make.task(project, dh, assignee=dev)
    make.task(project, dh)
    h = headers_for(dev)

    teams = client.get("/users/me/teams", headers=h).json()["data"]
    assert teams["total_teams"] == 1
    assert teams["teams"][0]["user_role_in_project"] == "developer"

    stats = client.get("/users/me/stats", headers=h).json()["data"]
    assert stats == {
        "project_count": 1,
        "total_tasks": 3,
        "assigned_tasks": 2,
        "completed_tasks": 1,
        "completion_rate": 50,
    }
