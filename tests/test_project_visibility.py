import uuid

from taskboard.models.enums import Role

def auth_headers(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def create_project(client, jwt: str, name: str) -> str:
    r = client.post("/projects", json={"name": name, "description": f"{name} desc"}, headers=auth_headers(jwt))
    assert r.status_code == 201, r.text
    return r.json()["id"]

def test_developers_only_see_their_own_projects(client, make_user):
    a, a_id = make_user(Role.developer)
    b, _ = make_user(Role.developer)

    project_a = create_project(client, a, "p-a")
    create_project(client, b, "p-b")

    r = client.get("/projects", headers=auth_headers(a))
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == [project_a]
    assert r.json()[0]["owner_id"] == str(a_id)

    # b cannot read a's project or its tasks, even with the id
    r = client.get(f"/projects/{project_a}", headers=auth_headers(b))
    assert r.status_code == 403
    r = client.get(f"/projects/{project_a}/tasks", headers=auth_headers(b))
    assert r.status_code == 403

    # nor add tasks to it
    r = client.post(f"/projects/{project_a}/tasks", json={"title": "x"}, headers=auth_headers(b))
    assert r.status_code == 403

def test_view_all_roles_see_every_project(client, make_user):
    dev, _ = make_user(Role.developer, "Dana")
    lead, _ = make_user(Role.team_lead)

    project_id = create_project(client, dev, "p-dev")
    create_project(client, lead, "p-lead")

    r = client.get("/projects", headers=auth_headers(lead))
    assert r.status_code == 200
    assert len(r.json()) == 2

    r = client.get(f"/projects/{project_id}", headers=auth_headers(lead))
    assert r.status_code == 200
    assert r.json()["owner_name"] == "Dana"

def test_project_counts(client, make_user):
    lead, _ = make_user(Role.team_lead)
    project_id = create_project(client, lead, "p")

    for title, status in (("a", "todo"), ("b", "done"), ("c", "done")):
        r = client.post(
            f"/projects/{project_id}/tasks",
            json={"title": title, "status": status},
            headers=auth_headers(lead),
        )
        assert r.status_code == 201

    r = client.get(f"/projects/{project_id}", headers=auth_headers(lead))
    body = r.json()
    assert body["task_count"] == 3
    assert body["completed_tasks"] == 2
    assert body["status"] == "active"

    r = client.get(f"/projects/{project_id}/tasks", headers=auth_headers(lead))
    assert sorted(t["title"] for t in r.json()) == ["a", "b", "c"]

def test_task_must_belong_to_project_in_path(client, make_user):
    lead, _ = make_user(Role.team_lead)
    p1 = create_project(client, lead, "p1")
    p2 = create_project(client, lead, "p2")

    r = client.post(f"/projects/{p1}/tasks", json={"title": "t"}, headers=auth_headers(lead))
    task_id = r.json()["id"]

    r = client.patch(f"/projects/{p2}/tasks/{task_id}", json={"title": "moved"}, headers=auth_headers(lead))
    assert r.status_code == 404
    r = client.delete(f"/projects/{p2}/tasks/{task_id}", headers=auth_headers(lead))
    assert r.status_code == 404

def test_create_task_in_missing_project(client, make_user):
    lead, _ = make_user(Role.team_lead)
    r = client.post(f"/projects/{uuid.uuid4()}/tasks", json={"title": "t"}, headers=auth_headers(lead))
    assert r.status_code == 404
    assert r.json()["detail"] == "project not found"

def test_invalid_status_rejected(client, make_user):
    lead, _ = make_user(Role.team_lead)
    r = client.post("/projects", json={"name": "p", "status": "archived"}, headers=auth_headers(lead))
    assert r.status_code == 422

def test_blank_names_and_titles_rejected(client, make_user):
    lead, _ = make_user(Role.team_lead)

    r = client.post("/projects", json={"name": "   "}, headers=auth_headers(lead))
    assert r.status_code == 422

    project_id = create_project(client, lead, "  padded  ")
    r = client.get(f"/projects/{project_id}", headers=auth_headers(lead))
    assert r.json()["name"] == "padded"

    r = client.patch(f"/projects/{project_id}", json={"name": " \t "}, headers=auth_headers(lead))
    assert r.status_code == 422

    r = client.post(f"/projects/{project_id}/tasks", json={"title": "  "}, headers=auth_headers(lead))
    assert r.status_code == 422

    r = client.post(f"/projects/{project_id}/tasks", json={"title": " t1 "}, headers=auth_headers(lead))
    assert r.status_code == 201
    assert r.json()["title"] == "t1"

    r = client.put("/auth/profile", json={"name": "   "}, headers=auth_headers(lead))
    assert r.status_code == 422
