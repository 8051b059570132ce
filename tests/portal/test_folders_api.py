"""文件夹接口集成测试。"""

from fastapi.testclient import TestClient


def _create(client: TestClient, name: str, parent_id=None, **extra) -> dict:
    resp = client.post("/api/folders", json={"name": name, "parentId": parent_id, **extra})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_and_list_by_parent(admin_client: TestClient, clock):
    root = _create(admin_client, "Marketing", description="assets")
    child = _create(admin_client, "Logos", parent_id=root["id"])

    assert root["parentId"] is None
    assert root["description"] == "assets"
    assert child["parentId"] == root["id"]

    roots = admin_client.get("/api/folders").json()
    assert [f["id"] for f in roots] == [root["id"]]
    children = admin_client.get("/api/folders", params={"parentId": root["id"]}).json()
    assert [f["id"] for f in children] == [child["id"]]

    assert admin_client.get(f"/api/folders/{child['id']}").json()["name"] == "Logos"


def test_create_rejects_missing_parent_and_empty_name(admin_client: TestClient):
    resp = admin_client.post("/api/folders", json={"name": "Orphan", "parentId": 999})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Parent folder not found"

    assert admin_client.post("/api/folders", json={"name": ""}).status_code == 400
    assert admin_client.get("/api/folders").json() == []


def test_patch_merges_fields(admin_client: TestClient):
    folder = _create(admin_client, "Old", description="keep me")
    target = _create(admin_client, "Target")

    resp = admin_client.patch(f"/api/folders/{folder['id']}", json={"name": "New", "parentId": target["id"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "New"
    assert body["description"] == "keep me"
    assert body["parentId"] == target["id"]
    assert body["createdAt"] == folder["createdAt"]

    moved_back = admin_client.patch(f"/api/folders/{folder['id']}", json={"parentId": None}).json()
    assert moved_back["parentId"] is None


def test_patch_errors(admin_client: TestClient):
    parent = _create(admin_client, "Parent")
    child = _create(admin_client, "Child", parent_id=parent["id"])

    assert admin_client.patch("/api/folders/999", json={"name": "x"}).status_code == 404
    assert admin_client.get("/api/folders/999").status_code == 404

    cycle = admin_client.patch(f"/api/folders/{parent['id']}", json={"parentId": child["id"]})
    assert cycle.status_code == 400

    dangling = admin_client.patch(f"/api/folders/{child['id']}", json={"parentId": 999})
    assert dangling.status_code == 400
    assert admin_client.get(f"/api/folders/{child['id']}").json()["parentId"] == parent["id"]


def test_delete_removes_direct_files_and_keeps_subfolders(admin_client: TestClient, file_storage):
    folder_a = _create(admin_client, "A")
    folder_b = _create(admin_client, "B", parent_id=folder_a["id"])
    admin_client.post(
        "/api/files",
        files=[("files", ("a.txt", b"in a", "text/plain"))],
        data={"folderId": str(folder_a["id"])},
    )
    admin_client.post(
        "/api/files",
        files=[("files", ("b.txt", b"in b", "text/plain"))],
        data={"folderId": str(folder_b["id"]), "paths": "nested/b.txt"},
    )

    resp = admin_client.delete(f"/api/folders/{folder_a['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    assert admin_client.get(f"/api/folders/{folder_a['id']}").status_code == 404
    assert admin_client.get(f"/api/folders/{folder_b['id']}").status_code == 200
    assert admin_client.get("/api/files", params={"folderId": folder_a["id"]}).json() == []
    assert len(admin_client.get("/api/files", params={"folderId": folder_b["id"]}).json()) == 1
    assert not (file_storage.root / "a.txt").exists()
    assert (file_storage.root / "nested" / "b.txt").exists()

    assert admin_client.delete(f"/api/folders/{folder_a['id']}").status_code == 200
