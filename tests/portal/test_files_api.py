"""文件接口集成测试：上传、查询、修改、下载与删除。"""

import io
import zipfile

from fastapi.testclient import TestClient


def _upload(client: TestClient, files, **data):
    return client.post("/api/files", files=files, data=data)


def test_upload_with_relative_paths_into_folder(admin_client: TestClient, file_storage):
    folder = admin_client.post("/api/folders", json={"name": "Press"}).json()

    resp = _upload(
        admin_client,
        [
            ("files", ("kit.pdf", b"%PDF-1.4", "application/pdf")),
            ("files", ("logo.svg", b"<svg/>", "image/svg+xml")),
        ],
        paths=["press/kit.pdf", "press/img/logo.svg"],
        folderId=str(folder["id"]),
    )

    assert resp.status_code == 200, resp.text
    records = resp.json()
    assert [(r["name"], r["type"], r["size"], r["path"], r["folderId"]) for r in records] == [
        ("kit.pdf", "application/pdf", 8, "press/kit.pdf", folder["id"]),
        ("logo.svg", "image/svg+xml", 6, "press/img/logo.svg", folder["id"]),
    ]
    assert (file_storage.root / "press" / "img" / "logo.svg").read_bytes() == b"<svg/>"

    listed = admin_client.get("/api/files", params={"folderId": folder["id"]}).json()
    assert {r["id"] for r in listed} == {r["id"] for r in records}
    assert admin_client.get("/api/files").json() == []


def test_upload_rejects_bad_requests(admin_client: TestClient, file_storage):
    mismatch = _upload(
        admin_client,
        [("files", ("a.txt", b"a", "text/plain")), ("files", ("b.txt", b"b", "text/plain"))],
        paths="only-one.txt",
    )
    assert mismatch.status_code == 400

    missing_folder = _upload(admin_client, [("files", ("a.txt", b"a", "text/plain"))], folderId="999")
    assert missing_folder.status_code == 400

    traversal = _upload(admin_client, [("files", ("a.txt", b"a", "text/plain"))], paths="../../etc/passwd")
    assert traversal.status_code == 400

    assert admin_client.post("/api/files").status_code == 400
    assert admin_client.get("/api/files").json() == []
    assert list(file_storage.root.iterdir()) == []


def test_get_patch_and_download(admin_client: TestClient):
    record = _upload(admin_client, [("files", ("notes.txt", b"hello world", "text/plain"))]).json()[0]
    folder = admin_client.post("/api/folders", json={"name": "Archive"}).json()

    fetched = admin_client.get(f"/api/files/{record['id']}").json()
    assert fetched == record

    resp = admin_client.patch(f"/api/files/{record['id']}", json={"name": "renamed.txt", "folderId": folder["id"]})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["name"] == "renamed.txt"
    assert updated["folderId"] == folder["id"]
    assert updated["path"] == record["path"]
    assert updated["createdAt"] == record["createdAt"]

    download = admin_client.get(f"/api/files/{record['id']}/download")
    assert download.status_code == 200
    assert download.content == b"hello world"
    assert download.headers["content-type"].startswith("text/plain")
    assert "renamed.txt" in download.headers["content-disposition"]

    assert admin_client.patch(f"/api/files/{record['id']}", json={"folderId": 999}).status_code == 400
    assert admin_client.patch("/api/files/999", json={"name": "x"}).status_code == 404
    assert admin_client.get("/api/files/999").status_code == 404
    assert admin_client.get("/api/files/999/download").status_code == 404


def test_download_all_builds_zip(admin_client: TestClient):
    folder = admin_client.post("/api/folders", json={"name": "Brand"}).json()
    _upload(
        admin_client,
        [("files", ("a.txt", b"A", "text/plain")), ("files", ("b.txt", b"B", "text/plain"))],
        folderId=str(folder["id"]),
    )
    _upload(admin_client, [("files", ("root.txt", b"R", "text/plain"))])

    resp = admin_client.get("/api/files/download-all", params={"folderId": folder["id"]})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert "Brand.zip" in resp.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(resp.content)) as archive:
        assert sorted(archive.namelist()) == ["a.txt", "b.txt"]

    root = admin_client.get("/api/files/download-all")
    assert "files.zip" in root.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(root.content)) as archive:
        assert archive.namelist() == ["root.txt"]

    assert admin_client.get("/api/files/download-all", params={"folderId": 999}).status_code == 404


def test_delete_removes_record_and_bytes(admin_client: TestClient, file_storage):
    record = _upload(admin_client, [("files", ("gone.txt", b"bye", "text/plain"))]).json()[0]
    assert (file_storage.root / "gone.txt").exists()

    resp = admin_client.delete(f"/api/files/{record['id']}")
    assert resp.status_code == 200
    assert admin_client.get(f"/api/files/{record['id']}").status_code == 404
    assert not (file_storage.root / "gone.txt").exists()

    assert admin_client.delete(f"/api/files/{record['id']}").status_code == 200


def test_patch_rejects_names_with_directories(admin_client: TestClient):
    record = _upload(admin_client, [("files", ("a.txt", b"a", "text/plain"))]).json()[0]

    for bad_name in ["../../.bashrc", "nested/a.txt", "..\\evil.txt", ".."]:
        resp = admin_client.patch(f"/api/files/{record['id']}", json={"name": bad_name})
        assert resp.status_code == 400, bad_name

    assert admin_client.get(f"/api/files/{record['id']}").json()["name"] == "a.txt"
    archive_resp = admin_client.get("/api/files/download-all")
    with zipfile.ZipFile(io.BytesIO(archive_resp.content)) as archive:
        assert archive.namelist() == ["a.txt"]
