"""Tests for personal storage endpoints."""

MB = 1024 * 1024
STAFF_ID = 3


def _upload(client, size, filename="scan.pdf", **fields):
    return client.post(
        "/api/storage-files",
        data=fields,
        files={"file": (filename, b"\0" * size, "application/pdf")},
    )


def _folder(client, name="เอกสารส่วนตัว", **fields):
    return client.post("/api/storage-files", data={"isFolder": "true", "name": name, **fields})


class TestUpload:

    def test_upload_file(self, staff_client):
        response = _upload(staff_client, 1024, description="ใบเสร็จ")

        assert response.status_code == 201
        entry = response.json()
        assert entry["name"] == "scan.pdf"
        assert entry["ownerId"] == STAFF_ID
        assert entry["fileSize"] == 1024
        assert entry["isFolder"] is False
        assert entry["accessLevel"] == "private"

    def test_quota_exceeded(self, staff_client, settings):
        assert _upload(staff_client, int(4.5 * MB)).status_code == 201

        response = _upload(staff_client, 1 * MB, filename="more.pdf")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Storage limit exceeded",
            "usage": int(4.5 * MB),
            "limit": 5 * MB,
        }
        assert len(staff_client.get("/api/storage-files").json()) == 1
        assert len(list((settings.UPLOAD_ROOT / "storage").iterdir())) == 1

    def test_usage(self, staff_client):
        _upload(staff_client, 3 * MB)

        response = staff_client.get(f"/api/storage-usage/{STAFF_ID}")

        assert response.json() == {"usage": 3 * MB, "limit": 5 * MB, "percentage": 60.0}

    def test_neither_file_nor_folder(self, staff_client):
        response = staff_client.post("/api/storage-files", data={"name": "x"})
        assert response.status_code == 400
        assert response.json() == {"error": "Neither file nor folder information provided"}


class TestFolders:

    def test_create_folder(self, staff_client):
        response = _folder(staff_client, sharedWith='["แผนกบัญชี"]')

        assert response.status_code == 201
        folder = response.json()
        assert folder["isFolder"] is True
        assert folder["fileSize"] == 0
        assert folder["fileType"] == "folder"
        assert folder["sharedWith"] == ["แผนกบัญชี"]

    def test_folder_contents(self, staff_client):
        folder = _folder(staff_client).json()
        _upload(staff_client, 10, parentId=str(folder["id"]))

        root = staff_client.get("/api/storage-files").json()
        inside = staff_client.get("/api/storage-files", params={"parentId": folder["id"]}).json()

        assert [e["id"] for e in root] == [folder["id"]]
        assert [e["parentId"] for e in inside] == [folder["id"]]


class TestVisibility:

    def test_other_users_storage_forbidden(self, staff_client):
        assert staff_client.get("/api/storage-files", params={"userId": 4}).status_code == 403
        assert staff_client.get("/api/storage-usage/4").status_code == 403

    def test_admin_may_view(self, staff_client, admin_client):
        _upload(staff_client, 10)
        response = admin_client.get("/api/storage-files", params={"userId": STAFF_ID})
        assert len(response.json()) == 1


class TestDeleteRestore:

    def test_delete_and_restore(self, staff_client):
        entry = _upload(staff_client, 2 * MB).json()

        deleted = staff_client.delete(f"/api/storage-files/{entry['id']}")
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert staff_client.get("/api/storage-files").json() == []
        assert staff_client.get(f"/api/storage-usage/{STAFF_ID}").json()["usage"] == 0

        restored = staff_client.post(f"/api/storage-files/{entry['id']}/restore")
        assert restored.json()["isDeleted"] is False
        assert staff_client.get(f"/api/storage-usage/{STAFF_ID}").json()["usage"] == 2 * MB

    def test_only_owner_may_delete(self, staff_client, admin_client):
        entry = _upload(staff_client, 10).json()
        assert admin_client.delete(f"/api/storage-files/{entry['id']}").status_code == 403

    def test_delete_unknown(self, staff_client):
        assert staff_client.delete("/api/storage-files/404").status_code == 404
