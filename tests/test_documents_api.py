"""API tests for documents, versions and cloning, including the end-to-end
read-grant scenario."""

from tests.conftest import grant, headers_for, make_category, make_document, make_folder


def _upload_id(user_id: str, name: str = "report.pdf") -> str:
    return f"dms/{user_id}/1700000000000-{name}"


def _doc_payload(folder_id: str, user_id: str, name: str = "report.pdf") -> dict:
    public_id = _upload_id(user_id, name)
    return {
        "name": name,
        "folder_id": folder_id,
        "file_url": f"https://blobs.test/{public_id}",
        "public_id": public_id,
    }


class TestFinanceScenario:
    """A user with a read grant on Finance cannot write to the shared folder
    but can create a personal folder and upload into it."""

    def test_read_user_workflow(self, client, db, admin):
        h_admin = headers_for(admin)
        finance_id = client.post("/api/categories", json={"name": "Finance"}, headers=h_admin).json()["id"]
        shared_id = client.post(
            "/api/folders", json={"name": "Reports", "category_id": finance_id}, headers=h_admin
        ).json()["id"]
        user_id = client.post(
            "/api/users",
            json={"name": "Uma", "email": "uma@example.test", "password": "secret1"},
            headers=h_admin,
        ).json()["id"]
        client.put(f"/api/categories/{finance_id}/access/{user_id}", json={"access_level": "read"}, headers=h_admin)

        login = client.post("/api/auth/login", json={"email": "uma@example.test", "password": "secret1"})
        h_user = {"Authorization": f"Bearer {login.json()['token']}"}

        resp = client.post("/api/documents", json=_doc_payload(shared_id, user_id), headers=h_user)
        assert resp.status_code == 403

        personal = client.post("/api/folders", json={"name": "Uma drafts", "category_id": finance_id}, headers=h_user)
        assert personal.status_code == 201
        assert personal.json()["is_personal"] is True

        resp = client.post("/api/documents", json=_doc_payload(personal.json()["id"], user_id), headers=h_user)
        assert resp.status_code == 201
        assert resp.json()["created_by"] == user_id


class TestDocuments:

    def test_get_and_list(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        shared = make_folder(db, admin, finance, "Reports")
        doc = make_document(db, admin, shared, name="q1.pdf")

        h = headers_for(alice)
        assert [d["name"] for d in client.get(f"/api/folders/{shared.id}/documents", headers=h).json()] == ["q1.pdf"]
        resp = client.get(f"/api/documents/{doc.id}", headers=h)
        assert resp.status_code == 200
        assert resp.json()["current_version_id"] == doc.current_version_id

    def test_no_grant_is_forbidden(self, client, db, admin, alice):
        finance = make_category(db, admin)
        shared = make_folder(db, admin, finance, "Reports")
        doc = make_document(db, admin, shared)
        assert client.get(f"/api/documents/{doc.id}", headers=headers_for(alice)).status_code == 403
        assert client.get(f"/api/folders/{shared.id}/documents", headers=headers_for(alice)).status_code == 403

    def test_other_users_personal_document_is_forbidden(self, client, db, admin, alice, bob):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        grant(db, bob, finance)
        bobs = make_folder(db, bob, finance, "Bob drafts", personal=True)
        doc = make_document(db, bob, bobs)
        assert client.get(f"/api/documents/{doc.id}", headers=headers_for(alice)).status_code == 403

    def test_unknown_document_is_404(self, client, admin):
        resp = client.get("/api/documents/missing", headers=headers_for(admin))
        assert resp.status_code == 404
        assert resp.json()["error"] == "DOCUMENT_NOT_FOUND"

    def test_rename_and_delete_own(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        doc = make_document(db, alice, mine)
        h = headers_for(alice)

        resp = client.put(f"/api/documents/{doc.id}", json={"name": "final.pdf"}, headers=h)
        assert resp.status_code == 200
        assert resp.json()["name"] == "final.pdf"
        assert client.delete(f"/api/documents/{doc.id}", headers=h).status_code == 204
        assert client.get(f"/api/documents/{doc.id}", headers=h).status_code == 404

    def test_user_cannot_delete_shared_document(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance, "full")
        shared = make_folder(db, admin, finance, "Reports")
        doc = make_document(db, admin, shared)
        assert client.delete(f"/api/documents/{doc.id}", headers=headers_for(alice)).status_code == 403

    def test_missing_file_url_is_422(self, client, db, admin):
        finance = make_category(db, admin)
        shared = make_folder(db, admin, finance, "Reports")
        resp = client.post("/api/documents", json={"name": "x", "folder_id": shared.id}, headers=headers_for(admin))
        assert resp.status_code == 422

    def test_url_only_registration_is_422(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        resp = client.post(
            "/api/documents",
            json={"name": "x.pdf", "folder_id": mine.id, "file_url": "http://169.254.169.254/latest/meta-data/"},
            headers=headers_for(alice),
        )
        assert resp.status_code == 422


class TestVersionsApi:

    def test_upload_list_delete(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        doc = make_document(db, alice, mine, versions=1)
        h = headers_for(alice)

        resp = client.post(
            f"/api/documents/{doc.id}/versions",
            json={"file_url": "https://blobs.test/v2", "public_id": _upload_id(alice.id, "v2.pdf")},
            headers=h,
        )
        assert resp.status_code == 201
        v2 = resp.json()
        assert v2["version_number"] == 2
        assert v2["is_current"] is True

        listed = client.get(f"/api/documents/{doc.id}/versions", headers=h).json()
        assert [v["version_number"] for v in listed] == [1, 2]
        assert listed[1]["uploaded_by_email"] == alice.email

        assert client.delete(f"/api/documents/{doc.id}/versions/{v2['id']}", headers=h).status_code == 204
        assert client.get(f"/api/documents/{doc.id}", headers=h).json()["current_version_id"] == listed[0]["id"]

    def test_deleting_only_version_is_400(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        doc = make_document(db, alice, mine, versions=1)
        resp = client.delete(f"/api/documents/{doc.id}/versions/{doc.current_version_id}", headers=headers_for(alice))
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_three_version_walkthrough(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        doc = make_document(db, alice, mine, versions=3)
        h = headers_for(alice)
        ids = {v["version_number"]: v["id"] for v in client.get(f"/api/documents/{doc.id}/versions", headers=h).json()}

        client.delete(f"/api/documents/{doc.id}/versions/{ids[3]}", headers=h)
        assert client.get(f"/api/documents/{doc.id}", headers=h).json()["current_version_id"] == ids[2]
        assert client.delete(f"/api/documents/{doc.id}/versions/{ids[2]}", headers=h).status_code == 204
        assert client.delete(f"/api/documents/{doc.id}/versions/{ids[1]}", headers=h).status_code == 400


class TestCloneApi:

    def test_clone_into_personal_folder(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance, "read")
        shared = make_folder(db, admin, finance, "Reports")
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        source = make_document(db, admin, shared, name="policy.pdf", versions=2)

        resp = client.post(
            f"/api/documents/{source.id}/clone", json={"target_folder_id": mine.id}, headers=headers_for(alice)
        )
        assert resp.status_code == 201
        assert resp.json()["name"] == "policy.pdf (Copy)"
        assert resp.json()["public_id"] == source.public_id

        versions = client.get(f"/api/documents/{resp.json()['id']}/versions", headers=headers_for(alice)).json()
        assert [v["version_number"] for v in versions] == [1]

    def test_clone_into_shared_is_forbidden(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance, "full")
        shared = make_folder(db, admin, finance, "Reports")
        source = make_document(db, admin, shared)
        resp = client.post(
            f"/api/documents/{source.id}/clone", json={"target_folder_id": shared.id}, headers=headers_for(alice)
        )
        assert resp.status_code == 403


class TestForeignFileReferences:
    """Registering a stored object must not expose files from categories the
    caller cannot see."""

    def test_other_categorys_object_cannot_be_registered(self, client, db, storage, admin, bob):
        finance = make_category(db, admin, "Finance")
        secret = make_document(db, admin, make_folder(db, admin, finance, "Board"), name="secret.pdf")
        storage.objects[secret.public_id] = (b"TOP-SECRET", "application/pdf")

        ops = make_category(db, admin, "Ops")
        grant(db, bob, ops)
        bobs = make_folder(db, bob, ops, "Bob drafts", personal=True)
        h = headers_for(bob)

        assert client.get(f"/api/files/versions/{secret.current_version_id}/download", headers=h).status_code == 403

        payload = {"name": "mine.pdf", "folder_id": bobs.id, "file_url": secret.file_url, "public_id": secret.public_id}
        resp = client.post("/api/documents", json=payload, headers=h)
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"
        assert client.get(f"/api/folders/{bobs.id}/documents", headers=h).json() == []

    def test_another_users_upload_cannot_be_registered(self, client, db, admin, alice, bob):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        grant(db, bob, finance)
        bobs = make_folder(db, bob, finance, "Bob drafts", personal=True)

        upload = client.post(
            "/api/files/upload",
            files={"file": ("salary.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers_for(alice),
        ).json()

        payload = {"name": "x.pdf", "folder_id": bobs.id, "file_url": upload["url"], "public_id": upload["public_id"]}
        assert client.post("/api/documents", json=payload, headers=headers_for(bob)).status_code == 403

    def test_upload_then_register_round_trip(self, client, db, admin, alice):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        h = headers_for(alice)

        upload = client.post(
            "/api/files/upload", files={"file": ("plan.pdf", b"%PDF-1.4", "application/pdf")}, headers=h
        ).json()
        resp = client.post(
            "/api/documents",
            json={"name": "plan.pdf", "folder_id": mine.id, "file_url": upload["url"], "public_id": upload["public_id"]},
            headers=h,
        )
        assert resp.status_code == 201

        download = client.get(f"/api/files/versions/{resp.json()['current_version_id']}/download", headers=h)
        assert download.status_code == 200
        assert download.content == b"%PDF-1.4"

    def test_foreign_object_rejected_as_new_version(self, client, db, admin, alice, bob):
        finance = make_category(db, admin)
        grant(db, alice, finance)
        mine = make_folder(db, alice, finance, "Drafts", personal=True)
        doc = make_document(db, alice, mine)
        resp = client.post(
            f"/api/documents/{doc.id}/versions",
            json={"file_url": "https://blobs.test/x", "public_id": _upload_id(bob.id)},
            headers=headers_for(alice),
        )
        assert resp.status_code == 403
