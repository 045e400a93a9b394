from conftest import admin_headers, member_headers, reviewer_headers

API = "/api/v1"


class TestReplace:
    def _upload(self, client, member_id="m-a1", kind="BAPTISM"):
        r = client.post(f"{API}/documents", json={
            "kind": kind,
            "file_name": "old.pdf",
            "file_ref": "s3://docs/old.pdf",
            "mime_type": "application/pdf",
        }, headers=member_headers(member_id))
        return r.json()

    def _reject(self, client, doc, note="wrong certificate"):
        r = client.post(f"{API}/documents/{doc['id']}/decide", json={
            "version": doc["version"], "outcome": "REJECTED", "note": note,
        }, headers=reviewer_headers("area-a"))
        assert r.status_code == 200
        return r.json()

    def _replace(self, client, doc_id, headers, **extra):
        body = {"file_name": "new.png", "file_ref": "s3://docs/new.png", "mime_type": "image/png"}
        body.update(extra)
        return client.post(f"{API}/documents/{doc_id}/replace", json=body, headers=headers)

    def test_replace_resets_rejected_document(self, client):
        doc = self._upload(client)
        rejected = self._reject(client, doc)

        r = self._replace(client, doc["id"], member_headers("m-a1"))
        assert r.status_code == 200
        data = r.json()
        assert data["id"] == doc["id"]
        assert data["status"] == "PENDING"
        assert data["review_note"] is None
        assert data["decided_at"] is None
        assert data["decided_by"] is None
        assert data["version"] == rejected["version"] + 1
        assert data["file_name"] == "new.png"
        assert data["file_ref"] == "s3://docs/new.png"
        assert data["mime_type"] == "image/png"

    def test_replace_keeps_rejection_in_history(self, client):
        doc = self._upload(client)
        self._reject(client, doc, note="stamp missing")
        self._replace(client, doc["id"], member_headers("m-a1"))

        r = client.get(f"{API}/documents/{doc['id']}/history", headers=admin_headers())
        entries = r.json()
        assert [e["action"] for e in entries] == ["SUBMITTED", "REJECTED", "REPLACED"]
        assert entries[1]["note"] == "stamp missing"
        assert entries[1]["file_name"] == "old.pdf"
        assert entries[2]["file_name"] == "new.png"
        assert entries[2]["version"] == 3

    def test_pending_document_cannot_be_replaced(self, client):
        doc = self._upload(client)
        r = self._replace(client, doc["id"], member_headers("m-a1"))
        assert r.status_code == 422
        assert r.json()["code"] == "invalid_state"

    def test_only_owner_can_replace(self, client):
        doc = self._upload(client)
        self._reject(client, doc)

        for headers in (
            member_headers("m-a2"),
            reviewer_headers("area-a"),
            admin_headers(),
        ):
            r = self._replace(client, doc["id"], headers)
            assert r.status_code == 403

    def test_replace_unknown_document_is_forbidden(self, client):
        r = self._replace(client, "missing", member_headers("m-a1"))
        assert r.status_code == 403

    def test_replace_with_stale_version(self, client):
        doc = self._upload(client)
        self._reject(client, doc)
        r = self._replace(client, doc["id"], member_headers("m-a1"), version=1)
        assert r.status_code == 409

    def test_replace_checks_file_metadata(self, client):
        doc = self._upload(client)
        self._reject(client, doc)
        r = self._replace(client, doc["id"], member_headers("m-a1"), mime_type="text/html")
        assert r.status_code == 400

    def test_replace_cannot_reopen_an_occupied_slot(self, client):
        doc = self._upload(client)
        self._reject(client, doc)
        # Member uploaded a fresh document into the freed slot meanwhile
        fresh = self._upload(client)
        assert fresh["status"] == "PENDING"

        r = self._replace(client, doc["id"], member_headers("m-a1"))
        assert r.status_code == 409
        assert r.json()["code"] == "duplicate_slot"

        r = client.get(f"{API}/documents/{doc['id']}", headers=admin_headers())
        assert r.json()["status"] == "REJECTED"

    def test_replaced_document_can_be_reviewed_again(self, client):
        doc = self._upload(client)
        self._reject(client, doc)
        replaced = self._replace(client, doc["id"], member_headers("m-a1")).json()

        r = client.post(f"{API}/documents/{doc['id']}/decide", json={
            "version": replaced["version"], "outcome": "APPROVED",
        }, headers=reviewer_headers("area-a"))
        assert r.status_code == 200
        assert r.json()["status"] == "APPROVED"
