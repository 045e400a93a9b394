from conftest import admin_headers, member_headers, reviewer_headers
from docverify.services.progress_service import compute_progress

API = "/api/v1"


class TestProgress:
    def _upload(self, client, member_id, kind, **extra):
        body = {"kind": kind, "file_name": f"{kind}.pdf", "file_ref": f"s3://docs/{kind}.pdf"}
        body.update(extra)
        r = client.post(f"{API}/documents", json=body, headers=member_headers(member_id))
        assert r.status_code == 201
        return r.json()

    def _approve(self, client, doc):
        r = client.post(f"{API}/documents/{doc['id']}/decide", json={
            "version": doc["version"], "outcome": "APPROVED",
        }, headers=admin_headers())
        assert r.status_code == 200
        return r.json()

    def test_no_documents(self, client):
        r = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1"))
        assert r.status_code == 200
        assert r.json() == {
            "member_id": "m-a1",
            "completed": 0,
            "total": 3,
            "ratio": 0.0,
            "percent": 0,
            "missing": ["BAPTISM", "CONFIRMATION", "MARRIAGE"],
            "uploaded": 0,
            "approved": 0,
        }

    def test_two_of_three_approved(self, client):
        self._approve(client, self._upload(client, "m-a1", "BAPTISM"))
        self._approve(client, self._upload(client, "m-a1", "CONFIRMATION"))

        r = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1"))
        data = r.json()
        assert data["completed"] == 2
        assert data["total"] == 3
        assert data["ratio"] == 0.667
        assert data["percent"] == 67
        assert data["missing"] == ["MARRIAGE"]

    def test_pending_and_rejected_do_not_count(self, client):
        self._upload(client, "m-a1", "BAPTISM")
        doc = self._upload(client, "m-a1", "MARRIAGE")
        client.post(f"{API}/documents/{doc['id']}/decide", json={
            "version": 1, "outcome": "REJECTED", "note": "not signed",
        }, headers=admin_headers())

        data = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1")).json()
        assert data["completed"] == 0
        assert data["uploaded"] == 1
        assert data["missing"] == ["BAPTISM", "CONFIRMATION", "MARRIAGE"]

    def test_other_documents_never_count(self, client):
        self._approve(client, self._upload(client, "m-a1", "OTHER", title="Akta kelahiran"))

        data = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1")).json()
        assert data["completed"] == 0
        assert data["ratio"] == 0.0
        assert data["approved"] == 1

    def test_progress_is_scoped(self, client):
        assert client.get(f"{API}/members/m-a1/progress", headers=reviewer_headers("area-a")).status_code == 200
        assert client.get(f"{API}/members/m-a1/progress", headers=admin_headers()).status_code == 200
        assert client.get(f"{API}/members/m-a1/progress", headers=reviewer_headers("area-b")).status_code == 403
        assert client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a2")).status_code == 403

    def test_progress_unknown_member(self, client):
        r = client.get(f"{API}/members/ghost/progress", headers=admin_headers())
        assert r.status_code == 404

    def test_compute_progress_directly(self, session):
        progress = compute_progress(session, "m-b1")
        assert progress.completed == 0
        assert progress.missing == ["BAPTISM", "CONFIRMATION", "MARRIAGE"]

    def test_rejection_replace_approval_scenario(self, client):
        doc = self._upload(client, "m-a1", "BAPTISM")

        r = client.post(f"{API}/documents/{doc['id']}/decide", json={
            "version": doc["version"], "outcome": "REJECTED", "note": "wrong certificate",
        }, headers=reviewer_headers("area-a"))
        assert r.status_code == 200
        assert r.json()["review_note"] == "wrong certificate"

        r = client.post(f"{API}/documents/{doc['id']}/replace", json={
            "file_name": "baptism-correct.pdf", "file_ref": "s3://docs/baptism-correct.pdf",
        }, headers=member_headers("m-a1"))
        assert r.status_code == 200
        replaced = r.json()
        assert replaced["status"] == "PENDING"

        before = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1")).json()
        assert "BAPTISM" in before["missing"]

        self._approve(client, replaced)

        after = client.get(f"{API}/members/m-a1/progress", headers=member_headers("m-a1")).json()
        assert after["completed"] == 1
        assert after["missing"] == ["CONFIRMATION", "MARRIAGE"]
