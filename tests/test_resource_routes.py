"""
Tests for the generic collection routes
"""
import pytest
from fastapi.testclient import TestClient

from mock_backend.main import create_app
from mock_backend.store.document_store import DocumentStore, MemoryBackend


class TestReadRoutes:

    def test_list_collection(self, client, sample_db):
        response = client.get("/users")
        assert response.status_code == 200
        assert response.json() == sample_db["users"]

    def test_get_by_id_includes_password(self, client):
        response = client.get("/api/v1/users/1")
        assert response.status_code == 200
        assert response.json() == {"id": "1", "phone": "555-0100", "password": "pw1", "name": "A"}

    def test_numeric_id_matched_from_path(self, client):
        response = client.get("/bookings/2")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_missing_id(self, client):
        response = client.get("/users/99")
        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    def test_unknown_collection(self, client):
        assert client.get("/widgets").status_code == 404
        assert client.get("/widgets/1").status_code == 404

    def test_filter_by_equality(self, client):
        response = client.get("/bookings", params={"status": "confirmed"})
        assert [b["id"] for b in response.json()] == [1, 3]

    def test_filters_are_anded(self, client):
        response = client.get("/bookings?status=confirmed&userId=1")
        assert [b["id"] for b in response.json()] == [1]

    def test_repeated_filter_is_ored(self, client):
        response = client.get("/bookings?id=1&id=3")
        assert [b["id"] for b in response.json()] == [1, 3]

    def test_filter_on_nested_field(self, client):
        response = client.get("/users?address.city=Pune")
        assert [u["id"] for u in response.json()] == ["2"]

    def test_filter_on_missing_field_matches_nothing(self, client):
        assert client.get("/users?nickname=A").json() == []

    def test_sort_descending(self, client):
        response = client.get("/bookings?_sort=price&_order=desc")
        assert [b["price"] for b in response.json()] == [300, 200, 100]

    def test_root_lists_resources(self, client):
        data = client.get("/").json()
        assert data["resources"] == {"users": 2, "bookings": 3, "payments": 0}
        assert data["singular"] == ["settings"]
        assert data["login"] == "POST /api/v1/auth/login"

    def test_db_returns_everything(self, client, sample_db):
        assert client.get("/db").json() == sample_db


class TestWriteRoutes:

    def test_create_assigns_next_numeric_id(self, client, backend):
        response = client.post("/bookings", json={"userId": "2", "status": "pending"})
        assert response.status_code == 201
        assert response.json() == {"userId": "2", "status": "pending", "id": 4}
        assert backend.snapshot["bookings"][-1]["id"] == 4

    def test_create_in_empty_collection_starts_at_one(self, client):
        response = client.post("/api/v1/payments", json={"amount": 10})
        assert response.json()["id"] == 1

    def test_create_with_string_ids_generates_random_id(self, client):
        record = client.post("/users", json={"phone": "1"}).json()
        assert isinstance(record["id"], str)
        assert record["id"] not in ("1", "2")

    def test_create_keeps_supplied_id(self, client):
        response = client.post("/users", json={"id": "abc", "phone": "9"})
        assert response.status_code == 201
        assert client.get("/users/abc").json()["phone"] == "9"

    def test_create_duplicate_id(self, client):
        response = client.post("/users", json={"id": "1"})
        assert response.status_code == 409
        assert "message" in response.json()

    def test_put_replaces_record(self, client):
        response = client.put("/users/1", json={"id": "other", "phone": "000"})
        assert response.status_code == 200
        assert response.json() == {"id": "1", "phone": "000"}
        assert client.get("/users/1").json() == {"id": "1", "phone": "000"}

    def test_patch_merges_record(self, client):
        response = client.patch("/api/v1/users/1", json={"name": "Z"})
        assert response.status_code == 200
        assert response.json() == {"id": "1", "phone": "555-0100", "password": "pw1", "name": "Z"}

    def test_update_missing_record(self, client):
        assert client.put("/users/99", json={}).status_code == 404
        assert client.patch("/users/99", json={}).status_code == 404

    def test_delete_record(self, client, backend):
        response = client.delete("/bookings/3")
        assert response.status_code == 200
        assert response.json() == {}
        assert client.get("/bookings/3").status_code == 404
        assert [b["id"] for b in backend.snapshot["bookings"]] == [1, 2]

    def test_delete_removes_dependents(self, client):
        client.delete("/users/1")
        assert [b["id"] for b in client.get("/bookings").json()] == [3]

    def test_delete_missing_record(self, client):
        assert client.delete("/users/99").status_code == 404

    @pytest.mark.parametrize("body", [b"[1, 2]", b"\"text\"", b"{broken"])
    def test_write_requires_object_body(self, client, body):
        response = client.post("/users", content=body, headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert "message" in response.json()

    def test_every_write_is_persisted(self, client, backend):
        client.post("/payments", json={"amount": 1})
        client.patch("/payments/1", json={"amount": 2})
        client.delete("/payments/1")
        assert backend.save_count == 3
        assert backend.snapshot["payments"] == []


class TestSingularResource:

    def test_get(self, client):
        assert client.get("/settings").json() == {"currency": "INR", "maintenance": False}

    def test_patch(self, client):
        response = client.patch("/settings", json={"maintenance": True})
        assert response.json() == {"currency": "INR", "maintenance": True}

    def test_put_and_post_replace(self, client):
        assert client.put("/settings", json={"currency": "USD"}).json() == {"currency": "USD"}
        assert client.post("/settings", json={"theme": "dark"}).json() == {"theme": "dark"}

    def test_put_on_collection_path_not_allowed(self, client):
        assert client.put("/users", json={}).status_code == 405


class TestNestedRoutes:

    def test_list_children(self, client):
        response = client.get("/api/v1/users/1/bookings")
        assert [b["id"] for b in response.json()] == [1, 2]

    def test_list_children_with_filter(self, client):
        response = client.get("/users/1/bookings?status=cancelled")
        assert [b["id"] for b in response.json()] == [2]

    def test_create_child_sets_foreign_key(self, client):
        response = client.post("/users/2/bookings", json={"status": "pending"})
        assert response.status_code == 201
        assert response.json()["userId"] == "2"
        assert len(client.get("/users/2/bookings").json()) == 2


class TestServerErrors:

    def test_persist_failure_is_500(self, sample_db):
        class BrokenBackend(MemoryBackend):
            def save(self, data):
                raise OSError("disk full")

        app = create_app(store=DocumentStore(BrokenBackend(sample_db)))
        # Answered inside the app, so nothing is re-raised to the server
        with TestClient(app) as client:
            response = client.post("/payments", json={"amount": 1})
            assert response.status_code == 500
            assert response.json() == {"message": "Internal Server Error"}
            assert response.headers["cache-control"] == "no-cache"

    def test_text_body_on_create_is_ignored(self, client):
        response = client.post("/payments", content=b'{"amount": 1}', headers={"content-type": "text/plain"})
        assert response.status_code == 201
        assert response.json() == {"id": 1}

    def test_responses_are_not_cached(self, client):
        response = client.get("/users")
        assert response.headers["cache-control"] == "no-cache"
