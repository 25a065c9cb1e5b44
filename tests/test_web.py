#!/usr/bin/env python3
"""Tests for the Flask web front end."""
from datetime import date, timedelta

import pytest

from registry import InMemoryStore, PermissionDenied
from registry.config import Settings
from web.app import app, format_date, get_view, init_registry, status_badge_color

COLLECTION = "vehicleRegistrations"


def iso(days):
    return (date.today() + timedelta(days=days)).isoformat()


class DeniedStore(InMemoryStore):
    def fetch_all(self, collection, order_by=None):
        raise PermissionDenied("Missing or insufficient permissions")


@pytest.fixture
def store():
    return InMemoryStore(
        {
            COLLECTION: [
                {
                    "id": "expired000001",
                    "ownerName": "Vikram Singh",
                    "registrationNumber": "DL01CD5678",
                    "vehicleType": "heavy-vehicle",
                    "expiringDate": iso(-5),
                },
                {
                    "id": "soon000000002",
                    "ownerName": "Asha Rao",
                    "registrationNumber": "MH12AB1234",
                    "vehicleType": "4-wheeler",
                    "expiringDate": iso(10),
                    "userToken": "secret-token-value",
                },
                {
                    "id": "later00000003",
                    "ownerName": "Meera Nair",
                    "registrationNumber": "KA05MN4321",
                    "vehicleType": "2-wheeler",
                    "expiringDate": iso(200),
                    "status": "approved",
                },
            ]
        }
    )


def make_client(store, tmp_path):
    app.config["TESTING"] = True
    init_registry(app, store, Settings(data_dir=tmp_path, collection=COLLECTION))
    return app.test_client()


@pytest.fixture
def client(store, tmp_path):
    client = make_client(store, tmp_path)
    client.post("/login", data={"email": "abc@gmail.com", "password": "password"})
    return client


class TestTemplateFilters:
    """Tests for Jinja filter helpers."""

    def test_format_date(self):
        assert format_date("2025-01-10") == "10/01/2025"
        assert format_date(None) == "N/A"
        assert format_date("garbage") == "garbage"

    def test_status_badge_color(self):
        assert "green" in status_badge_color("approved")
        assert "gray" in status_badge_color("unknown")


class TestLogin:
    """Tests for the login flow."""

    def test_requires_login(self, store, tmp_path):
        client = make_client(store, tmp_path)
        response = client.get("/registrations")
        assert response.status_code == 302
        assert "/login" in response.headers["Location"]

    def test_invalid_form(self, store, tmp_path):
        client = make_client(store, tmp_path)
        response = client.post("/login", data={"email": "", "password": "123"})
        assert response.status_code == 400
        assert b"Email address is required" in response.data

    def test_wrong_credentials(self, store, tmp_path):
        client = make_client(store, tmp_path)
        response = client.post("/login", data={"email": "abc@gmail.com", "password": "wrong-one"})
        assert response.status_code == 401
        assert b"Invalid email or password" in response.data

    def test_success(self, store, tmp_path):
        client = make_client(store, tmp_path)
        response = client.post("/login", data={"email": "abc@gmail.com", "password": "password"})
        assert response.status_code == 302
        with client.session_transaction() as session:
            assert session["auth_token"] == "demo-jwt-token"


class TestRegistrationsPage:
    """Tests for the registrations list."""

    def test_lists_soonest_first(self, client):
        response = client.get("/registrations")
        assert response.status_code == 200
        body = response.data
        assert body.index(b"Vikram Singh") < body.index(b"Asha Rao") < body.index(b"Meera Nair")
        assert b"Showing 3 of 3" in body

    def test_global_search(self, client):
        body = client.get("/registrations?global=mh12").data
        assert b"Asha Rao" in body
        assert b"Vikram Singh" not in body

    def test_search_ignores_tokens(self, client):
        body = client.get("/registrations?global=secret-token").data
        assert b"No matches found for your search" in body

    def test_custom_expired(self, client):
        body = client.get("/registrations?custom=expired").data
        assert b"Vikram Singh" in body
        assert b"Asha Rao" not in body

    def test_custom_filter_is_one_shot(self, client):
        client.get("/registrations?custom=expiring-soon")
        body = client.get("/registrations").data
        assert b"Showing 3 of 3" in body

    def test_empty_collection(self, tmp_path):
        client = make_client(InMemoryStore(), tmp_path)
        client.post("/login", data={"email": "abc@gmail.com", "password": "password"})
        body = client.get("/registrations").data
        assert b"No vehicle registrations found" in body

    def test_permission_denied(self, tmp_path):
        client = make_client(DeniedStore(), tmp_path)
        client.post("/login", data={"email": "abc@gmail.com", "password": "password"})
        response = client.get("/registrations")
        assert response.status_code == 200
        assert b"Permission denied" in response.data

    def test_refresh_picks_up_new_records(self, client, store):
        client.get("/registrations")
        store.insert(COLLECTION, {"ownerName": "Ravi Kumar", "expiringDate": iso(50)})
        response = client.post("/registrations/refresh", follow_redirects=True)
        assert b"Data refreshed!" in response.data
        assert b"Ravi Kumar" in response.data

    def test_clear_filters(self, client):
        client.get("/registrations?global=mh12")
        response = client.get("/registrations/clear", follow_redirects=True)
        assert b"Filters cleared" in response.data
        assert b"Showing 3 of 3" in response.data

    def test_requests_do_not_share_filters(self, client):
        """Each request filters by its own query args only."""
        client.get("/registrations?global=mh12")
        body = client.get("/registrations?global=dl01").data
        assert b"Vikram Singh" in body
        assert b"Asha Rao" not in body
        body = client.get("/registrations").data
        assert b"Showing 3 of 3" in body

    def test_refresh_keeps_query_filters(self, client):
        response = client.post("/registrations/refresh?global=mh12")
        assert response.status_code == 302
        assert "global=mh12" in response.headers["Location"]


class TestExport:
    """Tests for CSV export."""

    def test_download(self, client):
        response = client.get("/registrations/export?vehicleType=4-wheeler")
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        disposition = response.headers["Content-Disposition"]
        assert f"vehicle-registrations-{date.today().isoformat()}.csv" in disposition
        lines = response.get_data(as_text=True).splitlines()
        assert len(lines) == 2
        assert lines[1].startswith('"soon000000002","Asha Rao"')
        assert "secret-token-value" not in response.get_data(as_text=True)

    def test_export_uses_own_filters(self, client):
        """Another request's filters never leak into an export."""
        client.get("/registrations?global=dl01")
        text = client.get("/registrations/export?global=mh12").get_data(as_text=True)
        lines = text.splitlines()
        assert len(lines) == 2
        assert lines[1].startswith('"soon000000002"')

    def test_custom_export_survives_background_refresh(self, client):
        client.get("/registrations")
        get_view().refresh()
        text = client.get("/registrations/export?custom=expired").get_data(as_text=True)
        lines = text.splitlines()
        assert len(lines) == 2
        assert lines[1].startswith('"expired000001"')

    def test_empty_view_warns(self, client):
        response = client.get("/registrations/export?status=rejected", follow_redirects=True)
        assert response.mimetype == "text/html"
        assert b"No data to export" in response.data


class TestRegister:
    """Tests for the registration form."""

    def form(self, **overrides):
        values = {
            "ownerName": "Ravi Kumar",
            "ownerEmail": "ravi@example.com",
            "ownerPhone": "9876543210",
            "vehicleType": "3-wheeler",
            "registrationNumber": "tn09ab1234",
            "testingDate": iso(1),
            "expiringDate": iso(300),
        }
        values.update(overrides)
        return values

    def test_valid_submission(self, client, store):
        response = client.post("/register", data=self.form())
        assert response.status_code == 302
        added = store.collections[COLLECTION][-1]
        assert added["registrationNumber"] == "TN09AB1234"
        assert added["submittedBy"] == "abc@gmail.com"
        assert added["status"] == "pending"
        assert any(r.registration.id == added["id"] for r in get_view().rows)

    def test_invalid_submission(self, client, store):
        response = client.post("/register", data=self.form(ownerPhone="12345"))
        assert response.status_code == 400
        assert b"Phone number is too short" in response.data
        assert len(store.collections[COLLECTION]) == 3
