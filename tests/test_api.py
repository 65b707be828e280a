"""
tests/test_api.py -- Integration tests for the HTTP API.

These tests exercise the full stack: FastAPI routing -> bearer-token dependency
-> services and ownership checks -> SQLAlchemy on in-memory SQLite -> response
models and the error envelope.

Coverage:
  - Auth: register/login/me round trip, duplicate e-mail, bad credentials
  - Organizations: the "SCI Foo" scenario (member access, stranger 404, removal)
  - Properties, tenants, leases and receipts with inherited access

Fixtures used (from conftest.py):
  - api_client: TestClient over the real app with an in-memory database
"""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from quittance.core.errors import ValidationError
from quittance.services.lease import add_months

PASSWORD = "password1"


def _register(client: TestClient, name: str) -> tuple[dict, dict]:
    """Register a fresh account; return (auth headers, user json)."""
    email = f"{name}-{uuid4().hex[:8]}@example.com"
    resp = client.post("/api/v1/auth/register", json={"email": email, "password": PASSWORD, "name": name})
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


def _create_org(client: TestClient, headers: dict, name: str = "SCI Foo") -> dict:
    resp = client.post(
        "/api/v1/organizations",
        json={"name": name, "legal_form": "SCI", "address": "12 avenue Foch, Paris"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_property(client: TestClient, headers: dict, **extra) -> dict:
    body = {"address": "5 rue du Bac, Paris", "property_type": "apartment", **extra}
    resp = client.post("/api/v1/properties", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestHealth:
    def test_health(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Healthy"

    def test_correlation_id_echoed(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
        assert resp.headers["X-Correlation-ID"] == "abc-123"

    def test_unknown_route_uses_error_envelope(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/nowhere")
        assert resp.status_code == 404
        assert resp.json()["error"]["type"] == "http_error"


class TestAuthFlow:
    """Register -> login -> /auth/me, plus every way to fail."""

    def test_register_login_me(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/register", json={"email": "a@b.com", "password": PASSWORD, "name": "Alice"}
        )
        assert resp.status_code == 201, resp.text
        registered = resp.json()
        assert registered["user"]["email"] == "a@b.com"
        assert "password_hash" not in registered["user"]

        resp = api_client.post("/api/v1/auth/login", json={"email": "A@B.com", "password": PASSWORD})
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]

        resp = api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["id"] == registered["user"]["id"]
        assert resp.json()["email"] == "a@b.com"

    def test_duplicate_email_conflict(self, api_client: TestClient) -> None:
        email = f"dup-{uuid4().hex[:8]}@example.com"
        body = {"email": email, "password": PASSWORD, "name": "Dup"}
        assert api_client.post("/api/v1/auth/register", json=body).status_code == 201
        resp = api_client.post("/api/v1/auth/register", json={**body, "email": email.upper()})
        assert resp.status_code == 409
        assert resp.json()["error"]["type"] == "conflict"

    def test_short_password_rejected(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": f"short-{uuid4().hex[:8]}@example.com", "password": "short", "name": "Short"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["type"] == "validation_error"

    def test_malformed_email_rejected(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/register", json={"email": "not-an-email", "password": PASSWORD, "name": "X"}
        )
        assert resp.status_code == 422

    def test_wrong_password_and_unknown_email_look_the_same(self, api_client: TestClient) -> None:
        _, user = _register(api_client, "carol")
        wrong = api_client.post("/api/v1/auth/login", json={"email": user["email"], "password": "password2"})
        unknown = api_client.post(
            "/api/v1/auth/login", json={"email": f"ghost-{uuid4().hex[:8]}@example.com", "password": PASSWORD}
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["error"]["message"] == unknown.json()["error"]["message"] == "Invalid email or password"

    def test_me_requires_bearer_token(self, api_client: TestClient) -> None:
        for headers in ({}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer garbage"}):
            resp = api_client.get("/api/v1/auth/me", headers=headers)
            assert resp.status_code == 401
            body = resp.json()
            assert body["error"]["type"] == "authentication_error"
            assert body["path"] == "/api/v1/auth/me"


class TestOrganizationScenario:
    """A founds "SCI Foo", adds B; B sees the organization's property, C does not."""

    def test_sci_foo(self, api_client: TestClient) -> None:
        a_headers, _ = _register(api_client, "a")
        b_headers, b_user = _register(api_client, "b")
        c_headers, _ = _register(api_client, "c")

        org = _create_org(api_client, a_headers)
        resp = api_client.post(
            f"/api/v1/organizations/{org['id']}/members",
            json={"user_id": b_user["id"], "role": "associate", "share_percentage": 50},
            headers=a_headers,
        )
        assert resp.status_code == 201, resp.text
        membership_id = resp.json()["id"]

        prop = _create_property(api_client, a_headers, organization_id=org["id"])
        assert prop["organization_id"] == org["id"]
        assert prop["user_id"] is None

        # Member B reaches the property through the organization.
        assert api_client.get(f"/api/v1/properties/{prop['id']}", headers=b_headers).status_code == 200
        listed = [p["id"] for p in api_client.get("/api/v1/properties", headers=b_headers).json()]
        assert prop["id"] in listed

        # Stranger C gets "not found", never "forbidden".
        resp = api_client.get(f"/api/v1/properties/{prop['id']}", headers=c_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Property not found"
        assert prop["id"] not in [p["id"] for p in api_client.get("/api/v1/properties", headers=c_headers).json()]
        assert api_client.get(f"/api/v1/organizations/{org['id']}", headers=c_headers).status_code == 404

        # Removing B's membership revokes access.
        resp = api_client.delete(f"/api/v1/organizations/{org['id']}/members/{membership_id}", headers=a_headers)
        assert resp.status_code == 200
        assert api_client.get(f"/api/v1/properties/{prop['id']}", headers=b_headers).status_code == 404

    def test_detail_lists_members_by_share(self, api_client: TestClient) -> None:
        a_headers, a_user = _register(api_client, "founder")
        _, big = _register(api_client, "big")
        _, small = _register(api_client, "small")
        org = _create_org(api_client, a_headers, "SCI Parts")
        for user, share in ((small, 20), (big, 80)):
            resp = api_client.post(
                f"/api/v1/organizations/{org['id']}/members",
                json={"user_id": user["id"], "role": "associate", "share_percentage": share},
                headers=a_headers,
            )
            assert resp.status_code == 201

        detail = api_client.get(f"/api/v1/organizations/{org['id']}", headers=a_headers).json()
        assert [m["user_id"] for m in detail["members"]] == [big["id"], small["id"], a_user["id"]]
        assert detail["members"][-1]["role"] == "owner"
        assert detail["members"][-1]["share_percentage"] is None

    def test_list_returns_only_callers_organizations(self, api_client: TestClient) -> None:
        a_headers, _ = _register(api_client, "lister")
        d_headers, _ = _register(api_client, "other")
        mine = _create_org(api_client, a_headers, "SCI Mine")
        _create_org(api_client, d_headers, "SCI Theirs")
        names = [o["name"] for o in api_client.get("/api/v1/organizations", headers=a_headers).json()]
        assert names == ["SCI Mine"]
        assert mine["name"] == "SCI Mine"

    def test_non_member_cannot_create_property_in_organization(self, api_client: TestClient) -> None:
        a_headers, _ = _register(api_client, "owner")
        d_headers, _ = _register(api_client, "intruder")
        org = _create_org(api_client, a_headers)
        resp = api_client.post(
            "/api/v1/properties",
            json={"address": "x", "property_type": "house", "organization_id": org["id"]},
            headers=d_headers,
        )
        assert resp.status_code == 404

    def test_delete_organization_removes_its_properties(self, api_client: TestClient) -> None:
        a_headers, _ = _register(api_client, "closer")
        org = _create_org(api_client, a_headers, "SCI Closing")
        prop = _create_property(api_client, a_headers, organization_id=org["id"])
        assert api_client.delete(f"/api/v1/organizations/{org['id']}", headers=a_headers).status_code == 200
        assert api_client.get(f"/api/v1/properties/{prop['id']}", headers=a_headers).status_code == 404
        assert api_client.get(f"/api/v1/organizations/{org['id']}", headers=a_headers).status_code == 404


class TestProperties:
    def test_direct_ownership(self, api_client: TestClient) -> None:
        headers, user = _register(api_client, "landlord")
        other_headers, _ = _register(api_client, "neighbour")
        prop = _create_property(api_client, headers, furnished=True, rooms=2, surface_area=42.5)
        assert prop["user_id"] == user["id"]
        assert prop["organization_id"] is None
        assert api_client.get(f"/api/v1/properties/{prop['id']}", headers=other_headers).status_code == 404
        assert api_client.delete(f"/api/v1/properties/{prop['id']}", headers=other_headers).status_code == 404

    def test_transfer_to_organization_and_back(self, api_client: TestClient) -> None:
        headers, user = _register(api_client, "mover")
        org = _create_org(api_client, headers, "SCI Transfer")
        prop = _create_property(api_client, headers)

        resp = api_client.put(
            f"/api/v1/properties/{prop['id']}", json={"organization_id": org["id"]}, headers=headers
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["organization_id"] == org["id"]
        assert resp.json()["user_id"] is None

        resp = api_client.put(f"/api/v1/properties/{prop['id']}", json={"user_id": user["id"]}, headers=headers)
        assert resp.json()["user_id"] == user["id"]
        assert resp.json()["organization_id"] is None

    def test_both_owner_fields_rejected(self, api_client: TestClient) -> None:
        headers, user = _register(api_client, "greedy")
        org = _create_org(api_client, headers, "SCI Both")
        prop = _create_property(api_client, headers)
        resp = api_client.put(
            f"/api/v1/properties/{prop['id']}",
            json={"organization_id": org["id"], "user_id": user["id"]},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_update_keeps_unset_fields(self, api_client: TestClient) -> None:
        headers, _ = _register(api_client, "editor")
        prop = _create_property(api_client, headers, rooms=3)
        resp = api_client.put(f"/api/v1/properties/{prop['id']}", json={"description": "Sunny"}, headers=headers)
        assert resp.json()["description"] == "Sunny"
        assert resp.json()["rooms"] == 3


class TestRentalFlow:
    """Tenants, leases and receipts inherit access from the property."""

    def _setup(self, client: TestClient):
        headers, _ = _register(client, "renter")
        prop = _create_property(client, headers)
        tenant = client.post("/api/v1/tenants", json={"name": "Jean Dupont"}, headers=headers).json()
        lease = client.post(
            "/api/v1/leases",
            json={
                "property_id": prop["id"],
                "tenant_id": tenant["id"],
                "start_date": "2024-01-31",
                "duration_months": 1,
                "monthly_rent": 900,
                "charges": 50,
                "deposit": 900,
            },
            headers=headers,
        )
        assert lease.status_code == 201, lease.text
        return headers, prop, tenant, lease.json()

    def test_lease_end_date_clamps_to_month_end(self, api_client: TestClient) -> None:
        _, _, _, lease = self._setup(api_client)
        assert lease["end_date"] == "2024-02-29"
        assert lease["status"] == "active"

    def test_tenant_is_private_to_its_owner(self, api_client: TestClient) -> None:
        headers, _, tenant, _ = self._setup(api_client)
        other_headers, _ = _register(api_client, "snoop")
        assert api_client.get(f"/api/v1/tenants/{tenant['id']}", headers=headers).status_code == 200
        assert api_client.get(f"/api/v1/tenants/{tenant['id']}", headers=other_headers).status_code == 404

    def test_lease_requires_access_to_tenant(self, api_client: TestClient) -> None:
        _, _, tenant, _ = self._setup(api_client)
        other_headers, _ = _register(api_client, "borrower")
        own_prop = _create_property(api_client, other_headers)
        resp = api_client.post(
            "/api/v1/leases",
            json={
                "property_id": own_prop["id"],
                "tenant_id": tenant["id"],
                "start_date": "2024-03-01",
                "duration_months": 12,
                "monthly_rent": 700,
            },
            headers=other_headers,
        )
        assert resp.status_code == 404

    def test_receipts(self, api_client: TestClient) -> None:
        headers, _, _, lease = self._setup(api_client)
        body = {
            "lease_id": lease["id"],
            "period_month": 2,
            "period_year": 2024,
            "base_rent": 900,
            "charges": 50,
            "payment_date": "2024-02-05",
        }
        resp = api_client.post("/api/v1/receipts", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        receipt = resp.json()
        assert receipt["total_amount"] == 950
        assert receipt["status"] == "generated"

        dup = api_client.post("/api/v1/receipts", json=body, headers=headers)
        assert dup.status_code == 409

        bad_month = api_client.post("/api/v1/receipts", json={**body, "period_month": 13}, headers=headers)
        assert bad_month.status_code == 400

        negative = api_client.post(
            "/api/v1/receipts", json={**body, "period_month": 3, "base_rent": -1}, headers=headers
        )
        assert negative.status_code == 400

        resp = api_client.patch(f"/api/v1/receipts/{receipt['id']}", json={"status": "paid"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "paid"

        resp = api_client.patch(f"/api/v1/receipts/{receipt['id']}", json={"status": "lost"}, headers=headers)
        assert resp.status_code == 400

        listed = api_client.get(f"/api/v1/receipts?lease_id={lease['id']}", headers=headers).json()
        assert [r["id"] for r in listed] == [receipt["id"]]

        other_headers, _ = _register(api_client, "auditor")
        assert api_client.get(f"/api/v1/receipts/{receipt['id']}", headers=other_headers).status_code == 404
        assert api_client.get(f"/api/v1/receipts?lease_id={lease['id']}", headers=other_headers).json() == []

    def test_deleting_property_removes_leases(self, api_client: TestClient) -> None:
        headers, prop, _, lease = self._setup(api_client)
        assert api_client.delete(f"/api/v1/properties/{prop['id']}", headers=headers).status_code == 200
        assert api_client.get(f"/api/v1/leases/{lease['id']}", headers=headers).status_code == 404

    def _lease_body(self, client: TestClient, headers: dict, **overrides) -> dict:
        prop = _create_property(client, headers)
        tenant = client.post("/api/v1/tenants", json={"name": "Marie Curie"}, headers=headers).json()
        return {
            "property_id": prop["id"],
            "tenant_id": tenant["id"],
            "start_date": "2024-01-31",
            "duration_months": 12,
            "monthly_rent": 800,
            **overrides,
        }

    def test_lease_duration_above_bound_rejected(self, api_client: TestClient) -> None:
        headers, _ = _register(api_client, "longterm")
        body = self._lease_body(api_client, headers, duration_months=10**6)
        resp = api_client.post("/api/v1/leases", json=body, headers=headers)
        assert resp.status_code == 422
        assert resp.json()["error"]["type"] == "validation_error"

    def test_lease_ending_past_calendar_rejected(self, api_client: TestClient) -> None:
        headers, _ = _register(api_client, "farfuture")
        body = self._lease_body(api_client, headers, start_date="9999-06-01", duration_months=12)
        resp = api_client.post("/api/v1/leases", json=body, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "duration_months out of range"

    def test_negative_lease_amounts_rejected(self, api_client: TestClient) -> None:
        headers, _ = _register(api_client, "miser")
        for field in ("monthly_rent", "charges", "deposit"):
            body = self._lease_body(api_client, headers, **{field: -1})
            resp = api_client.post("/api/v1/leases", json=body, headers=headers)
            assert resp.status_code == 400, field
            assert resp.json()["error"]["message"] == f"{field} must not be negative"


class TestAddMonths:
    def test_clamps_to_shorter_month(self) -> None:
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_out_of_calendar_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            add_months(date(9999, 12, 1), 1)
