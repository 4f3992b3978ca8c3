"""
Integration tests for the JSON API, driven through the Flask test client.

Run: pytest tests/test_api.py -v
"""
from datetime import timedelta

import pytest

from decorops.auth import issue_token
from decorops.config import config


@pytest.mark.integration
class TestAuth:

    def test_health(self, client):
        assert client.get("/healthz").get_json() == {"ok": True}
        assert client.get("/readyz").status_code == 200

    def test_login_is_case_insensitive_on_tenant(self, client, tenant):
        resp = client.post("/api/login", json={"tenant": " acme ", "password": "acme-pass"})
        assert resp.status_code == 200
        assert resp.get_json()["token"]

    def test_bad_password(self, client, tenant):
        resp = client.post("/api/login", json={"tenant": "ACME", "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid tenant or password"

    def test_login_requires_fields(self, client):
        resp = client.post("/api/login", json={"tenant": "ACME"})
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "validation"

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer not-a-jwt"}, {"Authorization": "Token x"}])
    def test_routes_need_a_valid_token(self, client, headers):
        resp = client.get("/api/inventory", headers=headers)
        assert resp.status_code == 401
        assert "error" in resp.get_json()

    def test_expired_token(self, client, tenant, monkeypatch):
        monkeypatch.setattr(config, "TOKEN_TTL", timedelta(seconds=-5))
        token = issue_token(tenant["id"], "salt-acme")
        resp = client.get("/api/inventory", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Token expired"


@pytest.mark.integration
class TestInventoryRoutes:

    def test_add_and_list(self, client, auth_headers):
        resp = client.post("/api/inventory", headers=auth_headers, json={
            "category": "runners", "item_name": "Gold Table Runner", "in_store": 4, "price": 35.5,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert (body["in_store"], body["hired"], body["damaged"]) == (4, 0, 0)
        assert body["price"] == 35.5

        listed = client.get("/api/inventory?category=runners", headers=auth_headers).get_json()
        assert [i["item_name"] for i in listed] == ["Gold Table Runner"]
        assert client.get("/api/inventory?category=drops", headers=auth_headers).get_json() == []

    def test_add_invalid(self, client, auth_headers):
        resp = client.post("/api/inventory", headers=auth_headers, json={"category": "runners", "item_name": "", "price": 1})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["kind"] == "validation"
        assert body["details"][0]["loc"] == "item_name"

    def test_get_missing_item(self, client, auth_headers):
        resp = client.get("/api/inventory/999", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.get_json()["kind"] == "not_found"

    def test_action_moves_one_unit(self, client, auth_headers, tenant, make_item, counters):
        item_id = make_item(tenant["id"], in_store=2)
        resp = client.post(f"/api/inventory/{item_id}/hire", headers=auth_headers)
        assert resp.status_code == 200
        assert (resp.get_json()["in_store"], resp.get_json()["hired"]) == (1, 1)
        assert counters(item_id) == (1, 1, 0)

    def test_action_route_accepts_any_case(self, client, auth_headers, tenant, make_item, counters):
        item_id = make_item(tenant["id"], in_store=1)
        assert client.post(f"/api/inventory/{item_id}/Damage", headers=auth_headers).status_code == 200
        assert counters(item_id) == (0, 0, 1)

    def test_action_precondition_failure(self, client, auth_headers, tenant, make_item, counters):
        item_id = make_item(tenant["id"], in_store=0, hired=2)
        resp = client.post(f"/api/inventory/{item_id}/hire", headers=auth_headers)
        assert resp.status_code == 409
        assert resp.get_json() == {
            "error": "No items available to hire",
            "kind": "precondition_failed",
            "action": "hire",
            "counter": "in_store",
        }
        assert counters(item_id) == (0, 2, 0)

    def test_unknown_action(self, client, auth_headers, tenant, make_item):
        item_id = make_item(tenant["id"])
        resp = client.post(f"/api/inventory/{item_id}/sell", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json()["allowed"] == ["damage", "hire", "repair", "return"]

    def test_action_on_other_tenants_item(self, client, auth_headers, other_tenant, make_item, counters):
        item_id = make_item(other_tenant["id"], in_store=3)
        assert client.post(f"/api/inventory/{item_id}/hire", headers=auth_headers).status_code == 404
        assert counters(item_id) == (3, 0, 0)

    def test_direct_edit(self, client, auth_headers, tenant, make_item, counters):
        item_id = make_item(tenant["id"], in_store=2)
        resp = client.patch(f"/api/inventory/{item_id}", headers=auth_headers, json={"damaged": 5})
        assert resp.status_code == 200
        assert counters(item_id) == (2, 0, 5)
        assert client.patch(f"/api/inventory/{item_id}", headers=auth_headers, json={"in_store": -3}).status_code == 400

    def test_categories_and_report(self, client, auth_headers, tenant, make_item):
        make_item(tenant["id"], category="runners", item_name="A")
        make_item(tenant["id"], category="custom_props", item_name="B")
        assert client.get("/api/categories", headers=auth_headers).get_json() == ["custom_props", "runners"]

        report = client.get("/api/categories/report", headers=auth_headers).get_json()
        assert report["extra"] == ["custom_props"]
        assert "runners" not in report["missing"]
        assert "drops" in report["missing"]
        assert report["complete"] is False


@pytest.mark.integration
class TestRequirementRoutes:

    def test_add_accumulates_and_lists(self, client, auth_headers, tenant, customer, make_item):
        item_id = make_item(tenant["id"], price=20)
        body = {"customer_id": customer, "decor_item_id": item_id, "quantity_required": 3}
        first = client.post("/api/requirements", headers=auth_headers, json=body).get_json()
        body["quantity_required"] = 2
        second = client.post("/api/requirements", headers=auth_headers, json=body).get_json()
        assert second["id"] == first["id"]
        assert second["quantity_required"] == 5

        rows = client.get(f"/api/requirements?customer_id={customer}", headers=auth_headers).get_json()
        assert len(rows) == 1
        assert rows[0]["customer_name"] == "Jane Wanjiru"

        total = client.get(f"/api/requirements/total?customer_id={customer}", headers=auth_headers).get_json()
        assert total == {"customer_id": customer, "count": 1, "total_value": 100.0}

    def test_bad_customer_filter(self, client, auth_headers):
        resp = client.get("/api/requirements?customer_id=abc", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid customer_id"

    def test_update_and_delete(self, client, auth_headers, tenant, customer, make_item):
        item_id = make_item(tenant["id"])
        req = client.post("/api/requirements", headers=auth_headers,
                          json={"customer_id": customer, "decor_item_id": item_id}).get_json()

        resp = client.patch(f"/api/requirements/{req['id']}", headers=auth_headers, json={"status": "delivered"})
        assert resp.get_json()["status"] == "delivered"
        assert client.patch(f"/api/requirements/{req['id']}", headers=auth_headers,
                            json={"status": "lost"}).status_code == 400

        assert client.delete(f"/api/requirements/{req['id']}", headers=auth_headers).get_json() == {"ok": True}
        assert client.delete(f"/api/requirements/{req['id']}", headers=auth_headers).status_code == 404
        assert client.get("/api/requirements", headers=auth_headers).get_json() == []


@pytest.mark.integration
class TestAllocationRoutes:

    def test_save_then_read_month(self, client, auth_headers):
        rows = [
            {"row_number": 1, "customer_name": "Smith", "arc": 2, "fairy_lights": 10},
            {"row_number": 2, "customer_name": ""},
        ]
        resp = client.put("/api/allocations/2024/3", headers=auth_headers, json=rows)
        assert resp.status_code == 200
        saved = resp.get_json()
        assert [(r["row_number"], r["customer_name"], r["month"]) for r in saved] == [(1, "Smith", 3)]

        resp = client.put("/api/allocations/2024/3", headers=auth_headers,
                          json={"rows": [{"row_number": 5, "customer_name": "Jones", "arc": 1}]})
        assert [r["row_number"] for r in resp.get_json()] == [5]

        listed = client.get("/api/allocations/2024/3", headers=auth_headers).get_json()
        assert [(r["row_number"], r["customer_name"]) for r in listed] == [(5, "Jones")]

        totals = client.get("/api/allocations/2024/3/totals", headers=auth_headers).get_json()
        assert totals["arc"] == 1
        assert totals["fairy_lights"] == 0

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, client, auth_headers, month):
        assert client.get(f"/api/allocations/2024/{month}", headers=auth_headers).status_code == 400
        assert client.put(f"/api/allocations/2024/{month}", headers=auth_headers, json=[]).status_code == 400

    def test_upsert_single_row(self, client, auth_headers):
        row = {"month": 7, "year": 2024, "row_number": 1, "customer_name": "Otieno", "photobooth": 1}
        first = client.post("/api/allocations", headers=auth_headers, json=row).get_json()
        row["photobooth"] = 2
        second = client.post("/api/allocations", headers=auth_headers, json=row).get_json()
        assert second["id"] == first["id"]
        assert second["photobooth"] == 2

    def test_tenants_do_not_see_each_others_grid(self, client, auth_headers, other_tenant):
        client.put("/api/allocations/2024/3", headers=auth_headers,
                   json=[{"row_number": 1, "customer_name": "Smith"}])
        resp = client.post("/api/login", json={"tenant": "rival", "password": other_tenant["password"]})
        rival = {"Authorization": f"Bearer {resp.get_json()['token']}"}
        assert client.get("/api/allocations/2024/3", headers=rival).get_json() == []

    @pytest.mark.parametrize("kwargs", [
        {"json": {"row": [{"row_number": 2, "customer_name": "New"}]}},
        {"json": {}},
        {"json": "oops"},
        {"json": 42},
        {"data": "null", "content_type": "application/json"},
        {"data": "not json", "content_type": "application/json"},
    ])
    def test_malformed_month_body_is_rejected(self, client, auth_headers, kwargs):
        client.put("/api/allocations/2024/3", headers=auth_headers,
                   json=[{"row_number": 1, "customer_name": "Kept"}])
        resp = client.put("/api/allocations/2024/3", headers=auth_headers, **kwargs)
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "validation"
        listed = client.get("/api/allocations/2024/3", headers=auth_headers).get_json()
        assert [r["customer_name"] for r in listed] == ["Kept"]

    def test_explicit_empty_rows_clear_the_month(self, client, auth_headers):
        client.put("/api/allocations/2024/3", headers=auth_headers,
                   json=[{"row_number": 1, "customer_name": "Smith"}])
        resp = client.put("/api/allocations/2024/3", headers=auth_headers, json={"rows": []})
        assert resp.status_code == 200
        assert resp.get_json() == []

    def test_oversized_grid_quantity(self, client, auth_headers):
        resp = client.post("/api/allocations", headers=auth_headers, json={
            "month": 7, "year": 2024, "row_number": 1, "customer_name": "Otieno", "arc": 2**63,
        })
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "validation"


@pytest.mark.integration
@pytest.mark.parametrize("payload", [
    {"category": "runners", "item_name": "X", "in_store": 2**63, "price": 1},
    {"category": "runners", "item_name": "X", "in_store": 2**31, "price": 1},
    {"category": "runners", "item_name": "X", "price": "1.999"},
    {"category": "runners", "item_name": "X", "price": 10**9},
])
def test_out_of_range_item_fields_are_validation_errors(client, auth_headers, payload):
    resp = client.post("/api/inventory", headers=auth_headers, json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "validation"
    assert client.get("/api/inventory", headers=auth_headers).get_json() == []


@pytest.mark.integration
def test_oversized_direct_edit_is_rejected(client, auth_headers, tenant, make_item, counters):
    item_id = make_item(tenant["id"], in_store=2)
    resp = client.patch(f"/api/inventory/{item_id}", headers=auth_headers, json={"hired": 2**63})
    assert resp.status_code == 400
    assert counters(item_id) == (2, 0, 0)
