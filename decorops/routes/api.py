# decorops/routes/api.py
from __future__ import annotations
import logging
from flask import Blueprint, jsonify, request, abort
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from ..db import SessionLocal
from ..schemas import LoginRequest, TokenResponse, parse
from ..auth import authenticate, issue_token, normalise_tenant_name, require_tenant
from ..config import config
from ..errors import DecorError
from .. import inventory, requirements, allocations

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")
# Create the limiter here; app binding happens in app.py via limiter.init_app(app)
limiter: Limiter = Limiter(key_func=get_remote_address)

def _json_body() -> dict:
    return request.get_json(force=True, silent=True) or {}

def _int_arg(name: str):
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        abort(400, description=f"Invalid {name}")

@api.errorhandler(DecorError)
def _decor_error(exc: DecorError):
    return jsonify(exc.to_dict()), exc.status

@api.errorhandler(400)
@api.errorhandler(401)
@api.errorhandler(404)
@api.errorhandler(405)
@api.errorhandler(429)
def _http_error(exc):
    return jsonify({"error": getattr(exc, "description", str(exc))}), exc.code

@api.post("/login")
@limiter.limit(lambda: config.LOGIN_RATE)
def login():
    data = parse(LoginRequest, _json_body())
    with SessionLocal() as s:
        t = authenticate(s, data.tenant, data.password)
        if t is None:
            logger.warning("failed login for tenant %s", normalise_tenant_name(data.tenant))
            abort(401, description="Invalid tenant or password")
        token = issue_token(t.id, t.token_salt or "")
        s.commit()
        return jsonify(TokenResponse(token=token).model_dump())

# --- inventory ---

@api.get("/inventory")
def list_inventory():
    tenant_id = require_tenant()
    category = (request.args.get("category") or "").strip() or None
    with SessionLocal() as s:
        rows = inventory.list_items(s, tenant_id, category)
        return jsonify([inventory.item_to_dict(r) for r in rows])

@api.post("/inventory")
@limiter.limit(lambda: config.ACTION_RATE)
def add_inventory_item():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        it = inventory.add_item(s, tenant_id, _json_body())
        return jsonify(inventory.item_to_dict(it)), 201

@api.get("/inventory/<int:item_id>")
def get_inventory_item(item_id: int):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        return jsonify(inventory.item_to_dict(inventory.get_item(s, tenant_id, item_id)))

@api.patch("/inventory/<int:item_id>")
@limiter.limit(lambda: config.ACTION_RATE)
def edit_inventory_item(item_id: int):
    # Direct edit for corrections; use the action route for hire/return/damage/repair.
    tenant_id = require_tenant()
    with SessionLocal() as s:
        it = inventory.update_item(s, tenant_id, item_id, _json_body())
        return jsonify(inventory.item_to_dict(it))

@api.post("/inventory/<int:item_id>/<action>")
@limiter.limit(lambda: config.ACTION_RATE)
def inventory_action(item_id: int, action: str):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        it = inventory.apply_action(s, tenant_id, item_id, action.lower())
        return jsonify(inventory.item_to_dict(it))

@api.get("/categories")
def list_categories():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        return jsonify(inventory.list_categories(s, tenant_id))

@api.get("/categories/report")
def categories_report():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        return jsonify(inventory.category_report(inventory.list_categories(s, tenant_id)))

# --- requirements ---

@api.get("/requirements")
def list_requirements():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        return jsonify(requirements.list_requirements(s, tenant_id, _int_arg("customer_id")))

@api.get("/requirements/total")
def requirements_total():
    tenant_id = require_tenant()
    customer_id = _int_arg("customer_id")
    with SessionLocal() as s:
        rows = requirements.list_requirements(s, tenant_id, customer_id)
        return jsonify({
            "customer_id": customer_id,
            "count": len(rows),
            "total_value": float(requirements.requirements_total(rows)),
        })

@api.post("/requirements")
@limiter.limit(lambda: config.ACTION_RATE)
def add_requirement():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        req = requirements.add_requirement(s, tenant_id, _json_body())
        return jsonify(requirements.requirement_to_dict(req))

@api.patch("/requirements/<int:requirement_id>")
@limiter.limit(lambda: config.ACTION_RATE)
def update_requirement(requirement_id: int):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        req = requirements.update_requirement(s, tenant_id, requirement_id, _json_body())
        return jsonify(requirements.requirement_to_dict(req))

@api.delete("/requirements/<int:requirement_id>")
@limiter.limit(lambda: config.ACTION_RATE)
def remove_requirement(requirement_id: int):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        requirements.remove_requirement(s, tenant_id, requirement_id)
        return jsonify({"ok": True})

# --- monthly allocation grid (months are 1-12) ---

@api.get("/allocations/<int:year>/<int:month>")
def list_allocations(year: int, month: int):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        rows = allocations.list_month(s, tenant_id, month, year)
        return jsonify([allocations.row_to_dict(r) for r in rows])

@api.put("/allocations/<int:year>/<int:month>")
@limiter.limit(lambda: config.ACTION_RATE)
def save_allocations(year: int, month: int):
    tenant_id = require_tenant()
    # Unparseable JSON arrives as None and is rejected like any other malformed body.
    body = request.get_json(force=True, silent=True)
    with SessionLocal() as s:
        rows = allocations.save_month(s, tenant_id, month, year, body)
        return jsonify([allocations.row_to_dict(r) for r in rows])

@api.post("/allocations")
@limiter.limit(lambda: config.ACTION_RATE)
def upsert_allocation():
    tenant_id = require_tenant()
    with SessionLocal() as s:
        row = allocations.upsert_row(s, tenant_id, _json_body())
        return jsonify(allocations.row_to_dict(row))

@api.get("/allocations/<int:year>/<int:month>/totals")
def allocation_totals(year: int, month: int):
    tenant_id = require_tenant()
    with SessionLocal() as s:
        return jsonify(allocations.column_totals(allocations.list_month(s, tenant_id, month, year)))
