# decorops/requirements.py
"""Per-customer demand for decor items. Demand never reserves stock."""
from __future__ import annotations
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite

from .errors import NotFound, retry_on_conflict, translate_db_errors
from .models import Customer, CustomerRequirement, InventoryItem
from .schemas import RequirementCreate, RequirementUpdate, parse

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}
_BUSINESS_KEY = ["user_id", "customer_id", "decor_item_id"]

def _get(s, tenant_id: int, requirement_id: int) -> CustomerRequirement:
    req = s.execute(
        select(CustomerRequirement).where(
            CustomerRequirement.id == requirement_id, CustomerRequirement.user_id == tenant_id
        )
    ).scalar_one_or_none()
    if req is None:
        logger.warning("requirement %s not found for tenant %s", requirement_id, tenant_id)
        raise NotFound(f"Requirement {requirement_id} not found")
    return req

def _by_key(s, tenant_id: int, customer_id: int, item_id: int) -> Optional[CustomerRequirement]:
    return s.execute(
        select(CustomerRequirement).where(
            CustomerRequirement.user_id == tenant_id,
            CustomerRequirement.customer_id == customer_id,
            CustomerRequirement.decor_item_id == item_id,
        )
    ).scalar_one_or_none()

def _check_refs(s, tenant_id: int, customer_id: int, item_id: int) -> None:
    if s.execute(select(Customer.id).where(Customer.id == customer_id, Customer.user_id == tenant_id)).first() is None:
        raise NotFound(f"Customer {customer_id} not found")
    if s.execute(select(InventoryItem.id).where(InventoryItem.id == item_id, InventoryItem.user_id == tenant_id)).first() is None:
        raise NotFound(f"Decor item {item_id} not found")

@retry_on_conflict
def add_requirement(s, tenant_id: int, data: Any) -> CustomerRequirement:
    """Record demand for (customer, item), adding to any existing quantity.

    One row per (tenant, customer, item): a repeated add increments
    ``quantity_required`` and keeps the current status.
    """
    payload = parse(RequirementCreate, data)
    _check_refs(s, tenant_id, payload.customer_id, payload.decor_item_id)
    now = datetime.utcnow()
    values = {
        "user_id": tenant_id,
        "customer_id": payload.customer_id,
        "decor_item_id": payload.decor_item_id,
        "quantity_required": payload.quantity_required,
        "status": "pending",
        "notes": payload.notes,
        "created_at": now,
        "updated_at": now,
    }
    insert = _UPSERT_INSERTS.get(s.get_bind().dialect.name)
    with translate_db_errors(s, "add requirement"):
        if insert is not None:
            stmt = insert(CustomerRequirement).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=_BUSINESS_KEY,
                set_={
                    "quantity_required": CustomerRequirement.quantity_required + stmt.excluded.quantity_required,
                    "notes": func.coalesce(stmt.excluded.notes, CustomerRequirement.notes),
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            s.execute(stmt)
        else:
            # No native upsert; a racing insert trips the unique key and is retried as an increment.
            existing = _by_key(s, tenant_id, payload.customer_id, payload.decor_item_id)
            if existing is not None:
                existing.quantity_required = CustomerRequirement.quantity_required + payload.quantity_required
                if payload.notes is not None:
                    existing.notes = payload.notes
                existing.updated_at = now
            else:
                s.add(CustomerRequirement(**values))
        s.commit()

    req = _by_key(s, tenant_id, payload.customer_id, payload.decor_item_id)
    s.refresh(req)
    logger.info("tenant %s: customer %s requires %s x item %s (total %s)",
                tenant_id, payload.customer_id, payload.quantity_required,
                payload.decor_item_id, req.quantity_required)
    return req

def update_requirement(s, tenant_id: int, requirement_id: int, patch: Any) -> CustomerRequirement:
    fields = parse(RequirementUpdate, patch).model_dump(exclude_unset=True)
    req = _get(s, tenant_id, requirement_id)
    if not fields:
        return req
    for key, value in fields.items():
        setattr(req, key, value)
    req.updated_at = datetime.utcnow()
    with translate_db_errors(s, "update requirement"):
        s.commit()
    logger.info("tenant %s updated requirement %s: %s", tenant_id, requirement_id, sorted(fields))
    return req

def remove_requirement(s, tenant_id: int, requirement_id: int) -> None:
    req = _get(s, tenant_id, requirement_id)
    with translate_db_errors(s, "remove requirement"):
        s.delete(req)
        s.commit()
    logger.info("tenant %s removed requirement %s", tenant_id, requirement_id)

def list_requirements(s, tenant_id: int, customer_id: Optional[int] = None) -> List[dict]:
    q = (
        select(CustomerRequirement, Customer.name, InventoryItem.item_name, InventoryItem.category, InventoryItem.price)
        .outerjoin(Customer, Customer.id == CustomerRequirement.customer_id)
        .outerjoin(InventoryItem, InventoryItem.id == CustomerRequirement.decor_item_id)
        .where(CustomerRequirement.user_id == tenant_id)
    )
    if customer_id is not None:
        q = q.where(CustomerRequirement.customer_id == customer_id)
    q = q.order_by(CustomerRequirement.created_at.desc(), CustomerRequirement.id.desc())
    return [
        {
            **requirement_to_dict(r),
            "customer_name": cname or "Unknown Client",
            "item_name": iname or "Unknown Item",
            "category": cat or "N/A",
            "price": float(price or 0),
        }
        for (r, cname, iname, cat, price) in s.execute(q).all()
    ]

def requirements_total(rows: Iterable[dict]) -> Decimal:
    """Value of the listed demand: sum of price x quantity_required."""
    total = Decimal("0")
    for r in rows:
        total += Decimal(str(r["price"])) * r["quantity_required"]
    return total.quantize(Decimal("0.01"))

def requirement_to_dict(r: CustomerRequirement) -> dict:
    return {
        "id": r.id,
        "customer_id": r.customer_id,
        "decor_item_id": r.decor_item_id,
        "quantity_required": r.quantity_required,
        "status": r.status,
        "notes": r.notes,
        "created_at": r.created_at.isoformat(),
        "updated_at": r.updated_at.isoformat(),
    }
