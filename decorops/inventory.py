# decorops/inventory.py
"""
Decor inventory store and its allocation state machine.

Every unit of stock is in exactly one of three counters: ``in_store``,
``hired`` or ``damaged``. :func:`apply_action` moves one unit between two
counters with a single conditional UPDATE, so the sum of the counters never
changes and a counter never drops below zero, even when several requests act
on the same item at once.

:func:`update_item` is the unchecked escape hatch for bulk corrections: it
writes whatever non-negative values it is given.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, update

from .constants import ACTIONS, EXPECTED_CATEGORIES
from .errors import NotFound, PreconditionFailed, ValidationFailed, retry_on_conflict, translate_db_errors
from .models import InventoryItem
from .schemas import ItemCreate, ItemUpdate, parse

logger = logging.getLogger(__name__)

def item_to_dict(it: InventoryItem) -> dict:
    return {
        "id": it.id,
        "category": it.category,
        "item_name": it.item_name,
        "in_store": it.in_store,
        "hired": it.hired,
        "damaged": it.damaged,
        "total_stock": it.total_stock,
        "price": float(it.price or 0),
        "created_at": it.created_at.isoformat() if it.created_at else None,
        "updated_at": it.updated_at.isoformat() if it.updated_at else None,
    }

def get_item(s, tenant_id: int, item_id: int) -> InventoryItem:
    it = s.execute(
        select(InventoryItem).where(InventoryItem.id == item_id, InventoryItem.user_id == tenant_id)
    ).scalar_one_or_none()
    if it is None:
        logger.warning("decor item %s not found for tenant %s", item_id, tenant_id)
        raise NotFound(f"Decor item {item_id} not found")
    return it

def list_items(s, tenant_id: int, category: Optional[str] = None) -> List[InventoryItem]:
    q = select(InventoryItem).where(InventoryItem.user_id == tenant_id)
    if category:
        q = q.where(InventoryItem.category == category)
    q = q.order_by(InventoryItem.category.asc(), InventoryItem.item_name.asc(), InventoryItem.id.asc())
    return list(s.execute(q).scalars().all())

def list_categories(s, tenant_id: int) -> List[str]:
    rows = s.execute(
        select(InventoryItem.category)
        .where(InventoryItem.user_id == tenant_id)
        .distinct()
        .order_by(InventoryItem.category.asc())
    ).scalars().all()
    return list(rows)

def category_report(categories: Iterable[str], expected: Iterable[str] = EXPECTED_CATEGORIES) -> dict:
    """Compare present categories with the predefined list. Informational only."""
    present, wanted = set(categories), set(expected)
    return {
        "categories": sorted(present),
        "missing": sorted(wanted - present),
        "extra": sorted(present - wanted),
        "complete": wanted <= present,
    }

def add_item(s, tenant_id: int, data: Any) -> InventoryItem:
    payload = parse(ItemCreate, data)
    now = datetime.utcnow()
    it = InventoryItem(
        user_id=tenant_id,
        category=payload.category,
        item_name=payload.item_name,
        in_store=payload.in_store,
        hired=0,
        damaged=0,
        price=payload.price,
        created_at=now,
        updated_at=now,
    )
    with translate_db_errors(s, "add decor item"):
        s.add(it)
        s.commit()
    logger.info("tenant %s added decor item %s (%s/%s, in_store=%s)",
                tenant_id, it.id, it.category, it.item_name, it.in_store)
    return it

def update_item(s, tenant_id: int, item_id: int, patch: Any) -> InventoryItem:
    fields = parse(ItemUpdate, patch).model_dump(exclude_unset=True)
    it = get_item(s, tenant_id, item_id)
    if not fields:
        return it
    for key, value in fields.items():
        setattr(it, key, value)
    it.updated_at = datetime.utcnow()
    with translate_db_errors(s, "update decor item"):
        s.commit()
    logger.info("tenant %s edited decor item %s directly: %s", tenant_id, item_id, sorted(fields))
    return it

@retry_on_conflict
def apply_action(s, tenant_id: int, item_id: int, action: str) -> InventoryItem:
    """Move one unit of `item_id` according to `action`.

    Raises ValidationFailed for an unknown action, NotFound when the item is
    not the tenant's, and PreconditionFailed when the source counter is 0.
    """
    try:
        src, dst, refusal = ACTIONS[action]
    except KeyError:
        raise ValidationFailed(
            f"Unknown action '{action}'", allowed=sorted(ACTIONS)
        ) from None

    src_col = getattr(InventoryItem, src)
    dst_col = getattr(InventoryItem, dst)
    stmt = (
        update(InventoryItem)
        .where(InventoryItem.id == item_id, InventoryItem.user_id == tenant_id, src_col > 0)
        .values({src: src_col - 1, dst: dst_col + 1, "updated_at": datetime.utcnow()})
        .execution_options(synchronize_session=False)
    )
    with translate_db_errors(s, f"{action} decor item"):
        res = s.execute(stmt)
        if res.rowcount != 1:
            s.rollback()
            get_item(s, tenant_id, item_id)
            logger.warning("tenant %s: %s rejected for item %s (%s is 0)", tenant_id, action, item_id, src)
            raise PreconditionFailed(refusal, action=action, counter=src)
        s.commit()

    it = get_item(s, tenant_id, item_id)
    s.refresh(it)
    logger.info("tenant %s: %s item %s -> in_store=%s hired=%s damaged=%s",
                tenant_id, action, item_id, it.in_store, it.hired, it.damaged)
    return it
