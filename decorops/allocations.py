# decorops/allocations.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List

from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite

from .constants import DECOR_COLUMNS
from .errors import ValidationFailed, translate_db_errors
from .models import MonthlyAllocationRow
from .schemas import AllocationUpsert, MonthBatch, check_month, parse

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}

def row_to_dict(r: MonthlyAllocationRow) -> dict:
    out = {
        "id": r.id,
        "month": r.month,
        "year": r.year,
        "row_number": r.row_number,
        "customer_name": r.customer_name,
    }
    for c in DECOR_COLUMNS:
        out[c] = getattr(r, c)
    out["updated_at"] = r.updated_at.isoformat() if r.updated_at else None
    return out

def list_month(s, tenant_id: int, month: int, year: int) -> List[MonthlyAllocationRow]:
    # Months are 1-12 on every path; nothing here shifts them.
    check_month(month, year)
    q = (
        select(MonthlyAllocationRow)
        .where(
            MonthlyAllocationRow.user_id == tenant_id,
            MonthlyAllocationRow.month == month,
            MonthlyAllocationRow.year == year,
        )
        .order_by(MonthlyAllocationRow.row_number.asc())
    )
    return list(s.execute(q).scalars().all())

def _parse_batch(rows: Any) -> MonthBatch:
    # A bare list or {"rows": [...]}; anything else is refused before the month is touched.
    if isinstance(rows, (list, tuple)):
        return parse(MonthBatch, {"rows": list(rows)})
    if isinstance(rows, dict):
        return parse(MonthBatch, rows)
    raise ValidationFailed(
        "Expected a list of rows or an object with a 'rows' list",
        got="null" if rows is None else type(rows).__name__,
    )

def save_month(s, tenant_id: int, month: int, year: int, rows: Any) -> List[MonthlyAllocationRow]:
    """Replace the whole (tenant, month, year) batch with the named rows.

    Rows with a blank customer name are dropped. Anything persisted before for
    that month and not resubmitted is gone afterwards. Delete and insert
    commit together or not at all.
    """
    check_month(month, year)
    batch = _parse_batch(rows)

    seen = set()
    for r in batch.rows:
        if r.row_number in seen:
            raise ValidationFailed(f"row_number {r.row_number} appears more than once")
        seen.add(r.row_number)

    keep = [r for r in batch.rows if not r.is_blank]
    now = datetime.utcnow()
    with translate_db_errors(s, "save monthly allocations"):
        s.execute(
            delete(MonthlyAllocationRow)
            .where(
                MonthlyAllocationRow.user_id == tenant_id,
                MonthlyAllocationRow.month == month,
                MonthlyAllocationRow.year == year,
            )
        )
        s.add_all([
            MonthlyAllocationRow(
                user_id=tenant_id,
                month=month,
                year=year,
                row_number=r.row_number,
                customer_name=r.customer_name,
                created_at=now,
                updated_at=now,
                **r.quantities(),
            )
            for r in keep
        ])
        s.commit()
    logger.info("tenant %s saved %d/%d allocation rows for %04d-%02d",
                tenant_id, len(keep), len(batch.rows), year, month)
    return list_month(s, tenant_id, month, year)

def upsert_row(s, tenant_id: int, data: Any) -> MonthlyAllocationRow:
    """Insert or overwrite a single row keyed on (month, year, row_number, tenant)."""
    row = parse(AllocationUpsert, data)
    now = datetime.utcnow()
    values = {
        "user_id": tenant_id,
        "month": row.month,
        "year": row.year,
        "row_number": row.row_number,
        "customer_name": row.customer_name,
        "created_at": now,
        "updated_at": now,
        **row.quantities(),
    }
    insert = _UPSERT_INSERTS.get(s.get_bind().dialect.name)
    with translate_db_errors(s, "upsert allocation row"):
        if insert is not None:
            stmt = insert(MonthlyAllocationRow).values(**values)
            overwrite = {k: stmt.excluded[k] for k in values if k not in ("user_id", "month", "year", "row_number", "created_at")}
            stmt = stmt.on_conflict_do_update(
                index_elements=["month", "year", "row_number", "user_id"],
                set_=overwrite,
            )
            s.execute(stmt)
        else:
            existing = _get_row(s, tenant_id, row.month, row.year, row.row_number)
            if existing is None:
                s.add(MonthlyAllocationRow(**values))
            else:
                for k, v in values.items():
                    if k != "created_at":
                        setattr(existing, k, v)
        s.commit()
    saved = _get_row(s, tenant_id, row.month, row.year, row.row_number)
    s.refresh(saved)
    logger.info("tenant %s upserted allocation row %s for %04d-%02d",
                tenant_id, row.row_number, row.year, row.month)
    return saved

def _get_row(s, tenant_id: int, month: int, year: int, row_number: int):
    return s.execute(
        select(MonthlyAllocationRow).where(
            MonthlyAllocationRow.user_id == tenant_id,
            MonthlyAllocationRow.month == month,
            MonthlyAllocationRow.year == year,
            MonthlyAllocationRow.row_number == row_number,
        )
    ).scalar_one_or_none()

def column_totals(rows: Iterable[MonthlyAllocationRow]) -> Dict[str, int]:
    totals = dict.fromkeys(DECOR_COLUMNS, 0)
    for r in rows:
        for c in DECOR_COLUMNS:
            totals[c] += getattr(r, c) or 0
    return totals
