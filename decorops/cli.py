# decorops/cli.py
from __future__ import annotations
import argparse
import secrets
from typing import Optional
from sqlalchemy import select
from .db import SessionLocal, init_db
from .models import Tenant, Customer, InventoryItem
from .auth import hash_password, normalise_tenant_name
from .constants import STARTER_ITEMS

def _find_tenant(s, name: str) -> Optional[Tenant]:
    return s.execute(
        select(Tenant).where(Tenant.name == normalise_tenant_name(name))
    ).scalar_one_or_none()

def _tenant(s, name: str) -> Tenant:
    t = _find_tenant(s, name)
    if t is None:
        raise SystemExit(f"Tenant '{normalise_tenant_name(name)}' not found.")
    return t

def _set_credentials(t: Tenant, password: str) -> None:
    # A fresh salt revokes every token issued under the old one.
    t.password_hash = hash_password(password)
    t.token_salt = secrets.token_hex(8)

def add_tenant(name: str, password: str):
    """Create the tenant, or reset its password if it already exists."""
    with SessionLocal() as s:
        t = _find_tenant(s, name)
        created = t is None
        if created:
            t = Tenant(name=normalise_tenant_name(name))
            s.add(t)
        _set_credentials(t, password)
        s.commit()
        print(f"{'Added' if created else 'Updated'} tenant: {t.name}")

def reset_tenant_password(name: str, password: str):
    with SessionLocal() as s:
        t = _tenant(s, name)
        _set_credentials(t, password)
        s.commit()
        print(f"Password reset for tenant: {t.name}")

def delete_tenant(name: str):
    with SessionLocal() as s:
        t = _tenant(s, name)
        tname = t.name
        # ORM cascade removes customers, inventory, requirements and allocations
        s.delete(t)
        s.commit()
        print(f"Deleted tenant: {tname}")

def add_customer(tenant: str, customer_name: str):
    with SessionLocal() as s:
        t = _tenant(s, tenant)
        c = Customer(user_id=t.id, name=customer_name.strip())
        s.add(c)
        s.commit()
        print(f"Added customer {c.id}: {c.name}")

def seed_inventory(tenant: str):
    """Add one zero-stock starter item per predefined category that has none."""
    with SessionLocal() as s:
        t = _tenant(s, tenant)
        present = set(s.execute(
            select(InventoryItem.category).where(InventoryItem.user_id == t.id).distinct()
        ).scalars())
        added = 0
        for category, item_name in STARTER_ITEMS.items():
            if category in present:
                continue
            s.add(InventoryItem(user_id=t.id, category=category, item_name=item_name,
                                in_store=0, hired=0, damaged=0, price=0))
            added += 1
        s.commit()
        print(f"Seeded {added} starter item(s) for tenant: {t.name}")

def main(argv=None):
    parser = argparse.ArgumentParser(prog="decorops")
    sub = parser.add_subparsers(dest="cmd", required=True)
    a = sub.add_parser("add-tenant", help="Create or update (upsert) a tenant with the given password")
    a.add_argument("name")
    a.add_argument("password")
    r = sub.add_parser("reset-tenant-password", help="Update password for an existing tenant")
    r.add_argument("name")
    r.add_argument("password")
    d = sub.add_parser("delete-tenant", help="Delete a tenant (and cascade its data)")
    d.add_argument("name")
    c = sub.add_parser("add-customer", help="Register a customer under a tenant")
    c.add_argument("tenant")
    c.add_argument("customer_name")
    sd = sub.add_parser("seed-inventory", help="Add starter items for missing predefined categories")
    sd.add_argument("tenant")
    args = parser.parse_args(argv)

    init_db()

    if args.cmd == "add-tenant":
        add_tenant(args.name, args.password)
    elif args.cmd == "reset-tenant-password":
        reset_tenant_password(args.name, args.password)
    elif args.cmd == "delete-tenant":
        delete_tenant(args.name)
    elif args.cmd == "add-customer":
        add_customer(args.tenant, args.customer_name)
    elif args.cmd == "seed-inventory":
        seed_inventory(args.tenant)

if __name__ == "__main__":
    main()
