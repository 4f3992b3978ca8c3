# decorops/models.py
from __future__ import annotations
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric, Text, ForeignKey,
    UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from .constants import DECOR_COLUMNS
from .db import Base

class Tenant(Base):
    __tablename__ = "tenants"
    id = Column(Integer, primary_key=True)
    name = Column(String(128), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    token_salt = Column(String(64), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_seen_at = Column(DateTime, nullable=True)

    customers = relationship("Customer", back_populates="tenant", cascade="all,delete-orphan")
    items = relationship("InventoryItem", back_populates="tenant", cascade="all,delete-orphan")
    requirements = relationship("CustomerRequirement", cascade="all,delete-orphan")
    allocations = relationship("MonthlyAllocationRow", cascade="all,delete-orphan")

class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    tenant = relationship("Tenant", back_populates="customers")
    __table_args__ = (Index("ix_customers_user", "user_id"),)

class InventoryItem(Base):
    __tablename__ = "decor_inventory"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    category = Column(String(128), nullable=False)
    item_name = Column(String(200), nullable=False)
    in_store = Column(Integer, nullable=False, default=0)
    hired = Column(Integer, nullable=False, default=0)
    damaged = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    tenant = relationship("Tenant", back_populates="items")
    __table_args__ = (
        CheckConstraint("in_store >= 0", name="ck_decor_in_store_nonneg"),
        CheckConstraint("hired >= 0", name="ck_decor_hired_nonneg"),
        CheckConstraint("damaged >= 0", name="ck_decor_damaged_nonneg"),
        CheckConstraint("price >= 0", name="ck_decor_price_nonneg"),
        Index("ix_decor_user_category_name", "user_id", "category", "item_name"),
    )

    @property
    def total_stock(self) -> int:
        return self.in_store + self.hired + self.damaged

class CustomerRequirement(Base):
    __tablename__ = "customer_requirements"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    decor_item_id = Column(Integer, ForeignKey("decor_inventory.id", ondelete="CASCADE"), nullable=False)
    quantity_required = Column(Integer, nullable=False, default=1)
    status = Column(String(16), nullable=False, default="pending")  # pending|confirmed|delivered
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    customer = relationship("Customer")
    item = relationship("InventoryItem")
    __table_args__ = (
        UniqueConstraint("user_id", "customer_id", "decor_item_id", name="uq_requirement_user_customer_item"),
        CheckConstraint("quantity_required >= 1", name="ck_requirement_qty_positive"),
        Index("ix_requirements_user_customer", "user_id", "customer_id"),
    )

class MonthlyAllocationRow(Base):
    __tablename__ = "decor_allocations"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    row_number = Column(Integer, nullable=False)
    customer_name = Column(String(200), nullable=False)

    walkway_stands = Column(Integer, nullable=False, default=0)
    arc = Column(Integer, nullable=False, default=0)
    aisle_stands = Column(Integer, nullable=False, default=0)
    photobooth = Column(Integer, nullable=False, default=0)
    lecturn = Column(Integer, nullable=False, default=0)
    stage_boards = Column(Integer, nullable=False, default=0)
    backdrop_boards = Column(Integer, nullable=False, default=0)
    dance_floor = Column(Integer, nullable=False, default=0)
    walkway_boards = Column(Integer, nullable=False, default=0)
    white_sticker = Column(Integer, nullable=False, default=0)
    centerpieces = Column(Integer, nullable=False, default=0)
    glass_charger_plates = Column(Integer, nullable=False, default=0)
    melamine_charger_plates = Column(Integer, nullable=False, default=0)
    african_mats = Column(Integer, nullable=False, default=0)
    gold_napkin_holders = Column(Integer, nullable=False, default=0)
    silver_napkin_holders = Column(Integer, nullable=False, default=0)
    roof_top_decor = Column(Integer, nullable=False, default=0)
    parcan_lights = Column(Integer, nullable=False, default=0)
    revolving_heads = Column(Integer, nullable=False, default=0)
    fairy_lights = Column(Integer, nullable=False, default=0)
    snake_lights = Column(Integer, nullable=False, default=0)
    neon_lights = Column(Integer, nullable=False, default=0)
    small_chandeliers = Column(Integer, nullable=False, default=0)
    large_chandeliers = Column(Integer, nullable=False, default=0)
    african_lampshades = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("month", "year", "row_number", "user_id", name="uq_alloc_month_year_row_user"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_alloc_month_range"),
        *(CheckConstraint(f"{c} >= 0", name=f"ck_alloc_{c}_nonneg") for c in DECOR_COLUMNS),
        Index("ix_alloc_user_month_year", "user_id", "month", "year"),
    )
