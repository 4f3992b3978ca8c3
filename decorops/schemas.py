# decorops/schemas.py
from __future__ import annotations
from decimal import Decimal
from typing import Any, List, Optional, Literal, Type, TypeVar
from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model, field_validator

from .constants import (
    DECOR_COLUMNS, MAX_CATEGORY_LENGTH, MAX_ITEM_NAME_LENGTH, MAX_CUSTOMER_NAME_LENGTH,
    MIN_MONTH, MAX_MONTH, MAX_INT,
)
from .errors import ValidationFailed

Status = Literal["pending", "confirmed", "delivered"]
M = TypeVar("M", bound=BaseModel)

def parse(schema: Type[M], data: Any) -> M:
    """Validate `data` against `schema`, reporting failures as ValidationFailed."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data if data is not None else {})
    except ValidationError as exc:
        details = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise ValidationFailed("Validation failed", details=details) from exc

def check_month(month: int, year: int) -> None:
    if not (MIN_MONTH <= month <= MAX_MONTH):
        raise ValidationFailed(f"month must be between {MIN_MONTH} and {MAX_MONTH}, got {month}")
    if not (1 <= year <= 9999):
        raise ValidationFailed(f"year must be between 1 and 9999, got {year}")

class LoginRequest(BaseModel):
    tenant: str
    password: str

class TokenResponse(BaseModel):
    token: str

# --- inventory ---

class ItemCreate(BaseModel):
    category: str = Field(..., max_length=MAX_CATEGORY_LENGTH)
    item_name: str = Field(..., max_length=MAX_ITEM_NAME_LENGTH)
    in_store: int = Field(0, ge=0, le=MAX_INT)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    @field_validator("category", "item_name")
    @classmethod
    def _required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

class ItemUpdate(BaseModel):
    """Direct field edit. Counters are set as given; conservation is not checked."""
    model_config = ConfigDict(extra="forbid")

    category: Optional[str] = Field(None, max_length=MAX_CATEGORY_LENGTH)
    item_name: Optional[str] = Field(None, max_length=MAX_ITEM_NAME_LENGTH)
    in_store: Optional[int] = Field(None, ge=0, le=MAX_INT)
    hired: Optional[int] = Field(None, ge=0, le=MAX_INT)
    damaged: Optional[int] = Field(None, ge=0, le=MAX_INT)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("category", "item_name")
    @classmethod
    def _text(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("in_store", "hired", "damaged", "price")
    @classmethod
    def _no_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

# --- requirements ---

class RequirementCreate(BaseModel):
    customer_id: int = Field(..., ge=1, le=MAX_INT)
    decor_item_id: int = Field(..., ge=1, le=MAX_INT)
    quantity_required: int = Field(1, ge=1, le=MAX_INT)
    notes: Optional[str] = None

class RequirementUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[Status] = None
    quantity_required: Optional[int] = Field(None, ge=1, le=MAX_INT)
    notes: Optional[str] = None

    @field_validator("status", "quantity_required")
    @classmethod
    def _no_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

# --- monthly allocation grid ---

class _AllocationRowBase(BaseModel):
    row_number: int = Field(..., ge=1, le=MAX_INT)
    customer_name: str = Field("", max_length=MAX_CUSTOMER_NAME_LENGTH)

    @field_validator("customer_name", mode="before")
    @classmethod
    def _name(cls, v):
        return str(v or "").strip()

    @property
    def is_blank(self) -> bool:
        return not self.customer_name

    def quantities(self) -> dict:
        return {c: getattr(self, c) for c in DECOR_COLUMNS}

AllocationRow = create_model(
    "AllocationRow",
    __base__=_AllocationRowBase,
    **{c: (int, Field(0, ge=0, le=MAX_INT)) for c in DECOR_COLUMNS},
)

class AllocationUpsert(AllocationRow):
    month: int = Field(..., ge=MIN_MONTH, le=MAX_MONTH)
    year: int = Field(..., ge=1, le=9999)

    @field_validator("customer_name")
    @classmethod
    def _required_name(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

class MonthBatch(BaseModel):
    rows: List[AllocationRow]
