"""Payout request records (developer asks to release escrowed funds of an order)."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from .base import Base, IdField, ref_id


class PayoutStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Developer(Base):
    id: str | None = IdField(default=None)
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    email: str | None = None
    paypal_email: str | None = None

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return self.company_name or full or "Unknown"


class PayoutRequest(Base):
    id: str = IdField()
    order_id: str | None = None
    amount: Decimal = Decimal("0")
    status: PayoutStatus = PayoutStatus.PENDING
    requested_at: datetime
    processed_at: datetime | None = None
    admin_notes: str | None = None
    paypal_payout_id: str | None = None
    paypal_email: str | None = None

    # Populated only in admin listings
    order_title: str | None = None
    developer: Developer | None = Field(
        default=None, validation_alias=AliasChoices("developerId", "developer")
    )

    @model_validator(mode="before")
    @classmethod
    def unpack_populated_order(cls, data: Any) -> Any:
        """Backend may populate `orderId` with the whole order document."""
        if isinstance(data, dict) and isinstance(data.get("orderId"), dict):
            data = dict(data)
            order = data["orderId"]
            data.setdefault("orderTitle", order.get("title"))
            data["orderId"] = ref_id(order)
        return data

    @field_validator("order_id", mode="before")
    @classmethod
    def normalize_order_id(cls, v: Any) -> Any:
        v = ref_id(v)
        return str(v) if v is not None else None

    @field_validator("developer", mode="before")
    @classmethod
    def drop_unpopulated_developer(cls, v: Any) -> Any:
        # A bare id string carries nothing to display
        return v if isinstance(v, dict | Developer) else None

    def __repr__(self) -> str:
        return (
            f"<PayoutRequest(id={self.id}, order_id={self.order_id}, "
            f"status='{self.status.value}')>"
        )
