"""Chat list entries: a developer's conversations grouped by client."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class OrderEntry(BaseModel):
    order_id: str
    order_title: str = ""
    order_status: str
    order_amount: Decimal = Decimal("0")
    service_id: str
    service_title: str = ""
    service_category: str = ""
    paid_at: datetime | None = None


class ServiceInquiry(BaseModel):
    """A client who messaged about a service without buying it."""

    service_id: str
    service_title: str = ""
    service_category: str = ""
    has_unread: bool = False
    unread_count: int = 0


class GroupedChat(BaseModel):
    client_id: str
    client_name: str
    client_email: str = ""
    client_type: Literal["User", "Company"] = "User"
    orders: list[OrderEntry] = Field(default_factory=list)
    inquiries: list[ServiceInquiry] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    unread_count: int = 0
    last_message_time: datetime | None = None
    primary_service_id: str
    has_paid_orders: bool = False
    # All service ids of this client, used to mark everything as read at once
    all_service_ids: list[str] = Field(default_factory=list)
