"""Client-side helpers for the admin payout requests list."""
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel

from app.models.payout import PayoutRequest, PayoutStatus

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total: int
    total_pages: int
    page_numbers: list[int]


class PayoutStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_pending_amount: Decimal = Decimal("0")
    total_approved_amount: Decimal = Decimal("0")


def filter_payouts(
    payouts: Iterable[PayoutRequest], search: str = "", status: str = "all"
) -> list[PayoutRequest]:
    """Фильтр по строке поиска (разработчик, email, PayPal, заказ) и статусу."""
    q = search.lower()
    result = []
    for p in payouts:
        haystack = [p.paypal_email or "", p.order_title or ""]
        if p.developer is not None:
            haystack += [p.developer.display_name, p.developer.email or ""]
        matches_search = any(q in value.lower() for value in haystack)
        matches_status = status == "all" or p.status.value == status
        if matches_search and matches_status:
            result.append(p)
    return result


def page_numbers(current: int, total_pages: int) -> list[int]:
    """Window of at most five page numbers around the current page."""
    if total_pages <= 5:
        return list(range(1, total_pages + 1))
    if current <= 3:
        return [1, 2, 3, 4, 5]
    if current >= total_pages - 2:
        return list(range(total_pages - 4, total_pages + 1))
    return list(range(current - 2, current + 3))


def paginate(items: Sequence[T], page: int = 1, per_page: int = 10) -> Page[T]:
    total_pages = math.ceil(len(items) / per_page) if per_page > 0 else 0
    page = max(1, min(page, total_pages or 1))
    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        per_page=per_page,
        total=len(items),
        total_pages=total_pages,
        page_numbers=page_numbers(page, total_pages),
    )


def payout_stats(payouts: Iterable[PayoutRequest]) -> PayoutStats:
    stats = PayoutStats()
    for p in payouts:
        stats.total += 1
        if p.status == PayoutStatus.PENDING:
            stats.pending += 1
            stats.total_pending_amount += p.amount
        elif p.status == PayoutStatus.APPROVED:
            stats.approved += 1
            stats.total_approved_amount += p.amount
        else:
            stats.rejected += 1
    return stats


def mark_processed(
    payouts: Sequence[PayoutRequest],
    payout_id: str,
    status: PayoutStatus,
    notes: str | None = None,
    paypal_payout_id: str | None = None,
    processed_at: datetime | None = None,
) -> list[PayoutRequest]:
    """Apply an approve/reject confirmed by the backend to the local list."""
    update = {
        "status": status,
        "processed_at": processed_at or datetime.now(),
        "admin_notes": notes,
    }
    if paypal_payout_id:
        update["paypal_payout_id"] = paypal_payout_id
    return [p.model_copy(update=update) if p.id == payout_id else p for p in payouts]
