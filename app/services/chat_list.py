"""Developer chat list: orders and inquiries of every service grouped by client."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter, ValidationError

from app.models.base import ref_id
from app.models.chat import GroupedChat, OrderEntry, ServiceInquiry

logger = logging.getLogger(__name__)

PAID_ORDER_STATUSES = ("paid", "in_progress", "delivered", "completed")
# Order statuses by display priority when a client has several orders
DOMINANT_ORDER = ("in_progress", "delivered", "paid", "completed")

_datetime = TypeAdapter(datetime)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_time(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = _datetime.validate_python(value)
    except ValidationError:
        logger.warning("Unparseable timestamp in chat data", extra={"error": value})
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _party_name(party: Any, fallback: str) -> str:
    if not isinstance(party, dict):
        return fallback
    full = f"{party.get('firstName') or ''} {party.get('lastName') or ''}".strip()
    return party.get("companyName") or full or fallback


def _party_email(party: Any) -> str:
    return party.get("email") or "" if isinstance(party, dict) else ""


def _unread_for(unread: Sequence[Mapping[str, Any]], service_id: str) -> int:
    return sum(1 for n in unread if n.get("serviceId") == service_id)


def group_chats(
    services: Iterable[Mapping[str, Any]],
    orders_by_service: Mapping[str, Sequence[Mapping[str, Any]]],
    messages_by_service: Mapping[str, Sequence[Mapping[str, Any]]],
    unread: Sequence[Mapping[str, Any]] = (),
    current_user_id: str | None = None,
) -> list[GroupedChat]:
    """Сгруппировать чаты разработчика по клиентам.

    Для каждой услуги:
      A) оплаченные заказы группируются по clientId;
      B) отправители сообщений без заказа по этой услуге становятся запросами (inquiry).

    Результат: сначала группы с непрочитанными, затем по времени последней активности.
    """
    clients: dict[str, GroupedChat] = {}

    for service in services:
        service_id = str(ref_id(service))
        service_title = service.get("title") or ""
        service_category = service.get("category") or ""
        svc_unread = _unread_for(unread, service_id)

        # A: paid orders
        for order in orders_by_service.get(service_id, ()):
            if order.get("status") not in PAID_ORDER_STATUSES:
                continue
            client = order.get("clientId")
            client_id = str(ref_id(client) or "unknown")
            amount = Decimal(str(order.get("totalAmount") or 0))
            paid_at = _parse_time(order.get("paidAt"))
            entry = OrderEntry(
                order_id=str(ref_id(order)),
                order_title=order.get("title") or "",
                order_status=order["status"],
                order_amount=amount,
                service_id=service_id,
                service_title=service_title,
                service_category=service_category,
                paid_at=paid_at,
            )

            existing = clients.get(client_id)
            if existing is None:
                clients[client_id] = GroupedChat(
                    client_id=client_id,
                    client_name=_party_name(client, "Client"),
                    client_email=_party_email(client),
                    client_type=order.get("clientModel") or "User",
                    orders=[entry],
                    total_amount=amount,
                    unread_count=svc_unread,
                    last_message_time=paid_at,
                    primary_service_id=service_id,
                    has_paid_orders=True,
                    all_service_ids=[service_id],
                )
                continue

            if not any(o.order_id == entry.order_id for o in existing.orders):
                existing.orders.append(entry)
                existing.total_amount += amount
                existing.unread_count += svc_unread
            existing.has_paid_orders = True
            if service_id not in existing.all_service_ids:
                existing.all_service_ids.append(service_id)
            if (paid_at or _EPOCH) > (existing.last_message_time or _EPOCH):
                existing.last_message_time = paid_at
                if entry.order_status != "completed":
                    existing.primary_service_id = service_id

        # B: inquiry senders (messaged without buying)
        senders: dict[str, dict[str, Any]] = {}
        for msg in messages_by_service.get(service_id, ()):
            sender = msg.get("senderId")
            sender_id = ref_id(sender)
            if not sender_id or sender_id == current_user_id:
                continue
            sent_at = _parse_time(msg.get("timestamp") or msg.get("createdAt"))
            known = senders.get(sender_id)
            if known is None:
                senders[sender_id] = {
                    "name": _party_name(sender, "Visitor"),
                    "email": _party_email(sender),
                    "type": msg.get("senderModel") or "User",
                    "last_time": sent_at,
                }
            elif (sent_at or _EPOCH) > (known["last_time"] or _EPOCH):
                known["last_time"] = sent_at

        for sender_id, sender in senders.items():
            inquiry = ServiceInquiry(
                service_id=service_id,
                service_title=service_title,
                service_category=service_category,
                has_unread=svc_unread > 0,
                unread_count=svc_unread,
            )
            existing = clients.get(sender_id)
            if existing is None:
                clients[sender_id] = GroupedChat(
                    client_id=sender_id,
                    client_name=sender["name"],
                    client_email=sender["email"],
                    client_type=sender["type"],
                    inquiries=[inquiry],
                    unread_count=svc_unread,
                    last_message_time=sender["last_time"],
                    primary_service_id=service_id,
                    has_paid_orders=False,
                    all_service_ids=[service_id],
                )
                continue

            as_order = any(o.service_id == service_id for o in existing.orders)
            as_inquiry = any(i.service_id == service_id for i in existing.inquiries)
            if not as_order and not as_inquiry:
                existing.inquiries.append(inquiry)
                existing.unread_count += svc_unread
            if service_id not in existing.all_service_ids:
                existing.all_service_ids.append(service_id)

    chats = sorted(
        clients.values(),
        key=lambda c: (c.unread_count == 0, -(c.last_message_time or _EPOCH).timestamp()),
    )
    logger.info("Grouped chat list", extra={"count": len(chats)})
    return chats


def dominant_status(chat: GroupedChat) -> str:
    for status in DOMINANT_ORDER:
        if any(o.order_status == status for o in chat.orders):
            return status
    if chat.inquiries:
        return "inquiry"
    return chat.orders[0].order_status if chat.orders else "inquiry"


def filter_chats(chats: Iterable[GroupedChat], search: str = "", status: str = "all") -> list[GroupedChat]:
    """Search over client and titles; status is all, unread, inquiry or a dominant order status."""
    q = search.lower()
    result = []
    for chat in chats:
        matches_search = (
            q in chat.client_name.lower()
            or q in chat.client_email.lower()
            or any(q in o.service_title.lower() or q in o.order_title.lower() for o in chat.orders)
            or any(q in i.service_title.lower() for i in chat.inquiries)
        )
        matches_status = (
            status == "all"
            or (status == "unread" and chat.unread_count > 0)
            or (status == "inquiry" and not chat.has_paid_orders)
            or dominant_status(chat) == status
        )
        if matches_search and matches_status:
            result.append(chat)
    return result
