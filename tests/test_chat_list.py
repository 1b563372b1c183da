"""
Тесты группировки чатов разработчика по клиентам
"""
from decimal import Decimal

import pytest

from app.services.chat_list import dominant_status, filter_chats, group_chats

ME = "dev-1"


def order(order_id, client_id, status="paid", amount=100, paid_at="2025-01-01T10:00:00Z", **client):
    return {
        "_id": order_id,
        "title": f"Order {order_id}",
        "status": status,
        "totalAmount": amount,
        "paidAt": paid_at,
        "clientModel": "User",
        "clientId": {"_id": client_id, "email": f"{client_id}@example.com", **client},
    }


def message(sender_id, timestamp="2025-01-01T09:00:00Z", **sender):
    return {"senderId": {"_id": sender_id, **sender}, "timestamp": timestamp}


@pytest.fixture
def services():
    return [
        {"_id": "s1", "title": "Logo design", "category": "design"},
        {"_id": "s2", "title": "Django API", "category": "dev"},
    ]


def test_paid_orders_grouped_by_client(services):
    orders = {
        "s1": [order("o1", "c1", amount=100, firstName="Ann", lastName="Lee")],
        "s2": [order("o2", "c1", status="in_progress", amount=250, paid_at="2025-01-02T10:00:00Z")],
    }
    chats = group_chats(services, orders, {}, [], ME)
    assert len(chats) == 1
    chat = chats[0]
    assert chat.client_name == "Ann Lee"
    assert [o.order_id for o in chat.orders] == ["o1", "o2"]
    assert chat.total_amount == Decimal("350")
    assert chat.all_service_ids == ["s1", "s2"]
    assert chat.primary_service_id == "s2"
    assert chat.has_paid_orders is True


def test_unpaid_orders_ignored(services):
    orders = {"s1": [order("o1", "c1", status="pending_payment"), order("o2", "c2", status="cancelled")]}
    assert group_chats(services, orders, {}, [], ME) == []


def test_duplicate_order_counted_once(services):
    unread = [{"serviceId": "s1"}]
    orders = {"s1": [order("o1", "c1"), order("o1", "c1")]}
    chat = group_chats(services, orders, {}, unread, ME)[0]
    assert len(chat.orders) == 1
    assert chat.total_amount == Decimal("100")
    assert chat.unread_count == 1


def test_completed_order_does_not_become_primary(services):
    orders = {
        "s1": [order("o1", "c1", status="in_progress", paid_at="2025-01-01T10:00:00Z")],
        "s2": [order("o2", "c1", status="completed", paid_at="2025-01-05T10:00:00Z")],
    }
    chat = group_chats(services, orders, {}, [], ME)[0]
    assert chat.primary_service_id == "s1"
    assert chat.last_message_time.day == 5


def test_inquiry_from_sender_without_order(services):
    messages = {
        "s1": [
            message("v1", "2025-01-01T09:00:00Z", firstName="Vic"),
            message("v1", "2025-01-03T09:00:00Z", firstName="Vic"),
            message(ME),
        ]
    }
    chats = group_chats(services, {}, messages, [{"serviceId": "s1"}], ME)
    assert len(chats) == 1
    chat = chats[0]
    assert chat.client_id == "v1"
    assert chat.client_name == "Vic"
    assert chat.has_paid_orders is False
    assert chat.inquiries[0].service_id == "s1"
    assert chat.inquiries[0].has_unread is True
    assert chat.last_message_time.day == 3


def test_sender_with_order_on_same_service_not_an_inquiry(services):
    orders = {"s1": [order("o1", "c1")]}
    messages = {"s1": [message("c1")], "s2": [message("c1")]}
    chat = group_chats(services, orders, messages, [], ME)[0]
    assert [i.service_id for i in chat.inquiries] == ["s2"]
    assert chat.all_service_ids == ["s1", "s2"]


def test_unknown_sender_name_falls_back():
    services = [{"_id": "s1", "title": "Copywriting"}]
    chat = group_chats(services, {}, {"s1": [message("v9")]}, [], ME)[0]
    assert chat.client_name == "Visitor"


def test_sorted_unread_first_then_recent(services):
    orders = {
        "s1": [
            order("o1", "old", paid_at="2025-01-01T10:00:00Z"),
            order("o2", "recent", paid_at="2025-01-09T10:00:00Z"),
        ],
        "s2": [order("o3", "unread", paid_at="2024-12-01T10:00:00Z")],
    }
    chats = group_chats(services, orders, {}, [{"serviceId": "s2"}], ME)
    assert [c.client_id for c in chats] == ["unread", "recent", "old"]


class TestFilterChats:
    """Тесты поиска и фильтра по статусу"""

    @pytest.fixture
    def chats(self, services):
        orders = {
            "s1": [order("o1", "c1", status="delivered", companyName="Acme")],
            "s2": [order("o2", "c2", status="completed", firstName="Bob")],
        }
        messages = {"s2": [message("v1", firstName="Vic")]}
        return group_chats(services, orders, messages, [{"serviceId": "s1"}], ME)

    def test_all(self, chats):
        assert len(filter_chats(chats)) == 3

    def test_search_by_client_name(self, chats):
        assert [c.client_id for c in filter_chats(chats, "acme")] == ["c1"]

    def test_search_by_service_title(self, chats):
        found = {c.client_id for c in filter_chats(chats, "django")}
        assert found == {"c2", "v1"}

    def test_unread(self, chats):
        assert [c.client_id for c in filter_chats(chats, status="unread")] == ["c1"]

    def test_inquiry(self, chats):
        assert [c.client_id for c in filter_chats(chats, status="inquiry")] == ["v1"]

    def test_dominant_status(self, chats):
        assert [c.client_id for c in filter_chats(chats, status="delivered")] == ["c1"]
        assert dominant_status(chats[0]) == "delivered"
