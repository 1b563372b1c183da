import logging

from fastapi import APIRouter, Depends

from admin.app.schemas import ChatListResponse
from app.models.base import ref_id
from app.services.chat_list import filter_chats, group_chats
from core.backend import BackendAPIError, BackendClient, get_backend, to_http_exception

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=ChatListResponse)
async def get_chats(
    search: str = "",
    status: str = "all",
    user_id: str | None = None,
    backend: BackendClient = Depends(get_backend),
):
    """Чаты разработчика, сгруппированные по клиентам"""
    try:
        services = await backend.my_services()
    except BackendAPIError as e:
        raise to_http_exception(e) from e

    orders: dict[str, list[dict]] = {}
    messages: dict[str, list[dict]] = {}
    for service in services:
        service_id = str(ref_id(service))
        # One broken service must not hide the rest of the list
        try:
            orders[service_id] = await backend.service_orders(service_id)
        except BackendAPIError as e:
            logger.error("Orders fetch failed", extra={"service_id": service_id, "error": e.message})
        try:
            messages[service_id] = await backend.service_messages(service_id)
        except BackendAPIError as e:
            logger.error("Messages fetch failed", extra={"service_id": service_id, "error": e.message})

    unread = await _unread_notifications(backend)
    chats = group_chats(services, orders, messages, unread, user_id)
    return {
        "chats": filter_chats(chats, search, status),
        "total_unread": sum(c.unread_count for c in chats),
        "inquiry_only": sum(1 for c in chats if not c.has_paid_orders),
    }


async def _unread_notifications(backend: BackendClient) -> list[dict]:
    try:
        return await backend.unread_notifications()
    except BackendAPIError as e:
        logger.warning("Unread notifications unavailable", extra={"error": e.message})
        return []
