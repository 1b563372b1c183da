import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException

from admin.app.schemas import (
    AdminPayoutsResponse,
    ApprovePayout,
    MyPayoutsResponse,
    OrderPayoutResponse,
    PayoutProcessedResponse,
    PayoutRequestedResponse,
    RejectPayout,
)
from app.models.payout import PayoutRequest, PayoutStatus
from app.services.admin_payouts import filter_payouts, mark_processed, paginate, payout_stats
from app.services.payout_tracker import (
    PayoutAttemptsExhausted,
    PayoutRequestError,
    append_confirmed,
    confirmation_message,
    derive_payout_state,
    describe_payout_state,
    ensure_can_request,
    group_requests_by_order,
)
from core.backend import BackendAPIError, BackendClient, get_backend, to_http_exception
from core.config import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


async def _order_requests(backend: BackendClient, order_id: str) -> list[PayoutRequest]:
    try:
        raw = await backend.my_payout_requests()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    requests = [PayoutRequest.model_validate(r) for r in raw]
    return group_requests_by_order(requests).get(order_id, [])


def _order_payout(order_id: str, requests: list[PayoutRequest], price: Decimal | None) -> dict:
    settings = get_settings()
    state = derive_payout_state(requests, settings.max_payout_attempts)
    view = describe_payout_state(state, price, settings.support_email)
    return {"order_id": order_id, "state": state, "view": view, "requests": requests}


@router.get("/orders", response_model=list[OrderPayoutResponse])
async def get_order_payouts(backend: BackendClient = Depends(get_backend)):
    """Состояние выплат по всем заказам разработчика"""
    try:
        raw = await backend.my_payout_requests()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    grouped = group_requests_by_order(PayoutRequest.model_validate(r) for r in raw)
    return [_order_payout(order_id, requests, None) for order_id, requests in grouped.items()]


@router.get("/mine", response_model=MyPayoutsResponse)
async def get_my_payouts(backend: BackendClient = Depends(get_backend)):
    """История заявок разработчика со сводкой по статусам и суммам"""
    try:
        raw = await backend.my_payout_requests()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    requests = [PayoutRequest.model_validate(r) for r in raw]
    return {"requests": requests, "stats": payout_stats(requests)}


@router.get("/orders/{order_id}", response_model=OrderPayoutResponse)
async def get_order_payout(
    order_id: str,
    price: Decimal | None = None,
    backend: BackendClient = Depends(get_backend),
):
    """Состояние выплаты по заказу"""
    requests = await _order_requests(backend, order_id)
    return _order_payout(order_id, requests, price)


@router.post("/orders/{order_id}/request", response_model=PayoutRequestedResponse)
async def request_payout(
    order_id: str,
    price: Decimal | None = None,
    backend: BackendClient = Depends(get_backend),
):
    """Создаёт заявку на выплату (или повторную после отклонения)"""
    settings = get_settings()
    requests = await _order_requests(backend, order_id)
    previous = derive_payout_state(requests, settings.max_payout_attempts)

    try:
        ensure_can_request(previous)
    except PayoutAttemptsExhausted as e:
        logger.info("Payout attempts exhausted", extra={"order_id": order_id, "rejected_count": previous.rejected_count})
        raise HTTPException(status_code=400, detail=f"{e} ({settings.support_email})") from e
    except PayoutRequestError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        created = await backend.request_payout(order_id)
    except BackendAPIError as e:
        raise to_http_exception(e) from e

    requests = append_confirmed(requests, PayoutRequest.model_validate(created))
    logger.info(
        "Payout requested",
        extra={"order_id": order_id, "kind": previous.kind, "rejected_count": previous.rejected_count},
    )
    return {**_order_payout(order_id, requests, price), "message": confirmation_message(previous)}


@router.get("/admin", response_model=AdminPayoutsResponse)
async def get_admin_payouts(
    search: str = "",
    status: str = "all",
    page: int = 1,
    backend: BackendClient = Depends(get_backend),
):
    """Получает список заявок на выплату с поиском, фильтром и пагинацией"""
    try:
        raw = await backend.admin_payouts()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    payouts = [PayoutRequest.model_validate(p) for p in raw]
    filtered = filter_payouts(payouts, search, status)
    return {
        "page": paginate(filtered, page, get_settings().admin_page_size),
        "stats": payout_stats(payouts),
    }


async def _payouts_checked_pending(backend: BackendClient, payout_id: str) -> list[PayoutRequest]:
    try:
        raw = await backend.admin_payouts()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    payouts = [PayoutRequest.model_validate(p) for p in raw]
    payout = next((p for p in payouts if p.id == payout_id), None)
    if payout is None:
        raise HTTPException(status_code=404, detail="Выплата не найдена")
    if payout.status != PayoutStatus.PENDING:
        raise HTTPException(status_code=400, detail="Нельзя обработать выплату в текущем статусе")
    return payouts


@router.post("/admin/{payout_id}/approve", response_model=PayoutProcessedResponse)
async def approve_payout(
    payout_id: str,
    form: ApprovePayout,
    backend: BackendClient = Depends(get_backend),
):
    """Подтверждает выплату"""
    payouts = await _payouts_checked_pending(backend, payout_id)
    try:
        await backend.approve_payout(payout_id, form.paypal_payout_id, form.notes)
    except BackendAPIError as e:
        raise to_http_exception(e) from e

    payouts = mark_processed(payouts, payout_id, PayoutStatus.APPROVED, form.notes, form.paypal_payout_id)
    logger.info("Payout approved", extra={"payout_id": payout_id})
    return {
        "message": "Payout approved successfully!",
        "payout": next(p for p in payouts if p.id == payout_id),
        "stats": payout_stats(payouts),
    }


@router.post("/admin/{payout_id}/reject", response_model=PayoutProcessedResponse)
async def reject_payout(
    payout_id: str,
    form: RejectPayout,
    backend: BackendClient = Depends(get_backend),
):
    """Отклоняет выплату"""
    payouts = await _payouts_checked_pending(backend, payout_id)
    try:
        await backend.reject_payout(payout_id, form.reason)
    except BackendAPIError as e:
        raise to_http_exception(e) from e

    payouts = mark_processed(payouts, payout_id, PayoutStatus.REJECTED, form.reason)
    logger.info("Payout rejected", extra={"payout_id": payout_id})
    return {
        "message": "Payout rejected.",
        "payout": next(p for p in payouts if p.id == payout_id),
        "stats": payout_stats(payouts),
    }
