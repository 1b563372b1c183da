"""Payout attempt tracking for a single order.

The backend owns every status transition. Here we only look at the payout
requests already recorded for an order and decide what the developer should
see: nothing requested yet, a request under review, an approved payout, a
rejection that can be re-submitted, or a rejection after the last attempt.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.models.payout import PayoutRequest, PayoutStatus

MAX_PAYOUT_ATTEMPTS = 3


class PayoutRequestError(Exception):
    """Domain error: a new payout request must not be sent."""


class PayoutAttemptsExhausted(PayoutRequestError):
    pass


class PayoutAlreadyInProgress(PayoutRequestError):
    pass


class _PayoutStateBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    rejected_count: int = 0
    max_attempts: int = MAX_PAYOUT_ATTEMPTS
    latest_rejected: PayoutRequest | None = None

    @computed_field
    @property
    def can_retry(self) -> bool:
        return self.kind == "rejected_retryable"

    @computed_field
    @property
    def max_reached(self) -> bool:
        return self.kind == "rejected_maxed"

    @computed_field
    @property
    def never_requested(self) -> bool:
        return self.kind == "never_requested"


class NeverRequested(_PayoutStateBase):
    kind: Literal["never_requested"] = "never_requested"


class Approved(_PayoutStateBase):
    kind: Literal["approved"] = "approved"
    request: PayoutRequest


class Pending(_PayoutStateBase):
    kind: Literal["pending"] = "pending"
    request: PayoutRequest
    # Only set for re-submissions
    attempt: int | None = None


class RejectedRetryable(_PayoutStateBase):
    kind: Literal["rejected_retryable"] = "rejected_retryable"
    next_attempt: int


class RejectedMaxed(_PayoutStateBase):
    kind: Literal["rejected_maxed"] = "rejected_maxed"


PayoutState = Annotated[
    Union[NeverRequested, Approved, Pending, RejectedRetryable, RejectedMaxed],
    Field(discriminator="kind"),
]


def derive_payout_state(
    requests: Sequence[PayoutRequest], max_attempts: int = MAX_PAYOUT_ATTEMPTS
) -> PayoutState:
    """Свести список заявок на выплату по заказу к одному состоянию для UI.

    Приоритет: approved > pending > исчерпаны попытки > можно повторить >
    заявок ещё не было.
    """
    rejected = [r for r in requests if r.status == PayoutStatus.REJECTED]
    pending = next((r for r in requests if r.status == PayoutStatus.PENDING), None)
    approved = next((r for r in requests if r.status == PayoutStatus.APPROVED), None)
    # max() keeps the first of equal timestamps, so ties resolve to input order
    latest_rejected = max(rejected, key=lambda r: r.requested_at, default=None)

    common = {
        "rejected_count": len(rejected),
        "max_attempts": max_attempts,
        "latest_rejected": latest_rejected,
    }

    if approved is not None:
        return Approved(request=approved, **common)
    if pending is not None:
        attempt = len(rejected) + 1 if rejected else None
        return Pending(request=pending, attempt=attempt, **common)
    if len(rejected) >= max_attempts:
        return RejectedMaxed(**common)
    if rejected:
        return RejectedRetryable(next_attempt=len(rejected) + 1, **common)
    return NeverRequested(**common)


def group_requests_by_order(
    requests: Iterable[PayoutRequest],
) -> dict[str, list[PayoutRequest]]:
    """Group the developer's payout requests by order, keeping input order."""
    grouped: dict[str, list[PayoutRequest]] = {}
    for request in requests:
        if not request.order_id:
            continue
        grouped.setdefault(request.order_id, []).append(request)
    return grouped


def ensure_can_request(state: PayoutState) -> None:
    """Raise if a new payout request for this order must not be submitted.

    Raises:
        PayoutAttemptsExhausted: all attempts were rejected.
        PayoutAlreadyInProgress: a request is under review or already approved.
    """
    if state.max_reached:
        raise PayoutAttemptsExhausted(
            f"You've used all {state.max_attempts} payout attempts for this order. "
            "Please contact support for further assistance."
        )
    if isinstance(state, Pending):
        raise PayoutAlreadyInProgress("A payout request for this order is already under review.")
    if isinstance(state, Approved):
        raise PayoutAlreadyInProgress("The payout for this order has already been approved.")


def append_confirmed(
    requests: Sequence[PayoutRequest], created: PayoutRequest
) -> list[PayoutRequest]:
    """Return a new list with a backend-confirmed request appended."""
    return [*requests, created]


class PayoutView(BaseModel):
    """What the order card shows for its payout section."""

    kind: str
    label: str
    attempt_label: str | None = None
    reason: str | None = None
    action: Literal["none", "request", "retry", "contact_support"] = "none"
    action_label: str | None = None
    support_url: str | None = None
    transaction_id: str | None = None


def describe_payout_state(
    state: PayoutState, price: object | None = None, support_email: str | None = None
) -> PayoutView:
    total = state.max_attempts
    price_suffix = f" (${price})" if price is not None else ""
    notes = state.latest_rejected.admin_notes if state.latest_rejected else None

    if isinstance(state, Approved):
        return PayoutView(
            kind=state.kind,
            label=f"Payout Approved{price_suffix}",
            transaction_id=state.request.paypal_payout_id,
        )
    if isinstance(state, Pending):
        return PayoutView(
            kind=state.kind,
            label="Payout Pending Review",
            attempt_label=f"attempt {state.attempt}/{total}" if state.attempt else None,
        )
    if isinstance(state, RejectedMaxed):
        support_url = None
        if support_email:
            support_url = f"mailto:{support_email}?subject=Payout Issue"
        return PayoutView(
            kind=state.kind,
            label=f"Payout Rejected ({total}/{total} attempts used)",
            reason=f"Last reason: {notes}" if notes else None,
            action="contact_support",
            action_label="Contact Support",
            support_url=support_url,
        )
    if isinstance(state, RejectedRetryable):
        return PayoutView(
            kind=state.kind,
            label=f"Payout Rejected ({state.rejected_count}/{total} attempts)",
            reason=f"Reason: {notes}" if notes else None,
            action="retry",
            action_label=f"Re-submit Payout (attempt {state.next_attempt}/{total})",
        )
    return PayoutView(
        kind=state.kind,
        label=f"Request Payout{price_suffix}",
        action="request",
        action_label=f"Request Payout{price_suffix}",
    )


def confirmation_message(previous: PayoutState) -> str:
    """Message shown after the backend accepted a new payout request."""
    if isinstance(previous, RejectedRetryable):
        return (
            f"Your request has been re-submitted (attempt {previous.next_attempt} "
            f"of {previous.max_attempts}). Admin will review shortly."
        )
    return "Your payout request has been submitted. Admin will process it within 24-48 hours."
