"""Async client for the external marketplace backend API."""
from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import httpx
from fastapi import HTTPException, Request

from core.config import get_settings

logger = logging.getLogger(__name__)


class BackendAPIError(Exception):
    """Backend rejected the call or could not be reached.

    `status_code` is None when no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendClient:
    """Thin wrapper over httpx.AsyncClient with backend error handling."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        start = time.perf_counter()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Backend request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise BackendAPIError("Backend is unavailable") from e

        took_ms = int((time.perf_counter() - start) * 1000)
        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Backend returned an error",
                extra={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "took_ms": took_ms,
                    "error": message,
                },
            )
            raise BackendAPIError(message, response.status_code)

        logger.debug(
            "Backend request done",
            extra={"method": method, "path": path, "status": response.status_code, "took_ms": took_ms},
        )
        if not response.content:
            return None
        return response.json()

    # Payouts
    async def my_payout_requests(self) -> list[dict]:
        return await self._request("GET", "/marketplace/my-payout-requests") or []

    async def request_payout(self, order_id: str) -> dict:
        data = await self._request("POST", f"/marketplace/orders/{order_id}/request-payout")
        # The created record comes wrapped as {"payoutRequest": {...}}
        if isinstance(data, dict) and "payoutRequest" in data:
            return data["payoutRequest"]
        return data

    async def admin_payouts(self, status: str | None = None) -> list[dict]:
        params = {"status": status} if status and status != "all" else None
        data = await self._request("GET", "/admin/payouts", params=params) or []
        if isinstance(data, dict):
            return data.get("payouts", [])
        return data

    async def approve_payout(
        self, payout_id: str, paypal_payout_id: str | None = None, notes: str | None = None
    ) -> Any:
        payload = {"paypalPayoutId": paypal_payout_id, "notes": notes}
        return await self._request("POST", f"/admin/payouts/{payout_id}/approve", json=payload)

    async def reject_payout(self, payout_id: str, reason: str) -> Any:
        return await self._request("POST", f"/admin/payouts/{payout_id}/reject", json={"reason": reason})

    # Comments
    async def comments(self, post_id: str) -> list[dict]:
        return await self._request("GET", f"/comments/{post_id}") or []

    async def create_comment(
        self,
        post_id: str,
        name: str,
        message: str,
        parent_id: str | None = None,
        is_admin: bool = False,
    ) -> dict:
        payload: dict[str, Any] = {"name": name, "message": message}
        if parent_id:
            payload["parent"] = parent_id
        if is_admin:
            payload["isAdmin"] = True
        return await self._request("POST", f"/comments/{post_id}", json=payload)

    async def delete_comment(self, comment_id: str) -> None:
        await self._request("DELETE", f"/comments/{comment_id}")

    # Job reports
    async def job_reports(self) -> list[dict]:
        data = await self._request("GET", "/jobs/reports/all") or []
        return data if isinstance(data, list) else []

    async def update_report_status(self, job_id: str, report_id: str, status: str) -> Any:
        return await self._request(
            "PATCH", f"/jobs/reports/{job_id}/{report_id}", json={"status": status}
        )

    # Marketplace chats
    async def my_services(self) -> list[dict]:
        return await self._request("GET", "/marketplace/my-services") or []

    async def service_orders(self, service_id: str) -> list[dict]:
        return await self._request("GET", f"/marketplace/services/{service_id}/orders") or []

    async def service_messages(self, service_id: str) -> list[dict]:
        return await self._request("GET", f"/marketplace/services/{service_id}/messages") or []

    async def unread_notifications(self) -> list[dict]:
        return await self._request("GET", "/notifications/unread") or []


def to_http_exception(e: BackendAPIError) -> HTTPException:
    """Relay the backend status; no response at all becomes 502."""
    return HTTPException(status_code=e.status_code or 502, detail=e.message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Backend responded with {response.status_code}"


async def get_backend(request: Request) -> AsyncIterator[BackendClient]:
    """FastAPI dependency: backend client forwarding the caller's Authorization header."""
    settings = get_settings()
    headers = {}
    auth = request.headers.get("Authorization")
    if auth:
        headers["Authorization"] = auth
    async with httpx.AsyncClient(
        base_url=settings.backend_api_url,
        headers=headers,
        timeout=settings.backend_timeout,
    ) as client:
        yield BackendClient(client)
