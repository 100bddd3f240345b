"""Async client for the Countwerk credits API."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from countwerk_sdk.client.http import request_json
from countwerk_sdk.client.models import (
    BalanceRequest,
    BalanceResponse,
    CancelReservationRequest,
    CancelReservationResponse,
    ConfirmReservationRequest,
    ConfirmReservationResponse,
    DeductRequest,
    DeductResponse,
    PurchaseLinksRequest,
    PurchaseLinksResponse,
    ReserveRequest,
    ReserveResponse,
    ResolveOrderRequest,
    ResolveOrderResponse,
)
from countwerk_sdk.core.config import ClientConfig
from countwerk_sdk.core.constants import ErrorCode
from countwerk_sdk.core.exceptions import ConfigurationError, InvalidRequestError

logger = structlog.get_logger(__name__)

_M = TypeVar("_M", bound=BaseModel)


def _validate_amount(amount: Any) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidRequestError(
            "amount must be an integer > 0", code=ErrorCode.INVALID_AMOUNT
        )


def _as_request(model: type[_M], request: _M | Mapping[str, Any]) -> _M:
    if isinstance(request, model):
        return request
    return model.model_validate(request)


def _body(request: BaseModel) -> dict[str, Any]:
    return request.model_dump(by_alias=True, exclude_none=True)


def _parse(model: type[_M], data: Any) -> _M | None:
    return None if data is None else model.model_validate(data)


class CountwerkClient:
    """Thin async wrapper over the credits API.

    Every call is a JSON ``POST`` authenticated with the ``X-API-Key`` header
    and retried per :meth:`ClientConfig.effective_retry_policy`.

    Usage::

        async with CountwerkClient(ClientConfig(api_key="ck_live_xxx")) as cw:
            balance = await cw.balance("acct_123")
            await cw.deduct(
                DeductRequest(
                    account_id="acct_123",
                    operation="app.chat.reply",
                    amount=result.credits_to_deduct,
                    usage_event_id="turn-001",
                )
            )
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig.from_env()
        if not self._config.api_key:
            raise ConfigurationError(
                "api_key is required (pass ClientConfig(api_key=...) or set COUNTWERK_API_KEY)"
            )
        self._transport = transport
        self._retry_policy = self._config.effective_retry_policy()
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def connect(self) -> None:
        """Open the underlying HTTP client."""
        base_url = self._config.base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Content-Type": "application/json",
                "X-API-Key": self._config.api_key,
            },
            timeout=self._config.timeout,
            transport=self._transport,
        )
        logger.info("countwerk_client_connected", base_url=base_url)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("countwerk_client_closed")

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("CountwerkClient is not connected. Call connect() first.")
        return self._client

    async def _post(self, path: str, request: BaseModel) -> Any:
        return await request_json(
            self._ensure_connected(),
            path,
            _body(request),
            retry_policy=self._retry_policy,
        )

    async def __aenter__(self) -> CountwerkClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------ #
    # Orders and purchase links
    # ------------------------------------------------------------------ #

    async def resolve_order(self, order_id: str) -> ResolveOrderResponse | None:
        """Map a shop order to its account and AI product."""
        data = await self._post(
            "/api/credits/resolve-order", ResolveOrderRequest(order_id=order_id)
        )
        return _parse(ResolveOrderResponse, data)

    async def purchase_links(
        self, request: PurchaseLinksRequest | Mapping[str, Any]
    ) -> PurchaseLinksResponse | None:
        """List top-up and plan-change options for an account."""
        data = await self._post(
            "/api/purchase-links", _as_request(PurchaseLinksRequest, request)
        )
        return _parse(PurchaseLinksResponse, data)

    # ------------------------------------------------------------------ #
    # Credits
    # ------------------------------------------------------------------ #

    async def balance(self, account_id: str) -> BalanceResponse | None:
        data = await self._post(
            "/api/credits/balance", BalanceRequest(account_id=account_id)
        )
        return _parse(BalanceResponse, data)

    async def deduct(
        self, request: DeductRequest | Mapping[str, Any]
    ) -> DeductResponse | None:
        """Deduct credits immediately.

        Raises:
            InvalidRequestError: ``amount`` is not a positive integer; no
                request is sent.
        """
        amount = request.amount if isinstance(request, DeductRequest) else request.get("amount")
        _validate_amount(amount)
        data = await self._post("/api/credits/deduct", _as_request(DeductRequest, request))
        return _parse(DeductResponse, data)

    async def reserve(
        self, request: ReserveRequest | Mapping[str, Any]
    ) -> ReserveResponse | None:
        """Hold credits until the reservation is confirmed or cancelled.

        Raises:
            InvalidRequestError: ``amount`` is not a positive integer; no
                request is sent.
        """
        amount = request.amount if isinstance(request, ReserveRequest) else request.get("amount")
        _validate_amount(amount)
        data = await self._post("/api/credits/reserve", _as_request(ReserveRequest, request))
        return _parse(ReserveResponse, data)

    async def confirm_reservation(
        self, request: ConfirmReservationRequest | Mapping[str, Any]
    ) -> ConfirmReservationResponse | None:
        data = await self._post(
            "/api/credits/confirm-reservation",
            _as_request(ConfirmReservationRequest, request),
        )
        return _parse(ConfirmReservationResponse, data)

    async def cancel_reservation(
        self, request: CancelReservationRequest | Mapping[str, Any]
    ) -> CancelReservationResponse | None:
        data = await self._post(
            "/api/credits/cancel-reservation",
            _as_request(CancelReservationRequest, request),
        )
        return _parse(CancelReservationResponse, data)
