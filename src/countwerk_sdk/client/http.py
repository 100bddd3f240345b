"""JSON-over-HTTP plumbing: envelope unwrapping, error mapping and retry."""

from __future__ import annotations

import socket
from typing import Any

import httpx
import structlog
from pydantic import BaseModel

from countwerk_sdk.core.constants import ErrorCode
from countwerk_sdk.core.exceptions import (
    APIConnectionError,
    ApiError,
    APITimeoutError,
    RateLimitError,
    ServerError,
)
from countwerk_sdk.resilience.retry import RetryPolicy

logger = structlog.get_logger(__name__)


class ApiEnvelope(BaseModel):
    """``{success, data?, code?, message?, timestamp?}`` wrapping every response."""

    success: bool | None = None
    data: Any = None
    code: str | None = None
    message: str | None = None
    timestamp: str | None = None


def _error_class(status: int) -> type[ApiError]:
    if status == 429:
        return RateLimitError
    if status >= 500:
        return ServerError
    return ApiError


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def unwrap_response(response: httpx.Response) -> Any:
    """Return the envelope's ``data`` or raise the matching :class:`ApiError`."""
    status = response.status_code
    parsed = _parse_body(response)
    envelope = ApiEnvelope.model_validate(parsed) if isinstance(parsed, dict) else None

    if 200 <= status < 300 and (envelope is None or envelope.success is not False):
        return envelope.data if envelope is not None else None

    code = (envelope.code if envelope else None) or ErrorCode.HTTP_ERROR.value
    message = (envelope.message if envelope else None) or code
    details = envelope.data if envelope is not None and envelope.data is not None else parsed
    raise _error_class(status)(message, code=code, details=details, status_code=status)


def _is_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


async def _post_once(client: httpx.AsyncClient, path: str, body: dict[str, Any] | None) -> Any:
    try:
        response = await client.post(path, json=body)
    except httpx.TimeoutException as exc:
        raise APITimeoutError(
            str(exc) or "Request timed out", code=ErrorCode.TIMEOUT
        ) from exc
    except httpx.ConnectError as exc:
        if _is_dns_failure(exc):
            raise APIConnectionError(
                str(exc) or "DNS lookup failed", code=ErrorCode.DNS_RETRY
            ) from exc
        raise APIConnectionError(
            str(exc) or "Connection failed", code=ErrorCode.CONNECTION_FAILED
        ) from exc
    except (httpx.NetworkError, httpx.RemoteProtocolError) as exc:
        raise APIConnectionError(
            str(exc) or "Connection reset", code=ErrorCode.CONNECTION_RESET
        ) from exc
    except httpx.TransportError as exc:
        raise ApiError(str(exc), code=ErrorCode.TRANSPORT_ERROR) from exc

    try:
        return unwrap_response(response)
    except ApiError as exc:
        logger.warning(
            "countwerk_request_failed",
            path=path,
            status=exc.status_code,
            code=exc.code,
            retryable=exc.is_retryable,
        )
        raise


async def request_json(
    client: httpx.AsyncClient,
    path: str,
    body: dict[str, Any] | None = None,
    *,
    retry_policy: RetryPolicy | None = None,
) -> Any:
    """POST *body* to *path* and return the unwrapped ``data``.

    Retryable failures (HTTP 429/5xx, timeouts, connection failures) are
    retried according to *retry_policy*; everything else propagates at once.
    """
    policy = retry_policy or RetryPolicy()
    return await policy.execute(_post_once, client, path, body)
