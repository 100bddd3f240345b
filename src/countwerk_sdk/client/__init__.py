from countwerk_sdk.client.client import CountwerkClient
from countwerk_sdk.client.http import ApiEnvelope, request_json, unwrap_response
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
    PurchaseOption,
    ReserveRequest,
    ReserveResponse,
    ResolveOrderRequest,
    ResolveOrderResponse,
)

__all__ = [
    "ApiEnvelope",
    "BalanceRequest",
    "BalanceResponse",
    "CancelReservationRequest",
    "CancelReservationResponse",
    "ConfirmReservationRequest",
    "ConfirmReservationResponse",
    "CountwerkClient",
    "DeductRequest",
    "DeductResponse",
    "PurchaseLinksRequest",
    "PurchaseLinksResponse",
    "PurchaseOption",
    "ReserveRequest",
    "ReserveResponse",
    "ResolveOrderRequest",
    "ResolveOrderResponse",
    "request_json",
    "unwrap_response",
]
