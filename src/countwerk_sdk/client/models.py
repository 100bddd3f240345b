"""Request and response models of the Countwerk credits API.

Field names follow the wire format: order and account fields are snake_case,
while balance, ledger and reservation fields are camelCase aliases.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

_WIRE = {"populate_by_name": True}


class ResolveOrderRequest(BaseModel):
    order_id: str


class ResolveOrderResponse(BaseModel):
    order_id: str
    account_id: str
    ai_product_id: str | None = None


class PurchaseLinksRequest(BaseModel):
    ai_product_id: str
    account_id: str


class PurchaseOption(BaseModel):
    type: Literal["topup", "upgrade", "downgrade", "manage"]
    link_mode: Literal["create_buy_url", "ds_upgrade_url"] = Field(alias="linkMode")
    effective_at_policy: Literal["immediate", "end_of_period", "unknown"] = Field(
        alias="effectiveAtPolicy"
    )
    expected_policy: Literal["immediate", "end_of_period", "unknown"] = Field(
        alias="expectedPolicy"
    )
    enabled: bool
    disabled_reason: str | None = Field(default=None, alias="disabledReason")
    to_product_id: str | None = Field(default=None, alias="toProductId")
    from_product_id: str | None = Field(default=None, alias="fromProductId")
    url: str | None = None
    label: str | None = None
    description: str | None = None

    model_config = _WIRE


class PurchaseLinksResponse(BaseModel):
    ai_product_id: str
    account_id: str
    current_order_id: str | None = None
    current_tier_product_id: str | None = None
    options: list[PurchaseOption] = Field(default_factory=list)


class BalanceRequest(BaseModel):
    account_id: str


class BalanceResponse(BaseModel):
    balance: float
    reserved_balance: float = Field(default=0, alias="reservedBalance")
    available_balance: float = Field(default=0, alias="availableBalance")
    total_earned: float = Field(default=0, alias="totalEarned")
    total_spent: float = Field(default=0, alias="totalSpent")
    next_expiration: str | None = Field(default=None, alias="nextExpiration")

    model_config = _WIRE


class DeductRequest(BaseModel):
    """Deduct whole credits.  ``usage_event_id`` makes the call idempotent."""

    account_id: str
    operation: str
    amount: int
    usage_event_id: str
    description: str | None = None
    metadata: dict[str, Any] | None = None


class DeductResponse(BaseModel):
    transaction_id: str = Field(alias="transactionId")
    new_balance: float = Field(alias="newBalance")
    deducted_amount: float = Field(alias="deductedAmount")
    operation: str
    description: str | None = None

    model_config = _WIRE


class ReserveRequest(BaseModel):
    account_id: str
    operation: str
    amount: int
    validity_minutes: int | None = Field(default=None, alias="validityMinutes")
    description: str | None = None

    model_config = _WIRE


class ReserveResponse(BaseModel):
    reservation_id: str = Field(alias="reservationId")
    operation: str
    amount: float
    expires_at: str = Field(alias="expiresAt")
    description: str | None = None

    model_config = _WIRE


class ConfirmReservationRequest(BaseModel):
    reservation_id: str = Field(alias="reservationId")
    actual_amount: int | None = Field(default=None, alias="actualAmount")
    description: str | None = None

    model_config = _WIRE


class ConfirmReservationResponse(BaseModel):
    reservation_id: str = Field(alias="reservationId")
    confirmed: bool
    actual_amount: float = Field(alias="actualAmount")
    description: str | None = None

    model_config = _WIRE


class CancelReservationRequest(BaseModel):
    reservation_id: str = Field(alias="reservationId")
    reason: str | None = None

    model_config = _WIRE


class CancelReservationResponse(BaseModel):
    reservation_id: str = Field(alias="reservationId")
    cancelled: bool
    reason: str | None = None

    model_config = _WIRE
