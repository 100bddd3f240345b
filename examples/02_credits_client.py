# RUN: python examples/02_credits_client.py
"""Credits client — reserve, confirm and deduct against a mocked credits API.

Demonstrates: CountwerkClient with an injected httpx transport, reserve /
confirm_reservation / deduct, and typed API errors.
"""

import asyncio
import json

import httpx

from countwerk_sdk import ApiError, ClientConfig, CountwerkClient, RetryPolicy
from countwerk_sdk.client.models import DeductRequest

RESPONSES = {
    "/api/credits/balance": {"balance": 250, "reservedBalance": 0, "availableBalance": 250},
    "/api/credits/reserve": {
        "reservationId": "res_1",
        "operation": "app.video.render",
        "amount": 40,
        "expiresAt": "2025-03-01T13:00:00.000Z",
    },
    "/api/credits/confirm-reservation": {
        "reservationId": "res_1",
        "confirmed": True,
        "actualAmount": 32,
    },
}


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/credits/deduct":
        body = json.loads(request.content)
        if body["amount"] > 200:
            return httpx.Response(
                402,
                json={"success": False, "code": "INSUFFICIENT_CREDITS", "message": "Not enough credits"},
            )
    data = RESPONSES.get(request.url.path)
    return httpx.Response(200, json={"success": True, "data": data})


async def main() -> None:
    config = ClientConfig(
        api_key="ck_test_example",
        retry_policy=RetryPolicy(max_retries=1, backoff_base=0.0),
    )
    async with CountwerkClient(config, transport=httpx.MockTransport(handler)) as client:
        # 1. Balance
        balance = await client.balance("acct_42")
        print(f"Available: {balance.available_balance if balance else 'n/a'}")

        # 2. Reserve then confirm a smaller actual amount
        reservation = await client.reserve(
            {"account_id": "acct_42", "operation": "app.video.render", "amount": 40}
        )
        confirmed = await client.confirm_reservation(
            {"reservationId": reservation.reservation_id, "actualAmount": 32}
        )
        print(f"Confirmed {confirmed.actual_amount} credits")

        # 3. A deduction the server rejects surfaces as a typed error
        try:
            await client.deduct(
                DeductRequest(
                    account_id="acct_42",
                    operation="app.chat.reply",
                    amount=500,
                    usage_event_id="turn-9001",
                )
            )
        except ApiError as exc:
            print(f"Deduct failed: {exc.code} (HTTP {exc.status_code})")


if __name__ == "__main__":
    asyncio.run(main())
