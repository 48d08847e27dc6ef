"""Payment API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from maji.api.deps import CurrentUser, PaymentServiceDep
from maji.models.enums import PaymentProvider
from maji.schemas.payment import (
    PaymentInitiate,
    PaymentInitiateResponse,
    PaymentStatusResponse,
    PaymentWebhook,
)

router = APIRouter()


@router.post("/initiate", response_model=PaymentInitiateResponse)
async def initiate_payment(
    body: PaymentInitiate, current_user: CurrentUser, payment_service: PaymentServiceDep
):
    """Start paying for an accepted order.

    Returns the instructions the customer follows on their phone; the
    provider reports the outcome through the webhook.
    """
    initiation = await payment_service.initiate_payment(
        body.order_id, current_user, body.provider, body.phone
    )
    transaction = initiation.transaction
    return PaymentInitiateResponse(
        transaction_id=transaction.transaction_id,
        status=transaction.status,
        provider=transaction.provider,
        amount=transaction.amount,
        instructions=initiation.instructions,
        expires_at=initiation.expires_at,
    )


@router.get("/{transaction_id}/status", response_model=PaymentStatusResponse)
async def get_payment_status(
    transaction_id: UUID, current_user: CurrentUser, payment_service: PaymentServiceDep
):
    """Check payment status (customer or admin)."""
    return await payment_service.get_payment_status(transaction_id, current_user)


@router.post("/webhook/{provider}")
async def payment_webhook(
    provider: PaymentProvider, body: PaymentWebhook, payment_service: PaymentServiceDep
):
    """Provider callback reporting a payment outcome."""
    await payment_service.handle_callback(
        provider, body.order_id, body.succeeded, body.txnid
    )
    return {"status": "received"}
