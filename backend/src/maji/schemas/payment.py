"""Payment schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from maji.models.enums import EscrowStatus, PaymentProvider, TransactionStatus


class PaymentInitiate(BaseModel):
    """Schema for payment initiation request."""

    order_id: UUID
    provider: PaymentProvider
    phone: str | None = Field(None, max_length=20)


class PaymentInitiateResponse(BaseModel):
    transaction_id: UUID
    status: TransactionStatus
    provider: PaymentProvider
    amount: int
    currency: str = "SLL"
    instructions: str
    expires_at: datetime


class PaymentStatusResponse(BaseModel):
    """Schema for payment status response."""

    transaction_id: UUID
    order_id: UUID
    status: TransactionStatus
    provider: PaymentProvider
    provider_ref: str | None = None
    amount: int
    escrow_status: EscrowStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PaymentWebhook(BaseModel):
    """Provider callback body. order_id carries our order number."""

    status: str
    order_id: str
    txnid: str | None = None
    amount: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status.upper() == "SUCCESS"
