"""Payment transaction model holding the escrow state of an order."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin
from maji.models.enums import EscrowStatus, PaymentProvider, TransactionStatus

if TYPE_CHECKING:
    from maji.models.order import Order


class Transaction(Base, TimestampMixin):
    """Mobile money payment for an order (one per order)."""

    __tablename__ = "transactions"

    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.order_id"),
        unique=True,
        nullable=False,
    )
    amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    provider: Mapped[PaymentProvider] = mapped_column(
        Enum(PaymentProvider, native_enum=False, length=20),
        nullable=False,
    )
    payer_phone: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    provider_ref: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, native_enum=False, length=20),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    escrow_status: Mapped[EscrowStatus] = mapped_column(
        Enum(EscrowStatus, native_enum=False, length=20),
        nullable=False,
        default=EscrowStatus.NONE,
    )
    escrow_released_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="transaction")

    __table_args__ = (
        Index("idx_transactions_status", "status"),
    )
