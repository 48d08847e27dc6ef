"""Payment service for mobile money payment records and provider callbacks.

No provider API is called from here; the provider reports the outcome back
through the webhook, and this service persists the resulting order,
transaction and escrow state.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.config import settings
from maji.core.errors import Forbidden, InvalidTransition, NotFound, PaymentAlreadyInitiated
from maji.middleware.metrics import record_order_transition, record_payment_callback
from maji.models.base import utcnow
from maji.models.enums import NotificationKind, OrderStatus, PaymentProvider, TransactionStatus
from maji.models.order import Order
from maji.models.transaction import Transaction
from maji.models.user import User
from maji.services import order_state
from maji.services.auth_service import normalize_phone
from maji.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PROVIDER_INSTRUCTIONS = {
    PaymentProvider.ORANGE_MONEY: "Dial *144*4*6# to approve payment",
    PaymentProvider.AFRICELL_MONEY: "Dial *134# to approve payment",
}
CASH_INSTRUCTIONS = "Pay cash on delivery"


def payment_instructions(provider: PaymentProvider) -> str:
    return PROVIDER_INSTRUCTIONS.get(provider, CASH_INSTRUCTIONS)


@dataclass
class PaymentInitiation:
    transaction: Transaction
    instructions: str
    expires_at: datetime


class PaymentService:
    """Service class for payment operations."""

    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def _lock_order(self, stmt) -> Order | None:
        result = await self.db.execute(
            stmt.options(
                selectinload(Order.vendor),
                selectinload(Order.transaction),
            )
            .execution_options(populate_existing=True)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def initiate_payment(
        self,
        order_id: UUID,
        actor: User,
        provider: PaymentProvider,
        phone: str | None = None,
    ) -> PaymentInitiation:
        """Create the PENDING transaction for an order awaiting payment.

        Args:
            order_id: Order UUID
            actor: Paying customer
            provider: Mobile money provider or CASH
            phone: Payer phone, defaults to the customer's phone

        Returns:
            PaymentInitiation with the transaction, provider instructions and
            the end of the payment window

        Raises:
            NotFound: Order does not exist
            Forbidden: Actor is not the customer
            InvalidTransition: Order is not PAYMENT_PENDING
            PaymentAlreadyInitiated: Order already has a transaction
        """
        order = await self._lock_order(select(Order).where(Order.order_id == order_id))
        if order is None:
            raise NotFound("order")
        if order.customer_id != actor.user_id:
            raise Forbidden("Only the customer can pay for the order")
        if order.status != OrderStatus.PAYMENT_PENDING:
            raise InvalidTransition("order", order.status.value, OrderStatus.PAID.value)
        if order.transaction is not None:
            raise PaymentAlreadyInitiated()

        payer_phone = normalize_phone(phone) if phone else actor.phone

        transaction = Transaction(
            order_id=order.order_id,
            amount=order.total_amount,
            provider=provider,
            payer_phone=payer_phone,
        )
        self.db.add(transaction)
        await self.db.commit()

        logger.info(
            f"Payment initiated for order {order.order_number} via {provider.value}, "
            f"amount {transaction.amount}"
        )

        return PaymentInitiation(
            transaction=transaction,
            instructions=payment_instructions(provider),
            expires_at=utcnow() + timedelta(minutes=settings.PAYMENT_WINDOW_MINUTES),
        )

    async def handle_callback(
        self,
        provider: PaymentProvider,
        order_number: str,
        success: bool,
        provider_ref: str | None = None,
    ) -> Transaction:
        """Apply a provider's payment outcome.

        Success moves the order to PAID, the transaction to COMPLETED and the
        escrow to HELD in one commit. Failure marks the transaction FAILED.
        A repeated callback for an already applied outcome is a no-op.

        Raises:
            NotFound: No transaction for this order number and provider
            InvalidTransition: The outcome conflicts with the current state
        """
        order = await self._lock_order(
            select(Order).where(Order.order_number == order_number)
        )
        transaction = order.transaction if order is not None else None
        if transaction is None or transaction.provider != provider:
            raise NotFound("transaction")

        already = TransactionStatus.COMPLETED if success else TransactionStatus.FAILED
        if transaction.status == already:
            logger.info(f"Duplicate {provider.value} callback for order {order_number}")
            return transaction

        if success:
            order_state.record_payment(order, transaction, provider_ref)
        else:
            order_state.record_payment_failure(transaction, provider_ref)
        await self.db.commit()

        record_payment_callback(provider.value, success)
        if success:
            record_order_transition(order.status.value)
        logger.info(
            f"Payment {transaction.status.value} for order {order_number} "
            f"(ref {provider_ref})"
        )

        data = {
            "order_id": str(order.order_id),
            "order_number": order.order_number,
            "transaction_id": str(transaction.transaction_id),
            "status": transaction.status.value,
            "amount": transaction.amount,
        }
        self.notifier.dispatch(order.customer_id, NotificationKind.PAYMENT, data)
        if success:
            self.notifier.dispatch(order.vendor.user_id, NotificationKind.PAYMENT, data)
        return transaction

    async def get_payment_status(self, transaction_id: UUID, actor: User) -> Transaction:
        """Get a transaction, visible to the paying customer and admins only."""
        result = await self.db.execute(
            select(Transaction)
            .options(selectinload(Transaction.order))
            .where(Transaction.transaction_id == transaction_id)
        )
        transaction = result.scalar_one_or_none()
        if transaction is None:
            raise NotFound("transaction")
        if transaction.order.customer_id != actor.user_id and not actor.is_admin:
            raise Forbidden("Access denied")
        return transaction
