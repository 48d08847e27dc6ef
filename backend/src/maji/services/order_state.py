"""Order, transaction and escrow state machine.

Each operation validates every transition it is about to make and only then
mutates the order (and its transaction). A raised InvalidTransition
therefore leaves both objects untouched. Callers own the session and commit.
"""

from datetime import datetime
from typing import Any

from maji.core.errors import InvalidTransition
from maji.models.base import utcnow
from maji.models.enums import EscrowStatus, OrderStatus, TransactionStatus

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.CANCELLED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.PAYMENT_PENDING, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.REFUNDED: frozenset(),
}

# PAID is cancellable even though PAID -> CANCELLED is not a plain status update
CANCELLABLE_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.PAYMENT_PENDING,
    OrderStatus.PAID,
    OrderStatus.PREPARING,
})

TRANSACTION_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({
        TransactionStatus.PROCESSING,
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
    }),
    TransactionStatus.PROCESSING: frozenset({
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
    }),
    TransactionStatus.COMPLETED: frozenset({TransactionStatus.REFUNDED}),
    TransactionStatus.FAILED: frozenset(),
    TransactionStatus.REFUNDED: frozenset(),
}

ESCROW_TRANSITIONS: dict[EscrowStatus, frozenset[EscrowStatus]] = {
    EscrowStatus.NONE: frozenset({EscrowStatus.HELD}),
    EscrowStatus.HELD: frozenset({EscrowStatus.RELEASED, EscrowStatus.REFUNDED}),
    EscrowStatus.RELEASED: frozenset(),
    EscrowStatus.REFUNDED: frozenset(),
}


# ==================== Checks (no mutation) ====================


def _check(table: dict, entity: str, current, requested) -> None:
    if requested not in table.get(current, ()):
        raise InvalidTransition(entity, current.value, requested.value)


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Return True if the order table allows current -> requested."""
    return requested in ORDER_TRANSITIONS.get(current, ())


def check_order(order, requested: OrderStatus) -> None:
    _check(ORDER_TRANSITIONS, "order", order.status, requested)


def check_transaction(transaction, requested: TransactionStatus) -> None:
    _check(TRANSACTION_TRANSITIONS, "transaction", transaction.status, requested)


def check_escrow(
    transaction,
    requested: EscrowStatus,
    transaction_status: TransactionStatus | None = None,
) -> None:
    """Validate an escrow move.

    Args:
        transaction: Transaction holding the escrow
        requested: Target escrow status
        transaction_status: Transaction status the escrow move will coexist
            with, defaults to the current one
    """
    _check(ESCROW_TRANSITIONS, "escrow", transaction.escrow_status, requested)
    if transaction_status is None:
        transaction_status = transaction.status
    if requested == EscrowStatus.HELD and transaction_status != TransactionStatus.COMPLETED:
        raise InvalidTransition("escrow", transaction.escrow_status.value, requested.value)


# ==================== Order operations ====================


def accept(order, now: datetime | None = None) -> None:
    """Accept a PENDING order.

    The order passes through ACCEPTED straight to PAYMENT_PENDING, so the
    persisted status after accept is always PAYMENT_PENDING.
    """
    check_order(order, OrderStatus.ACCEPTED)
    now = now or utcnow()
    order.accepted_at = now
    order.status = OrderStatus.PAYMENT_PENDING


def complete(order, now: datetime | None = None) -> None:
    """Complete a DELIVERED order, releasing a held escrow."""
    if order.status != OrderStatus.DELIVERED:
        raise InvalidTransition("order", order.status.value, OrderStatus.COMPLETED.value)
    transaction = order.transaction
    release = transaction is not None and transaction.escrow_status == EscrowStatus.HELD
    if release:
        check_escrow(transaction, EscrowStatus.RELEASED)

    now = now or utcnow()
    order.status = OrderStatus.COMPLETED
    order.completed_at = now
    if release:
        transaction.escrow_status = EscrowStatus.RELEASED
        transaction.escrow_released_at = now


def cancel(order, reason: str | None = None, now: datetime | None = None) -> None:
    """Cancel an order, refunding a completed payment in the same step."""
    if order.status not in CANCELLABLE_STATUSES:
        raise InvalidTransition("order", order.status.value, OrderStatus.CANCELLED.value)
    transaction = order.transaction
    refund_payment = (
        transaction is not None and transaction.status == TransactionStatus.COMPLETED
    )
    refund_escrow = refund_payment and transaction.escrow_status == EscrowStatus.HELD
    if refund_payment:
        check_transaction(transaction, TransactionStatus.REFUNDED)
    if refund_escrow:
        check_escrow(transaction, EscrowStatus.REFUNDED)

    order.status = OrderStatus.CANCELLED
    order.cancelled_at = now or utcnow()
    order.cancel_reason = reason
    if refund_payment:
        transaction.status = TransactionStatus.REFUNDED
    if refund_escrow:
        transaction.escrow_status = EscrowStatus.REFUNDED


def refund(order) -> None:
    """Move a CANCELLED order to REFUNDED once its payment was refunded."""
    check_order(order, OrderStatus.REFUNDED)
    transaction = order.transaction
    if transaction is None or transaction.status != TransactionStatus.REFUNDED:
        raise InvalidTransition("order", order.status.value, OrderStatus.REFUNDED.value)
    order.status = OrderStatus.REFUNDED


def update_status(order, requested: OrderStatus, now: datetime | None = None) -> None:
    """Apply a requested status if the transition table allows it.

    Targets with side effects are routed through their dedicated operation.

    Raises:
        InvalidTransition: requested is not allowed from the current status
    """
    check_order(order, requested)

    if requested == OrderStatus.ACCEPTED:
        accept(order, now)
    elif requested == OrderStatus.CANCELLED:
        cancel(order, now=now)
    elif requested == OrderStatus.COMPLETED:
        complete(order, now)
    elif requested == OrderStatus.REFUNDED:
        refund(order)
    else:
        if requested == OrderStatus.DELIVERED:
            order.delivered_at = now or utcnow()
        order.status = requested


# ==================== Payment operations ====================


def record_payment(order, transaction, provider_ref: str | None = None) -> None:
    """Apply a successful payment: order PAID, transaction COMPLETED, escrow HELD.

    All three moves are validated before any is applied.
    """
    check_order(order, OrderStatus.PAID)
    check_transaction(transaction, TransactionStatus.COMPLETED)
    check_escrow(transaction, EscrowStatus.HELD, TransactionStatus.COMPLETED)

    transaction.status = TransactionStatus.COMPLETED
    transaction.escrow_status = EscrowStatus.HELD
    if provider_ref:
        transaction.provider_ref = provider_ref
    order.status = OrderStatus.PAID


def record_payment_failure(transaction, provider_ref: str | None = None) -> None:
    check_transaction(transaction, TransactionStatus.FAILED)
    transaction.status = TransactionStatus.FAILED
    if provider_ref:
        transaction.provider_ref = provider_ref


# ==================== Timeline ====================


def status_timeline(order) -> list[dict[str, Any]]:
    """Build the ordered list of status milestones reached by an order."""
    timeline: list[dict[str, Any]] = [
        {"status": OrderStatus.PENDING, "timestamp": order.created_at}
    ]
    if order.accepted_at:
        timeline.append({"status": OrderStatus.ACCEPTED, "timestamp": order.accepted_at})
    transaction = order.transaction
    if transaction is not None and transaction.escrow_status != EscrowStatus.NONE:
        timeline.append({"status": OrderStatus.PAID, "timestamp": transaction.updated_at})
    if order.delivered_at:
        timeline.append({"status": OrderStatus.DELIVERED, "timestamp": order.delivered_at})
    if order.completed_at:
        timeline.append({"status": OrderStatus.COMPLETED, "timestamp": order.completed_at})
    if order.cancelled_at:
        timeline.append({"status": OrderStatus.CANCELLED, "timestamp": order.cancelled_at})
    return timeline
