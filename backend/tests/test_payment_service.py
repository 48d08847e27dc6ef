"""Tests for PaymentService: initiation and provider callbacks."""

from uuid import uuid4

import pytest

from maji.core.errors import Forbidden, InvalidTransition, NotFound, PaymentAlreadyInitiated
from maji.models.enums import (
    EscrowStatus,
    NotificationKind,
    OrderStatus,
    PaymentProvider,
    TransactionStatus,
)
from maji.services.payment_service import PaymentService, payment_instructions


@pytest.fixture
def service(db_session, mock_notifier):
    return PaymentService(db_session, mock_notifier)


def test_payment_instructions():
    assert "*144" in payment_instructions(PaymentProvider.ORANGE_MONEY)
    assert payment_instructions(PaymentProvider.CASH) == "Pay cash on delivery"


class TestInitiatePayment:
    @pytest.mark.asyncio
    async def test_creates_pending_transaction(self, service, make_order, customer):
        order = await make_order(OrderStatus.PAYMENT_PENDING)

        initiation = await service.initiate_payment(
            order.order_id, customer, PaymentProvider.ORANGE_MONEY, phone="076 123 456"
        )

        transaction = initiation.transaction
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.escrow_status == EscrowStatus.NONE
        assert transaction.amount == order.total_amount
        assert transaction.payer_phone == "+23276123456"
        assert initiation.expires_at > transaction.created_at

    @pytest.mark.asyncio
    async def test_defaults_to_customer_phone(self, service, make_order, customer):
        order = await make_order(OrderStatus.PAYMENT_PENDING)
        initiation = await service.initiate_payment(
            order.order_id, customer, PaymentProvider.AFRICELL_MONEY
        )
        assert initiation.transaction.payer_phone == customer.phone

    @pytest.mark.asyncio
    async def test_order_must_await_payment(self, service, make_order, customer):
        order = await make_order(OrderStatus.PENDING)
        with pytest.raises(InvalidTransition):
            await service.initiate_payment(order.order_id, customer, PaymentProvider.CASH)

    @pytest.mark.asyncio
    async def test_only_once(self, service, make_order, customer):
        order = await make_order(OrderStatus.PAYMENT_PENDING)
        await service.initiate_payment(order.order_id, customer, PaymentProvider.CASH)
        with pytest.raises(PaymentAlreadyInitiated):
            await service.initiate_payment(order.order_id, customer, PaymentProvider.CASH)

    @pytest.mark.asyncio
    async def test_only_customer(self, service, make_order, vendor_owner):
        order = await make_order(OrderStatus.PAYMENT_PENDING)
        with pytest.raises(Forbidden):
            await service.initiate_payment(order.order_id, vendor_owner, PaymentProvider.CASH)


class TestCallback:
    @pytest.mark.asyncio
    async def test_success_holds_escrow(self, service, make_order, customer, vendor_owner, mock_notifier):
        order = await make_order(OrderStatus.PAYMENT_PENDING, TransactionStatus.PENDING)

        transaction = await service.handle_callback(
            PaymentProvider.ORANGE_MONEY, order.order_number, True, "OM-42"
        )

        assert transaction.status == TransactionStatus.COMPLETED
        assert transaction.escrow_status == EscrowStatus.HELD
        assert transaction.provider_ref == "OM-42"
        assert order.status == OrderStatus.PAID

        recipients = [c.args[0] for c in mock_notifier.dispatch.call_args_list]
        assert recipients == [customer.user_id, vendor_owner.user_id]
        assert all(c.args[1] == NotificationKind.PAYMENT for c in mock_notifier.dispatch.call_args_list)

    @pytest.mark.asyncio
    async def test_duplicate_success_is_noop(self, service, make_order, mock_notifier):
        order = await make_order(OrderStatus.PAYMENT_PENDING, TransactionStatus.PENDING)
        await service.handle_callback(PaymentProvider.ORANGE_MONEY, order.order_number, True)
        mock_notifier.dispatch.reset_mock()

        transaction = await service.handle_callback(
            PaymentProvider.ORANGE_MONEY, order.order_number, True
        )

        assert transaction.status == TransactionStatus.COMPLETED
        mock_notifier.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_leaves_order(self, service, make_order):
        order = await make_order(OrderStatus.PAYMENT_PENDING, TransactionStatus.PENDING)

        transaction = await service.handle_callback(
            PaymentProvider.ORANGE_MONEY, order.order_number, False
        )

        assert transaction.status == TransactionStatus.FAILED
        assert transaction.escrow_status == EscrowStatus.NONE
        assert order.status == OrderStatus.PAYMENT_PENDING

    @pytest.mark.asyncio
    async def test_success_after_cancel_rejected(self, service, make_order, customer):
        order = await make_order(OrderStatus.CANCELLED, TransactionStatus.PENDING)

        with pytest.raises(InvalidTransition):
            await service.handle_callback(PaymentProvider.ORANGE_MONEY, order.order_number, True)

    @pytest.mark.asyncio
    async def test_provider_mismatch(self, service, make_order):
        order = await make_order(OrderStatus.PAYMENT_PENDING, TransactionStatus.PENDING)
        with pytest.raises(NotFound):
            await service.handle_callback(
                PaymentProvider.AFRICELL_MONEY, order.order_number, True
            )

    @pytest.mark.asyncio
    async def test_unknown_order(self, service):
        with pytest.raises(NotFound):
            await service.handle_callback(PaymentProvider.ORANGE_MONEY, "MJ-2026-FFFFFF", True)


class TestPaymentStatus:
    @pytest.mark.asyncio
    async def test_visible_to_customer_and_admin(self, service, make_order, customer, admin, vendor_owner):
        order = await make_order(OrderStatus.PAYMENT_PENDING)
        initiation = await service.initiate_payment(order.order_id, customer, PaymentProvider.CASH)
        transaction_id = initiation.transaction.transaction_id

        assert (await service.get_payment_status(transaction_id, customer)).transaction_id == transaction_id
        assert (await service.get_payment_status(transaction_id, admin)).transaction_id == transaction_id
        with pytest.raises(Forbidden):
            await service.get_payment_status(transaction_id, vendor_owner)

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, service, customer):
        with pytest.raises(NotFound):
            await service.get_payment_status(uuid4(), customer)
