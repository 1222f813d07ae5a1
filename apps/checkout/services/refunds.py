"""
Refund reverser.

A refund is always the full order: every payment is credited back to the
payer's current balance. Coupon uses consumed by the order stay consumed.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import OperationalError, transaction

from ..exceptions import (
    AlreadyRefundedError,
    CheckoutTimeoutError,
    OrderNotFoundError,
)
from ..models import Order, OrderStatus, Refund, RefundEntry
from .ledger import apply_lock_timeout, is_lock_contention, lock_accounts

logger = logging.getLogger(__name__)


def refund(*, order_id: UUID, refunded_by=None) -> Order:
    """
    Reverse a paid order.

    Credits are applied to the balance each payer has now, not the balance
    recorded at checkout, so spending in between is preserved.

    Args:
        order_id: UUID of the order
        refunded_by: Staff user performing the refund

    Returns:
        The refunded Order

    Raises:
        OrderNotFoundError: If the order doesn't exist
        AlreadyRefundedError: If the order was refunded before
        InvalidStateTransitionError: If the order was never paid
        CheckoutTimeoutError: Locks not acquired in time
    """
    try:
        with transaction.atomic():
            apply_lock_timeout()
            return _reverse(order_id=order_id, refunded_by=refunded_by)
    except OperationalError as e:
        if not is_lock_contention(e):
            logger.exception("Refund of order %s failed with a database error", order_id)
            raise
        logger.warning("Refund of order %s timed out waiting for locks: %s", order_id, e)
        raise CheckoutTimeoutError()


def _reverse(*, order_id, refunded_by) -> Order:
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except (Order.DoesNotExist, ValueError, ValidationError):
        raise OrderNotFoundError(f"Order {order_id} not found")

    if order.status == OrderStatus.REFUNDED or Refund.objects.filter(order=order).exists():
        logger.warning("Refund rejected: order %s already refunded", order.id)
        raise AlreadyRefundedError()

    payments = list(order.payments.order_by('position'))
    accounts = lock_accounts([payment.student_id for payment in payments])

    # Transition first so an unpaid order fails before any balance moves
    order.mark_refunded()

    refund_record = Refund.objects.create(
        order=order,
        refunded_points=sum(payment.amount_points for payment in payments),
        refunded_by=refunded_by,
    )
    for payment in payments:
        account = accounts[payment.student_id]
        balance_before = account.balance_points
        account.balance_points = balance_before + payment.amount_points
        account.save(update_fields=['balance_points', 'updated_at'])
        RefundEntry.objects.create(
            refund=refund_record,
            payment=payment,
            amount_points=payment.amount_points,
            balance_before=balance_before,
            balance_after=account.balance_points,
        )

    logger.info(
        "Refund committed: order %s, %s pts to %s payer(s)",
        order.id, refund_record.refunded_points, len(payments),
    )
    return order
