"""
Checkout ledger.

The only code path that debits camp point balances. A checkout is validated
up front (payers, cart, split) and then committed in a single transaction:
payer accounts and coupon instances are locked, the quote is recomputed
from current menu and coupon state, balances are checked, and the order,
its lines, payments and coupon redemptions are written together.

Re-submitting the same order within the idempotency window returns the
order that was already committed instead of charging twice.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional, Sequence
from uuid import UUID

from django.db import OperationalError, connection, transaction
from django.utils import timezone

from apps.access.exceptions import AuthorizationTokenError
from apps.access.services import consume_token
from apps.coupons.services import get_coupon_instances
from apps.students.models import Student

from ..conf import camp_setting
from ..exceptions import (
    CheckoutTimeoutError,
    DiscountNotAuthorizedError,
    InsufficientBalanceError,
    InvalidPayerError,
    PayableMismatchError,
)
from ..models import (
    CampAccount,
    CouponRedemption,
    Order,
    OrderLine,
    OrderStatus,
    Payment,
)
from .discounts import DiscountInput
from .pricing import CartLine, PricedCart, price_cart
from .quotes import build_quote, compute_quote, with_aura
from .splitting import Payer, reconcile_split, validate_payers

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected
LOCK_SQLSTATES = {'55P03', '40P01'}
# ER_LOCK_WAIT_TIMEOUT, ER_LOCK_DEADLOCK
MYSQL_LOCK_ERRORS = {1205, 1213}


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    duplicate: bool = False


def checkout_fingerprint(payers: Sequence[Payer], priced_cart: PricedCart, total: int) -> str:
    """
    SHA-256 over the payer set, the item set and the total.

    Both sets are sorted so the same order entered in a different sequence
    produces the same fingerprint.
    """
    payload = {
        'payers': sorted([str(payer.student_id), payer.amount] for payer in payers),
        'items': sorted(
            [str(line.item_id), line.quantity, line.second]
            for line in priced_cart.lines
        ),
        'total': total,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(',', ':'))
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()


def idempotency_window_seconds(requested: Optional[int] = None) -> int:
    """Caller's window, or the configured default, capped at the maximum."""
    if requested is None:
        requested = camp_setting('IDEMPOTENCY_WINDOW_SECONDS')
    return max(0, min(int(requested), camp_setting('MAX_IDEMPOTENCY_WINDOW_SECONDS')))


def find_duplicate(fingerprint: str, window_seconds: int) -> Optional[Order]:
    """Most recent paid order with this fingerprint inside the window."""
    if window_seconds <= 0:
        return None
    since = timezone.now() - timedelta(seconds=window_seconds)
    return (
        Order.objects
        .filter(
            fingerprint=fingerprint,
            status=OrderStatus.PAID,
            paid_at__gte=since,
        )
        .order_by('-paid_at')
        .first()
    )


def apply_lock_timeout() -> None:
    """Bound row lock waits for the current transaction (PostgreSQL only)."""
    if connection.vendor != 'postgresql':
        return
    milliseconds = int(float(camp_setting('LOCK_TIMEOUT_SECONDS')) * 1000)
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = '{milliseconds}ms'")


def is_lock_contention(error: OperationalError) -> bool:
    """
    Whether a database error means a row lock could not be taken in time.

    Covers PostgreSQL lock_timeout and deadlock aborts, MySQL lock wait
    timeouts and deadlocks, and SQLite busy errors. Anything else (a dropped
    connection, say) is not lock contention.
    """
    cause = error.__cause__ or error
    sqlstate = getattr(cause, 'pgcode', None) or getattr(cause, 'sqlstate', None)
    if sqlstate:
        return sqlstate in LOCK_SQLSTATES
    args = getattr(cause, 'args', ())
    if args and args[0] in MYSQL_LOCK_ERRORS:
        return True
    message = str(cause)
    return 'database is locked' in message or 'database table is locked' in message


def lock_accounts(student_ids: Sequence[UUID]) -> Dict[UUID, CampAccount]:
    """
    Lock the camp accounts of the given students, creating missing ones.

    Rows are created and locked in student id order so overlapping checkouts
    and refunds cannot deadlock.
    """
    for student_id in sorted(set(student_ids)):
        CampAccount.objects.get_or_create(student_id=student_id)
    accounts = (
        CampAccount.objects
        .select_for_update()
        .filter(student_id__in=student_ids)
        .order_by('student_id')
    )
    return {account.student_id: account for account in accounts}


def _ensure_active_students(student_ids: Sequence[UUID]) -> None:
    active = set(
        Student.objects
        .filter(id__in=student_ids, is_active=True)
        .values_list('id', flat=True)
    )
    for student_id in student_ids:
        if student_id not in active:
            raise InvalidPayerError(f"Student {student_id} not found or inactive")


def checkout(
    *,
    cart: Sequence[CartLine],
    discount_input: DiscountInput,
    payers: Sequence[Payer],
    idempotency_window: Optional[int] = None,
    expected_payable: Optional[int] = None,
    aura_student_id: Optional[UUID] = None,
    cashier=None,
    paid_by: str = ''
) -> CheckoutResult:
    """
    Commit an order paid with camp points.

    Args:
        cart: Cart lines
        discount_input: Manual discount/authorization and coupon redemptions
        payers: Declared split, debited in this order
        idempotency_window: Seconds to look back for a duplicate submission
        expected_payable: Payable total shown to the cashier, if known
        aura_student_id: Student whose aura applies (defaults to first payer)
        cashier: Staff user ringing up the order
        paid_by: Free-text label shown on receipts

    Returns:
        CheckoutResult; ``duplicate`` is True when an already committed order
        was returned instead of creating a new one

    Raises:
        NoPayersError, TooManyPayersError, InvalidPayerError: Bad payer list
        EmptyCartError, InvalidItemError: Bad cart
        PaymentMismatchError: Declared amounts don't add up
        DiscountNotAuthorizedError, CouponExhaustedError,
        InvalidCouponScopeError: Discount problems
        PayableMismatchError: Prices or coupons changed since the quote
        InsufficientBalanceError: A payer cannot cover their share
        CheckoutTimeoutError: Locks not acquired in time
    """
    validate_payers(payers)
    payer_ids = [payer.student_id for payer in payers]
    _ensure_active_students(payer_ids)

    priced_cart = price_cart(cart)
    declared = sum(payer.amount for payer in payers)
    fingerprint = checkout_fingerprint(payers, priced_cart, declared)
    window = idempotency_window_seconds(idempotency_window)

    existing = find_duplicate(fingerprint, window)
    if existing is not None:
        logger.info("Duplicate checkout absorbed, returning order %s", existing.id)
        return CheckoutResult(order=existing, duplicate=True)

    if expected_payable is None:
        expected_payable = compute_quote(
            cart=cart,
            discount_input=discount_input,
            payer_ids=payer_ids,
            aura_student_id=aura_student_id,
        ).payable
    reconcile_split(expected_payable, payers)

    try:
        with transaction.atomic():
            apply_lock_timeout()
            return _commit(
                cart=cart,
                discount_input=discount_input,
                payers=payers,
                declared=declared,
                fingerprint=fingerprint,
                window=window,
                aura_student_id=aura_student_id,
                cashier=cashier,
                paid_by=paid_by,
            )
    except OperationalError as e:
        if not is_lock_contention(e):
            logger.exception("Checkout failed with a database error")
            raise
        logger.warning("Checkout timed out waiting for locks: %s", e)
        raise CheckoutTimeoutError()


def _commit(
    *,
    cart,
    discount_input,
    payers,
    declared,
    fingerprint,
    window,
    aura_student_id,
    cashier,
    paid_by
) -> CheckoutResult:
    payer_ids = [payer.student_id for payer in payers]
    accounts = lock_accounts(payer_ids)

    # Another request may have committed while we waited for the locks
    existing = find_duplicate(fingerprint, window)
    if existing is not None:
        logger.info("Duplicate checkout absorbed under lock, returning order %s", existing.id)
        return CheckoutResult(order=existing, duplicate=True)

    instances = get_coupon_instances(
        (redemption.coupon_instance_id for redemption in discount_input.coupon_redemptions),
        lock=True,
    )

    manual_authorized = False
    if discount_input.manual_points and discount_input.manual_points > 0:
        try:
            consume_token(discount_input.authorization_token)
        except AuthorizationTokenError as e:
            raise DiscountNotAuthorizedError(str(e))
        manual_authorized = True

    quote = build_quote(
        price_cart(cart),
        with_aura(discount_input, aura_student_id=aura_student_id, payer_ids=payer_ids),
        instances=instances,
        manual_authorized=manual_authorized,
        payer_ids=payer_ids,
    )
    if quote.payable != declared:
        logger.warning(
            "Checkout rejected: payable %s recomputed, %s declared",
            quote.payable, declared,
        )
        raise PayableMismatchError(
            f"Order total is now {quote.payable}, split declared {declared}"
        )

    for payer in payers:
        account = accounts[payer.student_id]
        if account.balance_points < payer.amount:
            logger.warning(
                "Checkout rejected: student %s has %s pts, needs %s",
                payer.student_id, account.balance_points, payer.amount,
            )
            raise InsufficientBalanceError(
                f"Student {payer.student_id} has {account.balance_points} pts, "
                f"needs {payer.amount}"
            )

    discounts = quote.discounts
    order = Order.objects.create(
        status=OrderStatus.DRAFT,
        cashier=cashier,
        paid_by=paid_by or '',
        subtotal_points=quote.subtotal,
        manual_discount_points=discounts.manual,
        coupon_discount_points=discounts.coupon,
        aura_discount_points=discounts.aura,
        total_discount_points=discounts.total,
        payable_points=quote.payable,
        fingerprint=fingerprint,
    )

    OrderLine.objects.bulk_create([
        OrderLine(
            order=order,
            menu_item_id=line.item_id,
            item_name=line.item_name,
            unit_price_points=line.unit_price,
            quantity=line.quantity,
            second=line.second,
            line_total_points=line.line_total,
            position=position,
        )
        for position, line in enumerate(quote.cart.lines)
    ])

    for position, payer in enumerate(payers):
        account = accounts[payer.student_id]
        balance_before = account.balance_points
        account.balance_points = balance_before - payer.amount
        account.save(update_fields=['balance_points', 'updated_at'])
        Payment.objects.create(
            order=order,
            student_id=payer.student_id,
            amount_points=payer.amount,
            balance_before=balance_before,
            balance_after=account.balance_points,
            position=position,
        )

    for charge in discounts.coupons:
        instance = instances[charge.instance_id]
        instance.remaining_qty -= charge.quantity
        instance.save(update_fields=['remaining_qty', 'updated_at'])
        CouponRedemption.objects.create(
            order=order,
            student_coupon=instance,
            kind=charge.kind,
            quantity=charge.quantity,
            discount_points=charge.discount_points,
        )

    order.mark_paid()
    logger.info(
        "Checkout committed: order %s, %s pts from %s payer(s)",
        order.id, order.payable_points, len(payers),
    )
    return CheckoutResult(order=order, duplicate=False)
