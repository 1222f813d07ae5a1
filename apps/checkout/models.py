from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class OrderStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    PAID = 'paid', 'Paid'
    REFUNDED = 'refunded', 'Refunded'


# Allowed forward moves; REFUNDED is terminal.
ORDER_TRANSITIONS = {
    OrderStatus.DRAFT: {OrderStatus.PAID},
    OrderStatus.PAID: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),
}


class CampAccount(models.Model):
    """
    Camp point balance of one student.

    Balances are only changed by the checkout ledger and the refund
    reverser, always under a row lock.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.OneToOneField(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='camp_account'
    )
    balance_points = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_accounts'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance_points__gte=0),
                name='camp_account_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.student} - {self.balance_points} pts"


class Order(models.Model):
    """Camp register order paid with camp points."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.DRAFT
    )

    # Who rang it up
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='camp_orders'
    )
    paid_by = models.CharField(max_length=100, blank=True)

    # Totals (points)
    subtotal_points = models.PositiveIntegerField(default=0)
    manual_discount_points = models.PositiveIntegerField(default=0)
    coupon_discount_points = models.PositiveIntegerField(default=0)
    aura_discount_points = models.PositiveIntegerField(default=0)
    total_discount_points = models.PositiveIntegerField(default=0)
    payable_points = models.PositiveIntegerField(default=0)

    # Duplicate-submission detection
    fingerprint = models.CharField(max_length=64, db_index=True)

    paid_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_orders'
        indexes = [
            models.Index(fields=['fingerprint', 'paid_at'], name='camp_orders_fingerprint_idx'),
            models.Index(fields=['status', 'paid_at'], name='camp_orders_status_idx'),
        ]
        ordering = ['-paid_at', '-created_at']

    def __str__(self):
        return f"Order {str(self.id)[:8]} - {self.payable_points} pts ({self.status})"

    @property
    def is_refunded(self):
        return self.status == OrderStatus.REFUNDED

    def transition_to(self, new_status):
        """Move the order forward one state."""
        from .exceptions import InvalidStateTransitionError

        if new_status not in ORDER_TRANSITIONS[OrderStatus(self.status)]:
            raise InvalidStateTransitionError(
                f"Order cannot move from {self.status} to {new_status}."
            )
        self.status = new_status

    def mark_paid(self):
        self.transition_to(OrderStatus.PAID)
        self.paid_at = timezone.now()
        self.save(update_fields=['status', 'paid_at', 'updated_at'])

    def mark_refunded(self):
        self.transition_to(OrderStatus.REFUNDED)
        self.save(update_fields=['status', 'updated_at'])


class OrderLine(models.Model):
    """Cart snapshot: what was sold and the unit price actually charged."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='lines'
    )
    menu_item = models.ForeignKey(
        'menus.MenuItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_lines'
    )
    item_name = models.CharField(max_length=100)
    unit_price_points = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField()
    second = models.BooleanField(default=False)
    line_total_points = models.PositiveIntegerField()
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        db_table = 'camp_order_lines'
        ordering = ['order', 'position']

    def __str__(self):
        return f"{self.item_name} x{self.quantity}"


class Payment(models.Model):
    """
    One payer's debit for an order.

    balance_before/balance_after are captured at commit time and never
    recomputed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.PROTECT,
        related_name='camp_payments'
    )
    amount_points = models.PositiveIntegerField()
    balance_before = models.IntegerField()
    balance_after = models.IntegerField()
    position = models.PositiveSmallIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'camp_payments'
        unique_together = [['order', 'student']]
        indexes = [
            models.Index(fields=['student', 'created_at'], name='camp_payments_student_idx'),
        ]
        ordering = ['order', 'position']

    def __str__(self):
        return f"{self.student} paid {self.amount_points} pts"


class CouponRedemption(models.Model):
    """Coupon uses consumed by an order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='coupon_redemptions'
    )
    student_coupon = models.ForeignKey(
        'coupons.StudentCoupon',
        on_delete=models.PROTECT,
        related_name='redemptions'
    )
    kind = models.CharField(max_length=20)
    quantity = models.PositiveIntegerField()
    discount_points = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'camp_coupon_redemptions'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.student_coupon} x{self.quantity} (-{self.discount_points})"


class Refund(models.Model):
    """Full reversal of an order; at most one per order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(
        Order,
        on_delete=models.CASCADE,
        related_name='refund'
    )
    refunded_points = models.PositiveIntegerField()
    refunded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='camp_refunds'
    )
    refunded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'camp_order_refunds'
        ordering = ['-refunded_at']

    def __str__(self):
        return f"Refund of {self.refunded_points} pts for order {str(self.order_id)[:8]}"


class RefundEntry(models.Model):
    """Per-payment credit written by a refund."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    refund = models.ForeignKey(
        Refund,
        on_delete=models.CASCADE,
        related_name='entries'
    )
    payment = models.OneToOneField(
        Payment,
        on_delete=models.CASCADE,
        related_name='refund_entry'
    )
    amount_points = models.PositiveIntegerField()
    balance_before = models.IntegerField()
    balance_after = models.IntegerField()

    class Meta:
        db_table = 'camp_refund_entries'
        ordering = ['payment__position']

    def __str__(self):
        return f"+{self.amount_points} pts to {self.payment.student}"
