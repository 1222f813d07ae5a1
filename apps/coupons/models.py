from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator
from django.db import models
import uuid


class CouponKind(models.TextChoices):
    POINTS = 'points', 'Points off'
    PERCENT = 'percent', 'Percent off'
    ITEM = 'item', 'Free item'


class CouponScope(models.TextChoices):
    ORDER = 'order', 'Whole order'
    ITEM = 'item', 'Single item'


class CouponType(models.Model):
    """
    Template for a coupon that can be granted to students.

    ``value`` means points for POINTS coupons and a percentage for PERCENT
    coupons; ITEM coupons ignore it and waive the price of ``item``.
    A PERCENT coupon with ITEM scope only discounts ``item``; it never falls
    back to the whole order when the item is missing.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    kind = models.CharField(
        max_length=20,
        choices=CouponKind.choices,
        default=CouponKind.POINTS
    )
    value = models.PositiveIntegerField(default=0)
    scope = models.CharField(
        max_length=10,
        choices=CouponScope.choices,
        default=CouponScope.ORDER
    )
    item = models.ForeignKey(
        'menus.MenuItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='coupon_types'
    )
    enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'camp_coupon_types'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.get_kind_display()})"

    @property
    def is_item_scoped(self):
        return self.kind == CouponKind.ITEM or self.scope == CouponScope.ITEM

    def clean(self):
        if self.kind == CouponKind.ITEM and self.item_id is None:
            raise ValidationError({'item': 'Free item coupons need an item.'})
        if self.kind == CouponKind.PERCENT:
            MaxValueValidator(100)(self.value)
            if self.scope == CouponScope.ITEM and self.item_id is None:
                raise ValidationError({'item': 'Item-scoped coupons need an item.'})
            if self.scope == CouponScope.ORDER and self.item_id is not None:
                raise ValidationError({'scope': 'Order-wide coupons cannot target an item.'})


class StudentCoupon(models.Model):
    """A student's stock of one coupon type (a coupon instance)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='coupons'
    )
    coupon_type = models.ForeignKey(
        CouponType,
        on_delete=models.CASCADE,
        related_name='instances'
    )
    remaining_qty = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_student_coupons'
        unique_together = [['student', 'coupon_type']]
        indexes = [
            models.Index(fields=['student', 'remaining_qty'], name='student_coupons_remaining_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.student} - {self.coupon_type.name} x{self.remaining_qty}"


class StudentAura(models.Model):
    """Loyalty aura granting an automatic discount at the register."""

    student = models.OneToOneField(
        'students.Student',
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='aura'
    )
    aura_name = models.CharField(max_length=100)
    discount_points = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_student_auras'

    def __str__(self):
        return f"{self.student} - {self.aura_name} (-{self.discount_points})"
