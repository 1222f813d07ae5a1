"""
Coupon and aura lookups used by the register.

Counters are read here but only ever decremented by the checkout ledger.
"""

from typing import Dict, Iterable
from uuid import UUID

from django.db.models import QuerySet

from .models import StudentCoupon, StudentAura


def get_available_coupons(student_id: UUID) -> QuerySet:
    """Coupon instances the student can still redeem."""
    return (
        StudentCoupon.objects
        .filter(
            student_id=student_id,
            remaining_qty__gt=0,
            coupon_type__enabled=True,
        )
        .select_related('coupon_type', 'coupon_type__item')
        .order_by('created_at')
    )


def get_aura_discount(student_id: UUID) -> int:
    """Aura discount for the student, 0 when they have none."""
    aura = StudentAura.objects.filter(student_id=student_id).first()
    if aura is None:
        return 0
    return max(0, aura.discount_points)


def get_coupon_instances(
    instance_ids: Iterable[UUID],
    *,
    lock: bool = False
) -> Dict[UUID, StudentCoupon]:
    """
    Load coupon instances by id.

    With ``lock=True`` the rows are locked (ordered by id so concurrent
    checkouts acquire them in the same order); the caller must already be
    inside a transaction.
    """
    queryset = StudentCoupon.objects.select_related('coupon_type', 'coupon_type__item')
    if lock:
        queryset = queryset.select_for_update()
    instances = queryset.filter(id__in=set(instance_ids)).order_by('id')
    return {instance.id: instance for instance in instances}
