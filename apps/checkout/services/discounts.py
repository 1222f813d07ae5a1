"""
Discount resolver.

Combines the three discount sources of an order into one breakdown:

- manual discount, only after a PIN/NFC authorization
- coupon redemptions (points, percent, free item)
- the paying student's aura discount

The sources are summed first and only the sum is clamped to the subtotal.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from apps.coupons.models import CouponKind, StudentCoupon

from ..exceptions import (
    CouponExhaustedError,
    DiscountNotAuthorizedError,
    InvalidCouponScopeError,
)
from .pricing import PricedCart


@dataclass(frozen=True)
class CouponRedemptionRequest:
    coupon_instance_id: UUID
    quantity: int = 1


@dataclass
class DiscountInput:
    manual_points: int = 0
    authorization_token: Optional[str] = None
    coupon_redemptions: List[CouponRedemptionRequest] = field(default_factory=list)
    aura_discount_points: int = 0


@dataclass(frozen=True)
class CouponCharge:
    """Resolved contribution of one coupon instance."""
    instance_id: UUID
    kind: str
    quantity: int
    discount_points: int


@dataclass(frozen=True)
class DiscountBreakdown:
    manual: int = 0
    coupon: int = 0
    aura: int = 0
    total: int = 0
    coupons: List[CouponCharge] = field(default_factory=list)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole point, halves away from zero."""
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def merge_redemptions(
    redemptions: Iterable[CouponRedemptionRequest]
) -> Dict[UUID, int]:
    """Sum quantities of repeated coupon instances, keeping first-seen order."""
    merged = OrderedDict()
    for redemption in redemptions:
        quantity = max(1, int(redemption.quantity))
        merged[redemption.coupon_instance_id] = (
            merged.get(redemption.coupon_instance_id, 0) + quantity
        )
    return merged


def coupon_value(instance: StudentCoupon, quantity: int, priced_cart: PricedCart) -> int:
    """
    Points one coupon instance takes off the order.

    Raises:
        InvalidCouponScopeError: If the coupon type cannot be evaluated
    """
    coupon_type = instance.coupon_type
    kind = coupon_type.kind

    if kind == CouponKind.POINTS:
        return coupon_type.value * quantity

    elif kind == CouponKind.PERCENT:
        percent = Decimal(coupon_type.value) / Decimal(100)
        if coupon_type.is_item_scoped:
            if coupon_type.item_id is None:
                return 0
            line = priced_cart.first_line_for(coupon_type.item_id)
            if line is None:
                return 0
            return round_half_up(Decimal(line.unit_price) * percent) * quantity
        return round_half_up(Decimal(priced_cart.subtotal) * percent) * quantity

    elif kind == CouponKind.ITEM:
        if coupon_type.item_id is None:
            raise InvalidCouponScopeError(f"Coupon {coupon_type.name} has no item")
        line = priced_cart.first_line_for(coupon_type.item_id)
        if line is None:
            return 0
        return line.unit_price * quantity

    raise InvalidCouponScopeError(f"Unknown coupon kind: {kind}")


def resolve_discounts(
    priced_cart: PricedCart,
    discount_input: DiscountInput,
    *,
    instances: Dict[UUID, StudentCoupon],
    manual_authorized: bool,
    payer_ids: Optional[Iterable[UUID]] = None
) -> DiscountBreakdown:
    """
    Compute the discount breakdown for a priced cart.

    Args:
        priced_cart: Output of price_cart
        discount_input: Requested manual discount, coupons and aura points
        instances: Coupon instances referenced by the request, keyed by id
        manual_authorized: Whether a valid authorization backs the manual discount
        payer_ids: When given, every coupon must belong to one of these students

    Returns:
        DiscountBreakdown whose total never exceeds the subtotal

    Raises:
        DiscountNotAuthorizedError: Manual discount without authorization
        CouponExhaustedError: More uses requested than remain
        InvalidCouponScopeError: Unknown, disabled or foreign coupon
    """
    subtotal = priced_cart.subtotal

    requested_manual = max(0, int(discount_input.manual_points or 0))
    if requested_manual > 0 and not manual_authorized:
        raise DiscountNotAuthorizedError()
    manual = min(requested_manual, subtotal)

    owners = set(payer_ids) if payer_ids is not None else None
    charges = []
    for instance_id, quantity in merge_redemptions(discount_input.coupon_redemptions).items():
        instance = instances.get(instance_id)
        if instance is None:
            raise InvalidCouponScopeError(f"Coupon {instance_id} not found")
        if not instance.coupon_type.enabled:
            raise InvalidCouponScopeError(f"Coupon {instance.coupon_type.name} is disabled")
        if owners is not None and instance.student_id not in owners:
            raise InvalidCouponScopeError(
                f"Coupon {instance.coupon_type.name} does not belong to a payer"
            )
        if quantity > instance.remaining_qty:
            raise CouponExhaustedError(
                f"Only {instance.remaining_qty} use(s) of {instance.coupon_type.name} left"
            )

        charges.append(CouponCharge(
            instance_id=instance_id,
            kind=instance.coupon_type.kind,
            quantity=quantity,
            discount_points=coupon_value(instance, quantity, priced_cart),
        ))

    coupon = sum(charge.discount_points for charge in charges)
    aura = max(0, int(discount_input.aura_discount_points or 0))

    return DiscountBreakdown(
        manual=manual,
        coupon=coupon,
        aura=aura,
        total=min(subtotal, manual + coupon + aura),
        coupons=charges,
    )
