"""
Order quotes.

A quote is the register's non-authoritative preview: it prices the cart and
resolves discounts without writing anything. The checkout ledger repeats
the same computation under locks and rejects the order if the numbers moved.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Sequence
from uuid import UUID

from apps.access.exceptions import AuthorizationTokenError
from apps.access.services import check_token
from apps.coupons.models import StudentCoupon
from apps.coupons.services import get_aura_discount, get_coupon_instances

from ..exceptions import DiscountNotAuthorizedError
from .discounts import DiscountBreakdown, DiscountInput, resolve_discounts
from .pricing import CartLine, PricedCart, price_cart


@dataclass(frozen=True)
class Quote:
    cart: PricedCart
    discounts: DiscountBreakdown

    @property
    def subtotal(self) -> int:
        return self.cart.subtotal

    @property
    def payable(self) -> int:
        return self.cart.subtotal - self.discounts.total

    def to_dict(self):
        return {
            'lines': [
                {
                    'item_id': line.item_id,
                    'item_name': line.item_name,
                    'unit_price': line.unit_price,
                    'quantity': line.quantity,
                    'second': line.second,
                    'line_total': line.line_total,
                }
                for line in self.cart.lines
            ],
            'subtotal': self.subtotal,
            'discounts': {
                'manual': self.discounts.manual,
                'coupon': self.discounts.coupon,
                'aura': self.discounts.aura,
                'total': self.discounts.total,
                'coupons': [
                    {
                        'coupon_instance_id': charge.instance_id,
                        'kind': charge.kind,
                        'quantity': charge.quantity,
                        'discount_points': charge.discount_points,
                    }
                    for charge in self.discounts.coupons
                ],
            },
            'payable': self.payable,
        }


def with_aura(
    discount_input: DiscountInput,
    *,
    aura_student_id: Optional[UUID] = None,
    payer_ids: Optional[Sequence[UUID]] = None
) -> DiscountInput:
    """
    Replace any client-sent aura amount with the server-side value.

    The aura belongs to ``aura_student_id``, or the first payer when not
    given. Without either there is no aura discount.
    """
    if aura_student_id is None and payer_ids:
        aura_student_id = payer_ids[0]
    aura = get_aura_discount(aura_student_id) if aura_student_id is not None else 0
    return replace(discount_input, aura_discount_points=aura)


def build_quote(
    priced_cart: PricedCart,
    discount_input: DiscountInput,
    *,
    instances: Dict[UUID, StudentCoupon],
    manual_authorized: bool,
    payer_ids: Optional[Iterable[UUID]] = None
) -> Quote:
    """Resolve discounts for an already priced cart."""
    discounts = resolve_discounts(
        priced_cart,
        discount_input,
        instances=instances,
        manual_authorized=manual_authorized,
        payer_ids=payer_ids,
    )
    return Quote(cart=priced_cart, discounts=discounts)


def compute_quote(
    *,
    cart: Sequence[CartLine],
    discount_input: DiscountInput,
    payer_ids: Optional[Sequence[UUID]] = None,
    aura_student_id: Optional[UUID] = None
) -> Quote:
    """
    Preview subtotal, discounts and payable total for a cart.

    Read-only: the authorization token is checked but not consumed and no
    coupon counter changes, so calling it any number of times is safe.

    Args:
        cart: Cart lines
        discount_input: Requested discounts (aura points are recomputed)
        payer_ids: Payers, if already chosen; coupons must belong to them
        aura_student_id: Student whose aura applies (defaults to first payer)

    Returns:
        Quote

    Raises:
        EmptyCartError, InvalidItemError, DiscountNotAuthorizedError,
        CouponExhaustedError, InvalidCouponScopeError
    """
    priced_cart = price_cart(cart)

    manual_authorized = False
    if discount_input.manual_points and discount_input.manual_points > 0:
        try:
            check_token(discount_input.authorization_token)
        except AuthorizationTokenError as e:
            raise DiscountNotAuthorizedError(str(e))
        manual_authorized = True

    discount_input = with_aura(
        discount_input,
        aura_student_id=aura_student_id,
        payer_ids=payer_ids,
    )
    instances = get_coupon_instances(
        redemption.coupon_instance_id
        for redemption in discount_input.coupon_redemptions
    )
    return build_quote(
        priced_cart,
        discount_input,
        instances=instances,
        manual_authorized=manual_authorized,
        payer_ids=payer_ids,
    )
