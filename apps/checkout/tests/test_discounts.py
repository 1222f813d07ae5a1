"""
Tests for the discount resolver.
"""
import uuid
from decimal import Decimal

import pytest

from apps.checkout.exceptions import (
    CouponExhaustedError,
    DiscountNotAuthorizedError,
    InvalidCouponScopeError,
)
from apps.checkout.services import (
    CartLine,
    CouponRedemptionRequest,
    DiscountInput,
    price_cart,
    resolve_discounts,
)
from apps.checkout.services.discounts import round_half_up
from apps.coupons.models import StudentCoupon


@pytest.fixture
def meal(pasta, juice):
    """Pasta 40 + Juice 25 = 65."""
    return price_cart([CartLine(item_id=pasta.id), CartLine(item_id=juice.id)])


def redeem(*instances, quantity=1):
    return [
        CouponRedemptionRequest(coupon_instance_id=instance.id, quantity=quantity)
        for instance in instances
    ]


def resolve(priced_cart, discount_input, instances=(), manual_authorized=False, payer_ids=None):
    return resolve_discounts(
        priced_cart,
        discount_input,
        instances={instance.id: instance for instance in instances},
        manual_authorized=manual_authorized,
        payer_ids=payer_ids,
    )


class TestRoundHalfUp:

    def test_halves_round_up(self):
        assert round_half_up(Decimal('6.5')) == 7
        assert round_half_up(Decimal('12.5')) == 13

    def test_below_half_rounds_down(self):
        assert round_half_up(Decimal('6.4')) == 6


@pytest.mark.django_db
class TestManualDiscount:

    def test_no_discounts(self, meal):
        breakdown = resolve(meal, DiscountInput())

        assert breakdown.total == 0
        assert breakdown.coupons == []

    def test_requires_authorization(self, meal):
        with pytest.raises(DiscountNotAuthorizedError):
            resolve(meal, DiscountInput(manual_points=15))

    def test_authorized_manual(self, meal):
        breakdown = resolve(meal, DiscountInput(manual_points=15), manual_authorized=True)

        assert breakdown.manual == 15
        assert breakdown.total == 15

    def test_manual_clamped_to_subtotal(self, meal):
        breakdown = resolve(meal, DiscountInput(manual_points=500), manual_authorized=True)

        assert breakdown.manual == 65
        assert breakdown.total == 65

    def test_zero_manual_needs_no_authorization(self, meal):
        breakdown = resolve(meal, DiscountInput(manual_points=0))

        assert breakdown.manual == 0


@pytest.mark.django_db
class TestCouponDiscounts:

    def test_points_coupon(self, meal, alice_points_coupon):
        breakdown = resolve(
            meal,
            DiscountInput(coupon_redemptions=redeem(alice_points_coupon, quantity=2)),
            instances=[alice_points_coupon],
        )

        assert breakdown.coupon == 20
        assert breakdown.coupons[0].quantity == 2

    def test_order_percent_rounds_half_up(self, meal, alice, order_percent_coupon_type):
        instance = StudentCoupon.objects.create(
            student=alice, coupon_type=order_percent_coupon_type, remaining_qty=1
        )

        breakdown = resolve(meal, DiscountInput(coupon_redemptions=redeem(instance)), [instance])

        # 10% of 65 = 6.5
        assert breakdown.coupon == 7

    def test_item_percent_uses_line_unit_price(self, meal, alice, juice_percent_coupon_type):
        instance = StudentCoupon.objects.create(
            student=alice, coupon_type=juice_percent_coupon_type, remaining_qty=1
        )

        breakdown = resolve(meal, DiscountInput(coupon_redemptions=redeem(instance)), [instance])

        # 50% of 25 = 12.5
        assert breakdown.coupon == 13

    def test_item_percent_without_item_in_cart(self, pasta, alice, juice_percent_coupon_type):
        priced = price_cart([CartLine(item_id=pasta.id)])
        instance = StudentCoupon.objects.create(
            student=alice, coupon_type=juice_percent_coupon_type, remaining_qty=1
        )

        breakdown = resolve(priced, DiscountInput(coupon_redemptions=redeem(instance)), [instance])

        assert breakdown.coupon == 0
        assert len(breakdown.coupons) == 1

    def test_item_percent_without_item_never_widens_to_order(self, meal, alice, juice_percent_coupon_type):
        instance = StudentCoupon.objects.create(
            student=alice, coupon_type=juice_percent_coupon_type, remaining_qty=1
        )
        instance.coupon_type.item = None

        breakdown = resolve(meal, DiscountInput(coupon_redemptions=redeem(instance)), [instance])

        assert breakdown.coupon == 0
        assert breakdown.total == 0

    def test_item_coupon(self, meal, alice_free_juice):
        breakdown = resolve(
            meal,
            DiscountInput(coupon_redemptions=redeem(alice_free_juice)),
            [alice_free_juice],
        )

        assert breakdown.coupon == 25

    def test_item_coupon_without_item_in_cart(self, pasta, alice_free_juice):
        priced = price_cart([CartLine(item_id=pasta.id)])

        breakdown = resolve(
            priced,
            DiscountInput(coupon_redemptions=redeem(alice_free_juice)),
            [alice_free_juice],
        )

        assert breakdown.coupon == 0

    def test_item_coupon_without_item_is_invalid(self, meal, alice_free_juice):
        alice_free_juice.coupon_type.item = None

        with pytest.raises(InvalidCouponScopeError):
            resolve(
                meal,
                DiscountInput(coupon_redemptions=redeem(alice_free_juice)),
                [alice_free_juice],
            )

    def test_unknown_kind_is_invalid(self, meal, alice_points_coupon):
        alice_points_coupon.coupon_type.kind = 'mystery'

        with pytest.raises(InvalidCouponScopeError):
            resolve(
                meal,
                DiscountInput(coupon_redemptions=redeem(alice_points_coupon)),
                [alice_points_coupon],
            )

    def test_exhausted(self, meal, alice_points_coupon):
        with pytest.raises(CouponExhaustedError):
            resolve(
                meal,
                DiscountInput(coupon_redemptions=redeem(alice_points_coupon, quantity=3)),
                [alice_points_coupon],
            )

    def test_repeated_instance_quantities_are_summed(self, meal, alice_points_coupon):
        breakdown = resolve(
            meal,
            DiscountInput(coupon_redemptions=redeem(alice_points_coupon, alice_points_coupon)),
            [alice_points_coupon],
        )

        assert len(breakdown.coupons) == 1
        assert breakdown.coupons[0].quantity == 2
        assert breakdown.coupon == 20

    def test_repeated_instance_can_exhaust(self, meal, alice_points_coupon):
        requests = redeem(alice_points_coupon, alice_points_coupon, alice_points_coupon)

        with pytest.raises(CouponExhaustedError):
            resolve(meal, DiscountInput(coupon_redemptions=requests), [alice_points_coupon])

    def test_unknown_instance(self, meal):
        requests = [CouponRedemptionRequest(coupon_instance_id=uuid.uuid4())]

        with pytest.raises(InvalidCouponScopeError):
            resolve(meal, DiscountInput(coupon_redemptions=requests))

    def test_disabled_coupon_type(self, meal, alice_points_coupon):
        alice_points_coupon.coupon_type.enabled = False

        with pytest.raises(InvalidCouponScopeError):
            resolve(
                meal,
                DiscountInput(coupon_redemptions=redeem(alice_points_coupon)),
                [alice_points_coupon],
            )

    def test_coupon_must_belong_to_payer(self, meal, alice_points_coupon, bob):
        with pytest.raises(InvalidCouponScopeError):
            resolve(
                meal,
                DiscountInput(coupon_redemptions=redeem(alice_points_coupon)),
                [alice_points_coupon],
                payer_ids=[bob.id],
            )


@pytest.mark.django_db
class TestCombinedDiscounts:

    def test_aura_passes_through(self, meal):
        breakdown = resolve(meal, DiscountInput(aura_discount_points=5))

        assert breakdown.aura == 5
        assert breakdown.total == 5

    def test_negative_aura_clamped(self, meal):
        breakdown = resolve(meal, DiscountInput(aura_discount_points=-5))

        assert breakdown.aura == 0

    def test_sum_is_clamped_not_each_source(self, meal, alice_points_coupon):
        breakdown = resolve(
            meal,
            DiscountInput(
                manual_points=60,
                coupon_redemptions=redeem(alice_points_coupon),
                aura_discount_points=5,
            ),
            [alice_points_coupon],
            manual_authorized=True,
        )

        assert breakdown.manual == 60
        assert breakdown.coupon == 10
        assert breakdown.aura == 5
        assert breakdown.total == 65
