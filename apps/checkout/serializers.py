from rest_framework import serializers

from apps.coupons.models import StudentCoupon
from .models import (
    CouponRedemption,
    Order,
    OrderLine,
    Payment,
    Refund,
    RefundEntry,
)
from .services import (
    CartLine,
    CouponRedemptionRequest,
    DiscountInput,
    Payer,
)


# =============================================================================
# Input Serializers
# =============================================================================

class CartLineInputSerializer(serializers.Serializer):
    """
    One cart line.

    Fields:
        item_id (UUID): Menu item
        quantity (int): Portions, defaults to 1; values below 1 count as 1
        second (bool): Second-portion price
    """

    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(default=1)
    second = serializers.BooleanField(default=False)


class CouponRedemptionInputSerializer(serializers.Serializer):
    coupon_instance_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class DiscountInputSerializer(serializers.Serializer):
    """
    Requested discounts.

    Fields:
        manual_points (int): Manual discount, needs authorization_token
        authorization_token (str): Token from /api/camp/access/authorize/
        coupons (list): Coupon instances to redeem
    """

    manual_points = serializers.IntegerField(min_value=0, default=0)
    authorization_token = serializers.CharField(
        max_length=64,
        required=False,
        allow_blank=True,
        allow_null=True
    )
    coupons = CouponRedemptionInputSerializer(many=True, required=False)


class PayerInputSerializer(serializers.Serializer):
    # Negative amounts are rejected by the split reconciler as invalid_payer
    student_id = serializers.UUIDField()
    amount = serializers.IntegerField()


class CartInputMixin:
    """Convert validated cart/discount payloads into service value objects."""

    def get_cart(self):
        return [
            CartLine(
                item_id=line['item_id'],
                quantity=line['quantity'],
                second=line['second'],
            )
            for line in self.validated_data['items']
        ]

    def get_discount_input(self):
        discounts = self.validated_data.get('discounts') or {}
        return DiscountInput(
            manual_points=discounts.get('manual_points', 0),
            authorization_token=discounts.get('authorization_token') or None,
            coupon_redemptions=[
                CouponRedemptionRequest(
                    coupon_instance_id=coupon['coupon_instance_id'],
                    quantity=coupon['quantity'],
                )
                for coupon in discounts.get('coupons', [])
            ],
        )


class QuoteInputSerializer(CartInputMixin, serializers.Serializer):
    """
    Validate input for a quote preview.

    Fields:
        items (list): Cart lines
        discounts (object): Requested discounts
        payer_ids (list[UUID]): Payers, if already chosen
        aura_student_id (UUID): Student whose aura applies
    """

    items = CartLineInputSerializer(many=True, allow_empty=True)
    discounts = DiscountInputSerializer(required=False)
    payer_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        allow_empty=True
    )
    aura_student_id = serializers.UUIDField(required=False, allow_null=True)


class SplitInputSerializer(serializers.Serializer):
    """
    Validate input for the even-split helper.

    Fields:
        payable_total (int): Points to split
        payer_ids (list[UUID]): Payers; the first one takes the remainder
    """

    payable_total = serializers.IntegerField(min_value=0)
    payer_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True
    )


class CheckoutInputSerializer(CartInputMixin, serializers.Serializer):
    """
    Validate input for committing an order.

    Fields:
        items (list): Cart lines
        discounts (object): Requested discounts
        payers (list): Declared split, debited in list order
        expected_payable (int): Payable total the cashier saw
        idempotency_window_seconds (int): Duplicate detection window
        aura_student_id (UUID): Student whose aura applies
        paid_by (str): Label printed on the receipt
    """

    items = CartLineInputSerializer(many=True, allow_empty=True)
    discounts = DiscountInputSerializer(required=False)
    payers = PayerInputSerializer(many=True, allow_empty=True)
    expected_payable = serializers.IntegerField(min_value=0, required=False)
    idempotency_window_seconds = serializers.IntegerField(min_value=0, required=False)
    aura_student_id = serializers.UUIDField(required=False, allow_null=True)
    paid_by = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def get_payers(self):
        return [
            Payer(student_id=payer['student_id'], amount=payer['amount'])
            for payer in self.validated_data['payers']
        ]


# =============================================================================
# Output Serializers
# =============================================================================

class QuoteLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    item_name = serializers.CharField()
    unit_price = serializers.IntegerField()
    quantity = serializers.IntegerField()
    second = serializers.BooleanField()
    line_total = serializers.IntegerField()


class CouponChargeSerializer(serializers.Serializer):
    coupon_instance_id = serializers.UUIDField()
    kind = serializers.CharField()
    quantity = serializers.IntegerField()
    discount_points = serializers.IntegerField()


class DiscountBreakdownSerializer(serializers.Serializer):
    manual = serializers.IntegerField()
    coupon = serializers.IntegerField()
    aura = serializers.IntegerField()
    total = serializers.IntegerField()
    coupons = CouponChargeSerializer(many=True)


class QuoteSerializer(serializers.Serializer):
    """Quote preview rendered from Quote.to_dict()."""

    lines = QuoteLineSerializer(many=True)
    subtotal = serializers.IntegerField()
    discounts = DiscountBreakdownSerializer()
    payable = serializers.IntegerField()


class PayerAmountSerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    amount = serializers.IntegerField()


class SplitResultSerializer(serializers.Serializer):
    payers = PayerAmountSerializer(many=True)


class OrderLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderLine
        fields = [
            'id',
            'menu_item',
            'item_name',
            'unit_price_points',
            'quantity',
            'second',
            'line_total_points',
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    """One payer's debit with the balance snapshot taken at checkout."""

    student_name = serializers.CharField(source='student.name', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'student',
            'student_name',
            'amount_points',
            'balance_before',
            'balance_after',
        ]
        read_only_fields = fields


class CouponRedemptionSerializer(serializers.ModelSerializer):
    coupon_name = serializers.CharField(source='student_coupon.coupon_type.name', read_only=True)

    class Meta:
        model = CouponRedemption
        fields = ['id', 'student_coupon', 'coupon_name', 'kind', 'quantity', 'discount_points']
        read_only_fields = fields


class RefundEntrySerializer(serializers.ModelSerializer):
    student = serializers.UUIDField(source='payment.student_id', read_only=True)

    class Meta:
        model = RefundEntry
        fields = ['id', 'payment', 'student', 'amount_points', 'balance_before', 'balance_after']
        read_only_fields = fields


class RefundSerializer(serializers.ModelSerializer):
    entries = RefundEntrySerializer(many=True, read_only=True)

    class Meta:
        model = Refund
        fields = ['id', 'refunded_points', 'refunded_by', 'refunded_at', 'entries']
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order history."""

    class Meta:
        model = Order
        fields = [
            'id',
            'status',
            'paid_by',
            'subtotal_points',
            'total_discount_points',
            'payable_points',
            'paid_at',
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order with lines, payments, coupon uses and refund."""

    lines = OrderLineSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    coupon_redemptions = CouponRedemptionSerializer(many=True, read_only=True)
    refund = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'status',
            'cashier',
            'paid_by',
            'subtotal_points',
            'manual_discount_points',
            'coupon_discount_points',
            'aura_discount_points',
            'total_discount_points',
            'payable_points',
            'lines',
            'payments',
            'coupon_redemptions',
            'refund',
            'paid_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_refund(self, obj):
        try:
            refund = obj.refund
        except Refund.DoesNotExist:
            return None
        return RefundSerializer(refund).data


class CheckoutResultSerializer(serializers.Serializer):
    duplicate = serializers.BooleanField()
    order = OrderSerializer()


class AvailableCouponSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='coupon_type.name', read_only=True)
    kind = serializers.CharField(source='coupon_type.kind', read_only=True)
    value = serializers.IntegerField(source='coupon_type.value', read_only=True)
    scope = serializers.CharField(source='coupon_type.scope', read_only=True)
    item = serializers.UUIDField(source='coupon_type.item_id', read_only=True, allow_null=True)

    class Meta:
        model = StudentCoupon
        fields = ['id', 'name', 'kind', 'value', 'scope', 'item', 'remaining_qty']
        read_only_fields = fields


class StudentBalanceSerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    name = serializers.CharField()
    balance_points = serializers.IntegerField()
    aura_discount_points = serializers.IntegerField()
    coupons = AvailableCouponSerializer(many=True)
