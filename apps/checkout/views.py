from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.coupons.services import get_aura_discount, get_available_coupons
from apps.students.models import Student
from .models import CampAccount, Order
from .permissions import CanOperateRegister, CanRefundOrders
from .serializers import (
    CheckoutInputSerializer,
    CheckoutResultSerializer,
    OrderListSerializer,
    OrderSerializer,
    QuoteInputSerializer,
    QuoteSerializer,
    SplitInputSerializer,
    SplitResultSerializer,
    StudentBalanceSerializer,
)
from .services import checkout as checkout_order
from .services import compute_quote, even_split
from .services import refund as refund_order


class OrderPagination(PageNumberPagination):
    """Pagination for order history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    request=QuoteInputSerializer,
    responses={200: QuoteSerializer},
    description="Preview subtotal, discounts and payable total. Writes nothing.",
    tags=['camp'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanOperateRegister])
def quote(request):
    """
    Price a cart and resolve its discounts.

    POST /api/camp/quote/
    """
    input_serializer = QuoteInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    result = compute_quote(
        cart=input_serializer.get_cart(),
        discount_input=input_serializer.get_discount_input(),
        payer_ids=input_serializer.validated_data.get('payer_ids') or None,
        aura_student_id=input_serializer.validated_data.get('aura_student_id'),
    )
    return Response(QuoteSerializer(result.to_dict()).data)


@extend_schema(
    request=SplitInputSerializer,
    responses={200: SplitResultSerializer},
    description="Split a payable total evenly; the first payer takes the remainder.",
    tags=['camp'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanOperateRegister])
def split(request):
    """
    Even-split helper.

    POST /api/camp/split/
    Body: {"payable_total": 50, "payer_ids": ["...", "..."]}
    """
    input_serializer = SplitInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    payers = even_split(
        input_serializer.validated_data['payable_total'],
        input_serializer.validated_data['payer_ids'],
    )
    return Response(SplitResultSerializer({'payers': payers}).data)


@extend_schema(
    request=CheckoutInputSerializer,
    responses={201: CheckoutResultSerializer, 200: CheckoutResultSerializer},
    description=(
        "Commit an order against the payers' camp point balances. "
        "Returns 200 with duplicate=true when the same order was already committed."
    ),
    tags=['camp'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanOperateRegister])
def checkout(request):
    """
    Commit an order.

    POST /api/camp/checkout/
    """
    input_serializer = CheckoutInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    result = checkout_order(
        cart=input_serializer.get_cart(),
        discount_input=input_serializer.get_discount_input(),
        payers=input_serializer.get_payers(),
        idempotency_window=data.get('idempotency_window_seconds'),
        expected_payable=data.get('expected_payable'),
        aura_student_id=data.get('aura_student_id'),
        cashier=request.user,
        paid_by=data.get('paid_by', ''),
    )

    response_status = status.HTTP_200_OK if result.duplicate else status.HTTP_201_CREATED
    return Response(
        CheckoutResultSerializer({'order': result.order, 'duplicate': result.duplicate}).data,
        status=response_status
    )


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Register order history.

    list: Recent orders, newest first
    retrieve: Order with lines, payments, coupon uses and refund
    refund: Reverse a paid order
    """

    queryset = Order.objects.prefetch_related(
        'lines',
        'payments__student',
        'coupon_redemptions__student_coupon__coupon_type',
        'refund__entries__payment',
    )
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, CanOperateRegister]
    pagination_class = OrderPagination

    def get_permissions(self):
        """Refunds need the stricter permission."""
        if self.action == 'refund':
            return [IsAuthenticated(), CanRefundOrders()]
        return super().get_permissions()

    def get_queryset(self):
        """Optionally filter by ?status= and ?student=."""
        queryset = super().get_queryset()
        order_status = self.request.query_params.get('status')
        if order_status:
            queryset = queryset.filter(status=order_status)
        student_id = self.request.query_params.get('student')
        if student_id:
            queryset = queryset.filter(payments__student_id=student_id).distinct()
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return OrderListSerializer
        return OrderSerializer

    @extend_schema(request=None, responses={200: OrderSerializer}, tags=['camp'])
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """
        Refund an order in full.

        POST /api/camp/orders/{id}/refund/
        """
        order = refund_order(order_id=pk, refunded_by=request.user)
        order = self.get_queryset().get(id=order.id)
        return Response(OrderSerializer(order).data)


@extend_schema(
    responses={200: StudentBalanceSerializer},
    description="Balance, aura discount and redeemable coupons of a student.",
    tags=['camp'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanOperateRegister])
def student_balance(request, student_id):
    """
    GET /api/camp/students/{id}/balance/
    """
    student = get_object_or_404(Student, id=student_id)
    account = CampAccount.objects.filter(student=student).first()

    data = {
        'student_id': student.id,
        'name': student.name,
        'balance_points': account.balance_points if account else 0,
        'aura_discount_points': get_aura_discount(student.id),
        'coupons': get_available_coupons(student.id),
    }
    return Response(StudentBalanceSerializer(data).data)
