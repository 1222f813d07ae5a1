"""
API tests for the camp register endpoints.
"""
import uuid

import pytest
from django.urls import reverse
from rest_framework import status

from apps.checkout.models import CampAccount, Order, OrderStatus


def balance_of(student):
    return CampAccount.objects.get(student=student).balance_points


@pytest.fixture
def meal_items(pasta, juice):
    return [
        {'item_id': str(pasta.id)},
        {'item_id': str(juice.id)},
    ]


@pytest.fixture
def checkout_payload(meal_items, alice, bob):
    return {
        'items': meal_items,
        'payers': [
            {'student_id': str(alice.id), 'amount': 40},
            {'student_id': str(bob.id), 'amount': 25},
        ],
        'paid_by': 'Alice & Bob',
    }


@pytest.mark.django_db
class TestQuoteAPI:
    """Tests for POST /api/camp/quote/"""

    def test_quote(self, cashier_client, meal_items):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {'items': meal_items}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['subtotal'] == 65
        assert response.data['payable'] == 65
        assert len(response.data['lines']) == 2

    def test_quote_with_manual_discount(self, cashier_client, meal_items, auth_token):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {
            'items': meal_items,
            'discounts': {'manual_points': 15, 'authorization_token': auth_token},
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['discounts']['manual'] == 15
        assert response.data['payable'] == 50

    def test_quote_manual_discount_unauthorized(self, cashier_client, meal_items):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {
            'items': meal_items,
            'discounts': {'manual_points': 15},
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'discount_not_authorized'

    def test_quote_empty_cart(self, cashier_client):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {'items': []}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {
            'error': 'empty_cart',
            'message': 'Select at least one item.',
            'status': 400,
        }

    def test_quote_unknown_item(self, cashier_client):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {
            'items': [{'item_id': str(uuid.uuid4())}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid_item'

    def test_quote_validation_error(self, cashier_client):
        url = reverse('checkout:quote')
        response = cashier_client.post(url, {'items': [{'item_id': 'nope'}]}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid'
        assert 'items' in response.data['detail']

    def test_quote_requires_authentication(self, api_client, meal_items):
        url = reverse('checkout:quote')
        response = api_client.post(url, {'items': meal_items}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_quote_requires_register_role(self, outsider_client, meal_items):
        url = reverse('checkout:quote')
        response = outsider_client.post(url, {'items': meal_items}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestSplitAPI:
    """Tests for POST /api/camp/split/"""

    def test_even_split(self, cashier_client, alice, bob, carol):
        url = reverse('checkout:split')
        response = cashier_client.post(url, {
            'payable_total': 50,
            'payer_ids': [str(alice.id), str(bob.id), str(carol.id)],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert [p['amount'] for p in response.data['payers']] == [18, 16, 16]
        assert response.data['payers'][0]['student_id'] == str(alice.id)

    def test_no_payers(self, cashier_client):
        url = reverse('checkout:split')
        response = cashier_client.post(url, {'payable_total': 50, 'payer_ids': []}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'no_payers'


@pytest.mark.django_db
class TestCheckoutAPI:
    """Tests for POST /api/camp/checkout/"""

    def test_checkout_creates_order(self, cashier_client, checkout_payload, alice, bob, cashier):
        url = reverse('checkout:checkout')
        response = cashier_client.post(url, checkout_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['duplicate'] is False
        order = response.data['order']
        assert order['status'] == OrderStatus.PAID
        assert order['payable_points'] == 65
        assert [p['amount_points'] for p in order['payments']] == [40, 25]
        assert balance_of(alice) == 60
        assert balance_of(bob) == 75
        assert Order.objects.get(id=order['id']).cashier == cashier

    def test_duplicate_submission(self, cashier_client, checkout_payload, alice):
        url = reverse('checkout:checkout')
        first = cashier_client.post(url, checkout_payload, format='json')
        second = cashier_client.post(url, checkout_payload, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert second.data['duplicate'] is True
        assert second.data['order']['id'] == first.data['order']['id']
        assert balance_of(alice) == 60

    def test_payment_mismatch(self, cashier_client, checkout_payload, alice):
        checkout_payload['payers'][0]['amount'] = 30
        url = reverse('checkout:checkout')
        response = cashier_client.post(url, checkout_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'payment_mismatch'
        assert balance_of(alice) == 100

    def test_insufficient_balance(self, cashier_client, checkout_payload, alice, bob):
        account = CampAccount.objects.get(student=bob)
        account.balance_points = 10
        account.save()

        url = reverse('checkout:checkout')
        response = cashier_client.post(url, checkout_payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'insufficient_balance'
        assert balance_of(alice) == 100
        assert balance_of(bob) == 10

    def test_payable_mismatch(self, cashier_client, checkout_payload, pasta):
        checkout_payload['expected_payable'] = 65
        pasta.price_points = 45
        pasta.save()

        url = reverse('checkout:checkout')
        response = cashier_client.post(url, checkout_payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'payable_mismatch'

    def test_too_many_payers(self, cashier_client, meal_items):
        url = reverse('checkout:checkout')
        response = cashier_client.post(url, {
            'items': meal_items,
            'payers': [{'student_id': str(uuid.uuid4()), 'amount': 13} for _ in range(5)],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'too_many_payers'

    def test_negative_amount(self, cashier_client, meal_items, alice, bob):
        url = reverse('checkout:checkout')
        response = cashier_client.post(url, {
            'items': meal_items,
            'payers': [
                {'student_id': str(alice.id), 'amount': 70},
                {'student_id': str(bob.id), 'amount': -5},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid_payer'

    def test_zero_quantity_charged_as_one(self, cashier_client, pasta, alice):
        url = reverse('checkout:checkout')
        response = cashier_client.post(url, {
            'items': [{'item_id': str(pasta.id), 'quantity': 0}],
            'payers': [{'student_id': str(alice.id), 'amount': 40}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['order']['lines'][0]['quantity'] == 1
        assert response.data['order']['payable_points'] == 40
        assert balance_of(alice) == 60

    def test_coach_can_checkout(self, coach_client, checkout_payload):
        url = reverse('checkout:checkout')
        response = coach_client.post(url, checkout_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.django_db
class TestOrderAPI:
    """Tests for /api/camp/orders/"""

    def place_order(self, client, payload):
        response = client.post(reverse('checkout:checkout'), payload, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        return response.data['order']['id']

    def test_list_orders(self, cashier_client, checkout_payload):
        self.place_order(cashier_client, checkout_payload)

        response = cashier_client.get(reverse('checkout:order-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['payable_points'] == 65

    def test_filter_by_student(self, cashier_client, checkout_payload, carol):
        self.place_order(cashier_client, checkout_payload)

        response = cashier_client.get(reverse('checkout:order-list'), {'student': str(carol.id)})

        assert response.data['count'] == 0

    def test_order_detail(self, cashier_client, checkout_payload):
        order_id = self.place_order(cashier_client, checkout_payload)

        response = cashier_client.get(reverse('checkout:order-detail', args=[order_id]))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['lines']) == 2
        assert response.data['refund'] is None

    def test_refund(self, cashier_client, checkout_payload, alice, bob):
        order_id = self.place_order(cashier_client, checkout_payload)

        response = cashier_client.post(reverse('checkout:order-refund', args=[order_id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == OrderStatus.REFUNDED
        assert response.data['refund']['refunded_points'] == 65
        assert len(response.data['refund']['entries']) == 2
        assert balance_of(alice) == 100
        assert balance_of(bob) == 100

    def test_refund_twice(self, cashier_client, checkout_payload):
        order_id = self.place_order(cashier_client, checkout_payload)
        url = reverse('checkout:order-refund', args=[order_id])
        cashier_client.post(url)

        response = cashier_client.post(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'already_refunded'

    def test_refund_unknown_order(self, cashier_client):
        url = reverse('checkout:order-refund', args=[uuid.uuid4()])
        response = cashier_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'order_not_found'


@pytest.mark.django_db
class TestStudentBalanceAPI:
    """Tests for GET /api/camp/students/{id}/balance/"""

    def test_balance(self, cashier_client, alice, alice_aura, alice_points_coupon):
        url = reverse('checkout:student-balance', args=[alice.id])
        response = cashier_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance_points'] == 100
        assert response.data['aura_discount_points'] == 5
        assert [c['remaining_qty'] for c in response.data['coupons']] == [2]

    def test_unknown_student(self, cashier_client):
        url = reverse('checkout:student-balance', args=[uuid.uuid4()])
        response = cashier_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'not_found'
