import pytest
from django.contrib.auth.models import Group, User
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.access.services import set_discount_pin, verify_pin_or_nfc
from apps.checkout.models import CampAccount
from apps.coupons.models import CouponKind, CouponScope, CouponType, StudentAura, StudentCoupon
from apps.menus.models import Menu, MenuItem
from apps.students.models import Student


DISCOUNT_PIN = '4321'


def fund(student, points):
    """Set a student's camp balance."""
    account, _ = CampAccount.objects.get_or_create(student=student)
    account.balance_points = points
    account.save()
    return account


def balance_of(student):
    return CampAccount.objects.get(student=student).balance_points


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


def _user_in_group(username, group_name=None, **extra):
    user = User.objects.create_user(
        username=username,
        password='TestPass123!',
        **extra
    )
    if group_name:
        group, _ = Group.objects.get_or_create(name=group_name)
        user.groups.add(group)
    return user


@pytest.fixture
def cashier(db):
    """Camp staff member who runs the register."""
    return _user_in_group('cashier', 'camp')


@pytest.fixture
def coach(db):
    """Coach: can use the register but not refund."""
    return _user_in_group('coach', 'coach')


@pytest.fixture
def outsider(db):
    """Authenticated user with no camp role."""
    return _user_in_group('outsider')


@pytest.fixture
def staff_user(db):
    return _user_in_group('director', is_staff=True)


def _authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def cashier_client(api_client, cashier):
    """Return API client authenticated as the cashier."""
    return _authenticate(api_client, cashier)


@pytest.fixture
def coach_client(api_client, coach):
    """Return API client authenticated as a coach."""
    return _authenticate(api_client, coach)


@pytest.fixture
def outsider_client(api_client, outsider):
    """Return API client authenticated as outsider."""
    return _authenticate(api_client, outsider)


@pytest.fixture
def staff_client(api_client, staff_user):
    return _authenticate(api_client, staff_user)


@pytest.fixture
def alice(db):
    student = Student.objects.create(name='Alice')
    fund(student, 100)
    return student


@pytest.fixture
def bob(db):
    student = Student.objects.create(name='Bob')
    fund(student, 100)
    return student


@pytest.fixture
def carol(db):
    student = Student.objects.create(name='Carol')
    fund(student, 100)
    return student


@pytest.fixture
def menu(db):
    return Menu.objects.create(name='Snack Bar')


@pytest.fixture
def pasta(menu):
    return MenuItem.objects.create(menu=menu, name='Pasta', price_points=40)


@pytest.fixture
def juice(menu):
    return MenuItem.objects.create(menu=menu, name='Juice', price_points=25)


@pytest.fixture
def fries(menu):
    """Item with a cheaper second portion."""
    return MenuItem.objects.create(
        menu=menu,
        name='Fries',
        price_points=15,
        allow_second=True,
        second_price_points=10,
    )


@pytest.fixture
def discount_pin(db):
    set_discount_pin(DISCOUNT_PIN)
    return DISCOUNT_PIN


@pytest.fixture
def auth_token(discount_pin, cashier):
    """Fresh single-use manual discount authorization."""
    return verify_pin_or_nfc(code=discount_pin, issued_to=cashier).token


@pytest.fixture
def points_coupon_type(db):
    return CouponType.objects.create(name='10 off', kind=CouponKind.POINTS, value=10)


@pytest.fixture
def order_percent_coupon_type(db):
    return CouponType.objects.create(name='10% off', kind=CouponKind.PERCENT, value=10)


@pytest.fixture
def juice_percent_coupon_type(juice):
    return CouponType.objects.create(
        name='Half-price juice',
        kind=CouponKind.PERCENT,
        value=50,
        scope=CouponScope.ITEM,
        item=juice,
    )


@pytest.fixture
def free_juice_coupon_type(juice):
    return CouponType.objects.create(
        name='Free juice',
        kind=CouponKind.ITEM,
        value=0,
        item=juice,
    )


@pytest.fixture
def alice_points_coupon(alice, points_coupon_type):
    return StudentCoupon.objects.create(
        student=alice,
        coupon_type=points_coupon_type,
        remaining_qty=2,
    )


@pytest.fixture
def alice_free_juice(alice, free_juice_coupon_type):
    return StudentCoupon.objects.create(
        student=alice,
        coupon_type=free_juice_coupon_type,
        remaining_qty=1,
    )


@pytest.fixture
def alice_aura(alice):
    return StudentAura.objects.create(student=alice, aura_name='Golden', discount_points=5)
