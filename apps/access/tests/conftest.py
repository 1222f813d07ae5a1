import pytest
from django.contrib.auth.models import Group, User
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.access.models import AccessRole, NfcAccessTag
from apps.access.services import hash_access_code, set_discount_pin


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def register_user(db):
    """Camp staff member at the register."""
    user = User.objects.create_user(username='register', password='TestPass123!')
    group, _ = Group.objects.get_or_create(name='camp')
    user.groups.add(group)
    return user


@pytest.fixture
def outsider(db):
    return User.objects.create_user(username='outsider', password='TestPass123!')


@pytest.fixture
def register_client(api_client, register_user):
    """Return API client authenticated as camp staff."""
    refresh = RefreshToken.for_user(register_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def outsider_client(api_client, outsider):
    refresh = RefreshToken.for_user(outsider)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def discount_pin(db):
    set_discount_pin('2468')
    return '2468'


@pytest.fixture
def coach_tag(db):
    NfcAccessTag.objects.create(
        label='Coach badge',
        code_hash=hash_access_code('NFC-COACH-01'),
        role=AccessRole.COACH,
    )
    return 'NFC-COACH-01'


@pytest.fixture
def leader_tag(db):
    NfcAccessTag.objects.create(
        label='Leader badge',
        code_hash=hash_access_code('NFC-LEADER-01'),
        role=AccessRole.LEADER,
    )
    return 'NFC-LEADER-01'
