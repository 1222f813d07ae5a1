"""Camp POS settings with defaults, overridable through ``settings.CAMP_POS``."""

from django.conf import settings

DEFAULTS = {
    'MAX_PAYERS': 4,
    'IDEMPOTENCY_WINDOW_SECONDS': 10,
    'MAX_IDEMPOTENCY_WINDOW_SECONDS': 300,
    'LOCK_TIMEOUT_SECONDS': 5,
    'AUTHORIZATION_TTL_SECONDS': 120,
    'DISCOUNT_NFC_ROLES': ['admin', 'coach'],
}


def camp_setting(name):
    """Read a CAMP_POS setting at call time so tests can override it."""
    overrides = getattr(settings, 'CAMP_POS', {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
