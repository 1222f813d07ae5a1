"""
PIN / NFC authorization for privileged register actions.

A successful check yields an AuthorizationToken. Tokens are short-lived and
single use: the checkout ledger consumes the token inside its own
transaction, so a checkout that rolls back leaves the token usable.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.checkout.conf import camp_setting
from .exceptions import (
    InvalidAccessCodeError,
    TokenNotFoundError,
    TokenExpiredError,
    TokenAlreadyUsedError,
)
from .models import (
    AccessRole,
    AccessSettings,
    AuthorizationMethod,
    AuthorizationToken,
    NfcAccessTag,
)

logger = logging.getLogger(__name__)


def hash_access_code(code: str) -> str:
    """SHA-256 hex digest of a PIN or NFC code."""
    return hashlib.sha256(code.encode('utf-8')).hexdigest()


def set_discount_pin(pin: str) -> AccessSettings:
    """Store the hash of the PIN that unlocks manual discounts."""
    pin = pin.strip()
    if not pin:
        raise ValueError("PIN cannot be empty")
    access_settings = AccessSettings.load()
    access_settings.discount_pin_hash = hash_access_code(pin)
    access_settings.save(update_fields=['discount_pin_hash', 'updated_at'])
    return access_settings


def _allowed_nfc_roles():
    roles = {str(role).strip().lower() for role in camp_setting('DISCOUNT_NFC_ROLES')}
    roles.add(AccessRole.ADMIN.value)
    return roles


@transaction.atomic
def verify_pin_or_nfc(*, code: str, issued_to=None) -> AuthorizationToken:
    """
    Check a PIN or NFC code and issue a single-use authorization token.

    NFC tags are tried first; an active tag with an allowed role wins and has
    its ``last_used_at`` stamped. Otherwise the code is compared with the
    discount PIN.

    Args:
        code: Raw PIN or NFC code as typed/scanned
        issued_to: Staff user operating the register (optional)

    Returns:
        Newly created AuthorizationToken

    Raises:
        InvalidAccessCodeError: If nothing matches
    """
    code = (code or '').strip()
    if not code:
        raise InvalidAccessCodeError("PIN or NFC code required")

    code_hash = hash_access_code(code)
    method = None

    tag = (
        NfcAccessTag.objects
        .select_for_update()
        .filter(code_hash=code_hash, is_active=True)
        .first()
    )
    if tag is not None and tag.role in _allowed_nfc_roles():
        tag.last_used_at = timezone.now()
        tag.save(update_fields=['last_used_at'])
        method = AuthorizationMethod.NFC

    if method is None:
        pin_hash = AccessSettings.load().discount_pin_hash
        if pin_hash and hmac.compare_digest(pin_hash, code_hash):
            method = AuthorizationMethod.PIN

    if method is None:
        logger.warning("Discount authorization rejected")
        raise InvalidAccessCodeError("Invalid PIN or NFC code")

    ttl = timedelta(seconds=camp_setting('AUTHORIZATION_TTL_SECONDS'))
    token = AuthorizationToken.objects.create(
        token=secrets.token_urlsafe(32),
        method=method,
        issued_to=issued_to,
        expires_at=timezone.now() + ttl,
    )
    logger.info("Discount authorization issued via %s (token %s)", method, token.id)
    return token


def _ensure_usable(token: AuthorizationToken) -> None:
    if token.is_used:
        raise TokenAlreadyUsedError("Authorization already used; re-authorize")
    if token.is_expired:
        raise TokenExpiredError("Authorization expired; re-authorize")


def check_token(token: Optional[str]) -> AuthorizationToken:
    """
    Validate a token without consuming it (quote previews).

    Raises:
        TokenNotFoundError, TokenExpiredError, TokenAlreadyUsedError
    """
    try:
        auth = AuthorizationToken.objects.get(token=token or '')
    except AuthorizationToken.DoesNotExist:
        raise TokenNotFoundError("Unknown authorization token")
    _ensure_usable(auth)
    return auth


@transaction.atomic
def consume_token(token: Optional[str]) -> AuthorizationToken:
    """
    Validate and burn a token.

    The row is locked so two checkouts racing on the same token cannot both
    pass the single-use check.

    Raises:
        TokenNotFoundError, TokenExpiredError, TokenAlreadyUsedError
    """
    try:
        auth = AuthorizationToken.objects.select_for_update().get(token=token or '')
    except AuthorizationToken.DoesNotExist:
        raise TokenNotFoundError("Unknown authorization token")
    _ensure_usable(auth)
    auth.used_at = timezone.now()
    auth.save(update_fields=['used_at'])
    return auth
