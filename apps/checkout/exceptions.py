"""
Domain exceptions for the camp checkout app.

Every error the register can receive is an APIException subclass rooted at
CampPosError, so services can raise them directly and DRF renders them as
``{"error": <code>, "message": <text>, "status": <int>}`` through the
project exception handler.

Validation errors (InvalidItemError, EmptyCartError, NoPayersError,
TooManyPayersError, InvalidPayerError, PaymentMismatchError) are raised
before any transaction opens. Transactional errors
(InsufficientBalanceError, PayableMismatchError, CheckoutTimeoutError) roll
the whole transaction back.
"""
from rest_framework.exceptions import APIException


class CampPosError(APIException):
    """Base exception for camp register errors."""
    status_code = 400
    default_detail = 'Camp register error.'
    default_code = 'camp_pos_error'


class InvalidItemError(CampPosError):
    """Menu item unknown or not currently for sale."""
    status_code = 400
    default_detail = 'Menu item is unknown or disabled.'
    default_code = 'invalid_item'


class EmptyCartError(CampPosError):
    """Cart has no lines."""
    status_code = 400
    default_detail = 'Select at least one item.'
    default_code = 'empty_cart'


class DiscountNotAuthorizedError(CampPosError):
    """Manual discount without a usable PIN/NFC authorization."""
    status_code = 403
    default_detail = 'Manual discount requires a fresh PIN or NFC authorization.'
    default_code = 'discount_not_authorized'


class CouponExhaustedError(CampPosError):
    """More coupon uses requested than remain."""
    status_code = 409
    default_detail = 'Not enough coupon uses remaining.'
    default_code = 'coupon_exhausted'


class InvalidCouponScopeError(CampPosError):
    """Coupon cannot be applied to this order."""
    status_code = 400
    default_detail = 'Coupon cannot be applied to this order.'
    default_code = 'invalid_coupon_scope'


class PaymentMismatchError(CampPosError):
    """Declared payer amounts do not add up to the payable total."""
    status_code = 400
    default_detail = 'Payments must equal the payable total.'
    default_code = 'payment_mismatch'


class TooManyPayersError(CampPosError):
    status_code = 400
    default_detail = 'Too many payers for one order.'
    default_code = 'too_many_payers'


class NoPayersError(CampPosError):
    status_code = 400
    default_detail = 'Select at least one payer.'
    default_code = 'no_payers'


class InvalidPayerError(CampPosError):
    """Payer unknown, inactive, listed twice or with a negative amount."""
    status_code = 400
    default_detail = 'Invalid payer.'
    default_code = 'invalid_payer'


class PayableMismatchError(CampPosError):
    """Server-side recomputation disagrees with the client's split."""
    status_code = 409
    default_detail = 'Order total changed; refresh the quote and try again.'
    default_code = 'payable_mismatch'


class InsufficientBalanceError(CampPosError):
    status_code = 409
    default_detail = 'A payer does not have enough points.'
    default_code = 'insufficient_balance'


class AlreadyRefundedError(CampPosError):
    """Order already refunded; safe to treat as done."""
    status_code = 409
    default_detail = 'Order already refunded.'
    default_code = 'already_refunded'


class CheckoutTimeoutError(CampPosError):
    """Locks could not be acquired in time; nothing was committed."""
    status_code = 503
    default_detail = 'Register is busy; please retry.'
    default_code = 'checkout_timeout'


class OrderNotFoundError(CampPosError):
    status_code = 404
    default_detail = 'Order not found.'
    default_code = 'order_not_found'


class InvalidStateTransitionError(CampPosError):
    """Order status change not allowed."""
    status_code = 409
    default_detail = 'Invalid state transition for order.'
    default_code = 'invalid_state_transition'
