"""
Checkout app services layer.

Pure computations (pricing, discounts, splitting, quotes) never write to
the database. The ledger and refund services are the only code that
changes camp point balances and coupon counters, always inside a single
transaction with row locks.
"""

from .pricing import (
    CartLine,
    PricedLine,
    PricedCart,
    price_cart,
)

from .discounts import (
    CouponRedemptionRequest,
    DiscountInput,
    CouponCharge,
    DiscountBreakdown,
    resolve_discounts,
)

from .splitting import (
    Payer,
    validate_payers,
    reconcile_split,
    even_split,
)

from .quotes import (
    Quote,
    compute_quote,
)

from .ledger import (
    CheckoutResult,
    checkout,
    checkout_fingerprint,
)

from .refunds import (
    refund,
)


__all__ = [
    # Pricing
    'CartLine',
    'PricedLine',
    'PricedCart',
    'price_cart',

    # Discounts
    'CouponRedemptionRequest',
    'DiscountInput',
    'CouponCharge',
    'DiscountBreakdown',
    'resolve_discounts',

    # Splitting
    'Payer',
    'validate_payers',
    'reconcile_split',
    'even_split',

    # Quotes
    'Quote',
    'compute_quote',

    # Ledger
    'CheckoutResult',
    'checkout',
    'checkout_fingerprint',

    # Refunds
    'refund',
]
