"""
Checkout App - Camp Register and Points Ledger

This app runs the camp register: it prices carts, applies manual, coupon
and aura discounts, splits the payable total between up to four students
and commits the order against their camp point balances. Paid orders can
be refunded in full.

Key Features:
- Server-side pricing from the menu catalog
- PIN/NFC-authorized manual discounts
- Coupon redemption (points, percent, free item)
- Exact split reconciliation with an even-split helper
- Duplicate submission detection
- Full refunds with per-payment balance history

Architecture:
- Models: CampAccount, Order, OrderLine, Payment, CouponRedemption, Refund, RefundEntry
- Services: pricing, discounts, splitting, quotes, ledger, refunds
- Views: function views for the register, OrderViewSet for history and refunds
- Permissions: CanOperateRegister, CanRefundOrders
- Exceptions: CampPosError hierarchy
"""

__version__ = '1.0.0'
