from django.contrib import admin
from django.utils.html import format_html

from .models import (
    CampAccount,
    CouponRedemption,
    Order,
    OrderLine,
    OrderStatus,
    Payment,
    Refund,
    RefundEntry,
)


class ReadOnlyInline(admin.TabularInline):
    """Ledger rows are written by the checkout services only."""
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class OrderLineInline(ReadOnlyInline):
    model = OrderLine
    fields = ['item_name', 'unit_price_points', 'quantity', 'second', 'line_total_points']
    readonly_fields = fields


class PaymentInline(ReadOnlyInline):
    model = Payment
    fields = ['student', 'amount_points', 'balance_before', 'balance_after']
    readonly_fields = fields


class CouponRedemptionInline(ReadOnlyInline):
    model = CouponRedemption
    fields = ['student_coupon', 'kind', 'quantity', 'discount_points']
    readonly_fields = fields


@admin.register(CampAccount)
class CampAccountAdmin(admin.ModelAdmin):
    list_display = ['student', 'balance_points', 'updated_at']
    search_fields = ['student__name']

    def get_readonly_fields(self, request, obj=None):
        """Balances move only through checkouts and refunds once created."""
        if obj is not None:
            return ['student', 'balance_points', 'created_at', 'updated_at']
        return ['created_at', 'updated_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin interface for camp register orders.

    Orders are immutable here; refunds go through the API so balances are
    credited under the same locks as checkouts.
    """

    list_display = [
        'short_id',
        'paid_by',
        'subtotal_points',
        'total_discount_points',
        'payable_points',
        'status_badge',
        'paid_at',
    ]
    list_filter = ['status', 'paid_at']
    search_fields = ['id', 'paid_by', 'payments__student__name']
    readonly_fields = [
        'status',
        'cashier',
        'paid_by',
        'subtotal_points',
        'manual_discount_points',
        'coupon_discount_points',
        'aura_discount_points',
        'total_discount_points',
        'payable_points',
        'fingerprint',
        'paid_at',
        'created_at',
        'updated_at',
    ]
    inlines = [OrderLineInline, PaymentInline, CouponRedemptionInline]
    date_hierarchy = 'paid_at'

    fieldsets = (
        ('Order', {
            'fields': ('status', 'cashier', 'paid_by', 'paid_at')
        }),
        ('Totals', {
            'fields': (
                'subtotal_points',
                'manual_discount_points',
                'coupon_discount_points',
                'aura_discount_points',
                'total_discount_points',
                'payable_points',
            )
        }),
        ('Metadata', {
            'fields': ('fingerprint', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = 'Order'

    def status_badge(self, obj):
        """Display order status as colored badge."""
        colors = {
            OrderStatus.DRAFT: ('#E5C49A', '#2C1810'),
            OrderStatus.PAID: ('#6B8E5E', 'white'),
            OrderStatus.REFUNDED: ('#A47449', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'


class RefundEntryInline(ReadOnlyInline):
    model = RefundEntry
    fields = ['payment', 'amount_points', 'balance_before', 'balance_after']
    readonly_fields = fields


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    list_display = ['order', 'refunded_points', 'refunded_by', 'refunded_at']
    readonly_fields = ['order', 'refunded_points', 'refunded_by', 'refunded_at']
    inlines = [RefundEntryInline]

    def has_add_permission(self, request):
        return False
