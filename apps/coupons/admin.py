from django.contrib import admin

from .models import CouponType, StudentCoupon, StudentAura


@admin.register(CouponType)
class CouponTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'kind', 'value', 'scope', 'item', 'enabled', 'created_at']
    list_filter = ['kind', 'scope', 'enabled']
    search_fields = ['name']


@admin.register(StudentCoupon)
class StudentCouponAdmin(admin.ModelAdmin):
    list_display = ['student', 'coupon_type', 'remaining_qty', 'updated_at']
    list_filter = ['coupon_type']
    search_fields = ['student__name', 'coupon_type__name']

    def get_readonly_fields(self, request, obj=None):
        """Counters are owned by the checkout ledger once the grant exists."""
        if obj is not None:
            return ['student', 'coupon_type', 'remaining_qty', 'created_at', 'updated_at']
        return ['created_at', 'updated_at']


@admin.register(StudentAura)
class StudentAuraAdmin(admin.ModelAdmin):
    list_display = ['student', 'aura_name', 'discount_points', 'updated_at']
    search_fields = ['student__name', 'aura_name']
