from django.contrib import admin

from .models import AccessSettings, AuthorizationToken, NfcAccessTag


@admin.register(AccessSettings)
class AccessSettingsAdmin(admin.ModelAdmin):
    """PIN hashes are written by the set_discount_pin command only."""
    list_display = ['id', 'updated_at']
    readonly_fields = ['discount_pin_hash', 'updated_at']


@admin.register(NfcAccessTag)
class NfcAccessTagAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'role', 'is_active', 'last_used_at', 'created_at']
    list_filter = ['role', 'is_active']
    search_fields = ['label']
    readonly_fields = ['last_used_at', 'created_at']


@admin.register(AuthorizationToken)
class AuthorizationTokenAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'method', 'issued_to', 'created_at', 'expires_at', 'used_at']
    list_filter = ['method']
    readonly_fields = ['token', 'method', 'issued_to', 'created_at', 'expires_at', 'used_at']

    def has_add_permission(self, request):
        """Tokens are issued by the authorize endpoint only."""
        return False
