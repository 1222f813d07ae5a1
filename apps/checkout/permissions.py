"""
Custom permission classes for the camp register.

Register access is granted through Django groups so camp staff can be
managed from the admin without code changes.
"""
from rest_framework.permissions import BasePermission

REGISTER_GROUPS = ('camp', 'coach')
REFUND_GROUPS = ('camp',)


def _in_groups(user, group_names):
    if not user or not user.is_authenticated:
        return False
    if user.is_staff:
        return True
    return user.groups.filter(name__in=group_names).exists()


class CanOperateRegister(BasePermission):
    """
    Permission to use the register (quotes, checkout, order history).

    Allows if:
    - User is staff
    - User is in the ``camp`` or ``coach`` group

    Usage:
        @permission_classes([IsAuthenticated, CanOperateRegister])
        def checkout(request):
            ...
    """

    message = 'You must be camp staff to use the register.'

    def has_permission(self, request, view):
        return _in_groups(request.user, REGISTER_GROUPS)


class CanRefundOrders(BasePermission):
    """
    Permission to refund an order.

    Allows if:
    - User is staff
    - User is in the ``camp`` group
    """

    message = 'You do not have permission to refund orders.'

    def has_permission(self, request, view):
        return _in_groups(request.user, REFUND_GROUPS)
