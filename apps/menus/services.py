"""
Menu catalog lookups.

The register never trusts prices sent by the client; these helpers are the
authoritative source of price and availability at checkout time.
"""

from typing import Dict, Iterable
from uuid import UUID

from django.core.exceptions import ValidationError

from .models import MenuItem


class MenuItemNotFoundError(Exception):
    """Raised when a menu item does not exist."""
    pass


def get_item(item_id: UUID) -> MenuItem:
    """
    Fetch a single menu item with its menu.

    Raises:
        MenuItemNotFoundError: If the item doesn't exist
    """
    try:
        return MenuItem.objects.select_related('menu').get(id=item_id)
    except (MenuItem.DoesNotExist, ValueError, ValidationError):
        raise MenuItemNotFoundError(f"Menu item {item_id} not found")


def get_items(item_ids: Iterable[UUID]) -> Dict[UUID, MenuItem]:
    """Bulk variant of get_item; missing ids are simply absent from the result."""
    ids = {item_id for item_id in item_ids}
    items = MenuItem.objects.select_related('menu').filter(id__in=ids)
    return {item.id: item for item in items}
