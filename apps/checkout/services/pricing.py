"""
Pricing calculator.

Turns a cart of (item, quantity, second-portion) lines into priced lines
and a subtotal using current menu prices. Client-sent prices are never
used.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from apps.menus.models import MenuItem
from apps.menus.services import get_items

from ..exceptions import EmptyCartError, InvalidItemError


@dataclass(frozen=True)
class CartLine:
    item_id: UUID
    quantity: int = 1
    second: bool = False


@dataclass(frozen=True)
class PricedLine:
    item_id: UUID
    item_name: str
    unit_price: int
    quantity: int
    second: bool
    line_total: int


@dataclass(frozen=True)
class PricedCart:
    lines: List[PricedLine] = field(default_factory=list)
    subtotal: int = 0

    def first_line_for(self, item_id: UUID) -> Optional[PricedLine]:
        """First cart line selling the given item, if any."""
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None


def price_cart(
    lines: Sequence[CartLine],
    *,
    items: Optional[Dict[UUID, MenuItem]] = None
) -> PricedCart:
    """
    Price a cart against the menu.

    Lines keep their order. Quantities below 1 are treated as 1, and the
    second-portion price only applies to items that allow it.

    Args:
        lines: Cart lines as entered at the register
        items: Preloaded menu items keyed by id (looked up when omitted)

    Returns:
        PricedCart with one PricedLine per input line

    Raises:
        EmptyCartError: If the cart has no lines
        InvalidItemError: If an item is unknown or not for sale
    """
    if not lines:
        raise EmptyCartError()

    if items is None:
        items = get_items(line.item_id for line in lines)

    priced = []
    for line in lines:
        item = items.get(line.item_id)
        if item is None:
            raise InvalidItemError(f"Menu item {line.item_id} not found")
        if not item.is_available:
            raise InvalidItemError(f"{item.name} is not available")

        quantity = max(1, int(line.quantity))
        second = bool(line.second and item.allow_second)
        unit_price = item.unit_price(second=second)
        priced.append(PricedLine(
            item_id=item.id,
            item_name=item.name,
            unit_price=unit_price,
            quantity=quantity,
            second=second,
            line_total=unit_price * quantity,
        ))

    return PricedCart(
        lines=priced,
        subtotal=sum(line.line_total for line in priced),
    )
