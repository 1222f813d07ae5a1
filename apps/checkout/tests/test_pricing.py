"""
Tests for the pricing calculator and menu lookups.
"""
import uuid

import pytest

from apps.checkout.exceptions import EmptyCartError, InvalidItemError
from apps.checkout.services import CartLine, price_cart
from apps.menus.services import MenuItemNotFoundError, get_item, get_items


@pytest.mark.django_db
class TestPriceCart:
    """Tests for price_cart."""

    def test_subtotal_is_sum_of_lines(self, pasta, juice):
        priced = price_cart([
            CartLine(item_id=pasta.id),
            CartLine(item_id=juice.id, quantity=2),
        ])

        assert priced.subtotal == 40 + 25 * 2
        assert [line.line_total for line in priced.lines] == [40, 50]

    def test_lines_keep_input_order(self, pasta, juice):
        priced = price_cart([
            CartLine(item_id=juice.id),
            CartLine(item_id=pasta.id),
        ])

        assert [line.item_name for line in priced.lines] == ['Juice', 'Pasta']

    def test_second_portion_price(self, fries):
        priced = price_cart([
            CartLine(item_id=fries.id),
            CartLine(item_id=fries.id, second=True),
        ])

        assert [line.unit_price for line in priced.lines] == [15, 10]
        assert priced.subtotal == 25

    def test_second_flag_ignored_when_not_allowed(self, pasta):
        priced = price_cart([CartLine(item_id=pasta.id, second=True)])

        assert priced.lines[0].unit_price == 40
        assert priced.lines[0].second is False

    def test_quantity_below_one_is_clamped(self, juice):
        priced = price_cart([CartLine(item_id=juice.id, quantity=0)])

        assert priced.lines[0].quantity == 1
        assert priced.subtotal == 25

    def test_empty_cart(self):
        with pytest.raises(EmptyCartError):
            price_cart([])

    def test_unknown_item(self):
        with pytest.raises(InvalidItemError):
            price_cart([CartLine(item_id=uuid.uuid4())])

    def test_disabled_item(self, pasta):
        pasta.enabled = False
        pasta.save()

        with pytest.raises(InvalidItemError):
            price_cart([CartLine(item_id=pasta.id)])

    def test_disabled_menu(self, menu, pasta):
        menu.enabled = False
        menu.save()

        with pytest.raises(InvalidItemError):
            price_cart([CartLine(item_id=pasta.id)])

    def test_does_not_write(self, pasta, django_assert_num_queries):
        with django_assert_num_queries(1):
            price_cart([CartLine(item_id=pasta.id)])


@pytest.mark.django_db
class TestMenuLookups:
    """Tests for apps.menus.services."""

    def test_get_item(self, pasta):
        item = get_item(pasta.id)

        assert item.name == 'Pasta'
        assert item.menu.name == 'Snack Bar'

    def test_get_item_missing(self):
        with pytest.raises(MenuItemNotFoundError):
            get_item(uuid.uuid4())

    def test_get_items_skips_missing(self, pasta, juice):
        missing = uuid.uuid4()
        items = get_items([pasta.id, juice.id, missing])

        assert set(items) == {pasta.id, juice.id}
