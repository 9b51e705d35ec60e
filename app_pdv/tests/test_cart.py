import pytest

from app_pdv.errors import InvalidQuantity, OutOfStock, ProductNotFound
from app_pdv.models import Product
from app_pdv.services import Cart


def test_add_item_merges_lines_for_same_product(cart, product_a):
    cart.add_item(product_a, 2)
    cart.add_item(product_a, 3)

    assert len(cart) == 1
    assert cart.get_line('A').quantity == 5
    assert cart.total_items() == 5


def test_add_item_over_stock_leaves_cart_unchanged(cart, product_a):
    # A has stock 10
    with pytest.raises(OutOfStock) as exc:
        cart.add_item(product_a, 11)
    assert exc.value.requested == 11
    assert exc.value.available == 10
    assert cart.is_empty()

    cart.add_item(product_a, 2)
    with pytest.raises(OutOfStock):
        cart.add_item(product_a, 9)
    assert cart.get_line('A').quantity == 2


@pytest.mark.parametrize('quantity', [0, -1, 1.5, '2', True, None])
def test_add_item_rejects_non_positive_integers(cart, product_a, quantity):
    with pytest.raises(InvalidQuantity):
        cart.add_item(product_a, quantity)
    assert cart.is_empty()


def test_invalid_quantity_is_also_a_value_error(cart, product_a):
    with pytest.raises(ValueError):
        cart.add_item(product_a, 0)


def test_subtotal_is_recomputed_from_lines(cart, product_a, product_b):
    cart.add_item(product_a, 2)
    cart.add_item(product_b, 1)
    assert cart.subtotal() == 15.00

    cart.update_quantity('A', 1)
    assert cart.subtotal() == 9.50

    cart.remove_item('B')
    assert cart.subtotal() == 5.50


def test_update_quantity_zero_or_negative_removes_line(cart, product_a, product_b):
    cart.add_item(product_a, 2)
    cart.add_item(product_b, 1)

    assert cart.update_quantity('A', 0) is None
    assert cart.get_line('A') is None

    assert cart.update_quantity('B', -3) is None
    assert cart.is_empty()


def test_update_quantity_unknown_line(cart):
    with pytest.raises(ProductNotFound):
        cart.update_quantity('A', 1)


def test_update_quantity_zero_for_absent_line_is_noop(cart, product_a):
    cart.add_item(product_a, 1)
    assert cart.update_quantity('B', 0) is None
    assert cart.update_quantity('Z', -1) is None
    assert [line.product_id for line in cart.lines] == ['A']


def test_update_quantity_over_stock_keeps_previous_quantity(cart, product_b):
    cart.add_item(product_b, 2)
    with pytest.raises(OutOfStock):
        cart.update_quantity('B', 6)
    assert cart.get_line('B').quantity == 2


def test_remove_item_absent_is_noop(cart, product_a):
    cart.add_item(product_a, 1)
    cart.remove_item('does-not-exist')
    assert len(cart) == 1


def test_clear(cart, product_a, product_b):
    cart.add_item(product_a, 1)
    cart.add_item(product_b, 1)
    cart.clear()
    assert cart.is_empty()
    assert cart.subtotal() == 0


def test_stock_is_checked_against_current_catalog(cart, catalog, product_a):
    catalog.set_stock_levels({'A': 1})
    with pytest.raises(OutOfStock):
        cart.add_item(product_a, 2)


def test_product_removed_from_catalog_cannot_be_added(cart, catalog, product_a):
    catalog.remove('A')
    with pytest.raises(ProductNotFound):
        cart.add_item(product_a, 1)


def test_cart_never_touches_catalog_stock(cart, catalog, product_a, product_b):
    cart.add_item(product_a, 4)
    cart.add_item(product_b, 5)
    cart.update_quantity('A', 7)
    cart.clear()

    assert catalog.get('A').stock == 10
    assert catalog.get('B').stock == 5


def test_cart_without_catalog_uses_product_stock():
    cart = Cart()
    product = Product(id='X', name='Água', price=3.0, stock=2)
    cart.add_item(product, 2)
    with pytest.raises(OutOfStock):
        cart.add_item(product, 1)


def test_to_dict_summary(cart, product_a, product_b):
    cart.add_item(product_a, 2)
    cart.add_item(product_b, 1)

    data = cart.to_dict()
    assert data['subtotal'] == 15.00
    assert data['total_items'] == 3
    assert data['items_count'] == 2
    assert data['items'][0]['id'] == 'A'
    assert data['items'][0]['quantity'] == 2
    assert data['items'][0]['line_total'] == 11.00


def test_lines_are_read_only_view(cart, product_a):
    cart.add_item(product_a, 1)
    lines = cart.lines
    assert isinstance(lines, tuple)
    cart.clear()
    assert len(lines) == 1
