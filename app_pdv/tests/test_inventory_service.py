import pytest

from app_pdv.errors import InvalidProduct, ProductNotFound


@pytest.fixture
def inventory(container):
    return container.inventory_service


def test_add_product_generates_id(inventory, catalog):
    product = inventory.add_product({'name': 'Suco de Laranja', 'price': 8.0, 'cost': 3.0, 'stock': 30})
    assert product.id
    assert catalog.get(product.id) == product


def test_add_product_duplicate_id(inventory):
    with pytest.raises(InvalidProduct):
        inventory.add_product({'id': 'A', 'name': 'Outro', 'price': 1.0})


@pytest.mark.parametrize('data', [
    {'name': '', 'price': 1.0},
    {'name': 'Bolo', 'price': -1.0},
    {'name': 'Bolo', 'price': 'caro'},
    {'name': 'Bolo', 'price': 1.0, 'cost': float('nan')},
    {'name': 'Bolo', 'price': 1.0, 'stock': -2},
    {'name': 'Bolo', 'price': 1.0, 'stock': 2.5},
])
def test_add_product_validation(inventory, catalog, data):
    with pytest.raises(InvalidProduct):
        inventory.add_product(data)
    assert len(catalog) == 2


def test_update_product(inventory, catalog):
    updated = inventory.update_product('B', {'price': 4.50, 'stock': 12})
    assert updated.price == 4.50
    assert catalog.get('B').stock == 12
    assert catalog.get('B').name == 'Pão de Queijo'


def test_update_product_rejects_unknown_fields_and_id_change(inventory):
    with pytest.raises(InvalidProduct):
        inventory.update_product('B', {'color': 'azul'})
    with pytest.raises(InvalidProduct):
        inventory.update_product('B', {'id': 'C'})
    with pytest.raises(ProductNotFound):
        inventory.update_product('Z', {'price': 1.0})


def test_delete_product(inventory, catalog):
    removed = inventory.delete_product('A')
    assert removed.id == 'A'
    assert 'A' not in catalog
    with pytest.raises(ProductNotFound):
        inventory.delete_product('A')


def test_list_products_filters(inventory):
    assert [p.id for p in inventory.list_products(category='Bebidas')] == ['A']
    assert [p.id for p in inventory.list_products(query='queijo')] == ['B']
    assert [p.id for p in inventory.list_products(query='7891000100103')] == ['B']
    assert len(inventory.list_products()) == 2


def test_lookups(inventory):
    assert inventory.find_by_barcode('7891000100103').id == 'B'
    assert inventory.find_by_barcode('000') is None
    assert [p.id for p in inventory.low_stock()] == ['B']
    assert inventory.categories() == ['Alimentos', 'Bebidas']


def test_product_changes_are_audited(inventory, container):
    inventory.update_product('A', {'stock': 20}, user='gerente')
    logs = container.audit_service.get_logs(log_type='PRODUCTO')
    assert len(logs) == 1
    assert logs[0]['user'] == 'gerente'
    assert logs[0]['details']['before']['stock'] == 10
    assert '10 → 20' in logs[0]['message']


def test_product_history(inventory, container):
    inventory.update_product('B', {'price': 4.50})
    inventory.update_product('A', {'stock': 12})

    history = container.audit_service.get_product_history('B')
    assert len(history) == 1
    assert history[0]['type'] == 'PRODUCTO'
    assert container.audit_service.get_product_history('C') == []
