import json
import os

import pytest

from app_pdv import config
from app_pdv.app_container import AppContainer
from app_pdv.errors import InvalidQuantity, OutOfStock, PersistenceFailure, ProductNotFound
from app_pdv.models import Payment, PaymentMethod, Product, Sale, SaleItem
from app_pdv.repositories import (
    AuditRepository,
    CatalogRepository,
    DEFAULT_PRODUCTS,
    JournalRepository,
    JsonFileStorage,
    MemoryStorage,
    SalesRepository,
)


def _sale(sale_id, date='2024-03-01T10:00:00+00:00'):
    return Sale(
        id=sale_id,
        date=date,
        items=(SaleItem(id='A', name='Café Expresso', price=5.5, quantity=1),),
        subtotal=5.5,
        discount=0.0,
        total=5.5,
        payments=(Payment(PaymentMethod.CASH, 5.5),),
    )


# ---------------------------------------------------------------------------
# JsonFileStorage
# ---------------------------------------------------------------------------

def test_json_file_storage_roundtrip(tmp_path):
    storage = JsonFileStorage(str(tmp_path / 'data'))
    assert storage.load('products') is None

    storage.save('products', '[{"id": "1"}]')
    assert storage.load('products') == '[{"id": "1"}]'
    assert os.listdir(tmp_path / 'data') == ['products.json']


def test_json_file_storage_invalid_utf8(tmp_path):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    (data_dir / 'sales.json').write_bytes(b'[\xff\xfe]')

    storage = JsonFileStorage(str(data_dir))
    with pytest.raises(PersistenceFailure) as exc:
        storage.load('sales')
    assert exc.value.key == 'sales'

    with pytest.raises(PersistenceFailure):
        AppContainer(data_dir=str(data_dir)).startup()


def test_json_file_storage_write_error(tmp_path):
    storage = JsonFileStorage(str(tmp_path))
    # parent directory of the target file does not exist
    with pytest.raises(PersistenceFailure) as exc:
        storage.save('missing/products', '[]')
    assert exc.value.key == 'missing/products'
    assert exc.value.committed is False


def test_collections_survive_restart(tmp_path):
    data_dir = str(tmp_path / 'data')
    first = AppContainer(data_dir=data_dir)
    first.startup()
    cart = first.cart
    cart.add_item(first.catalog_repo.get('1'), 2)
    sale = first.sales_service.complete_sale(cart, 0, [{'method': 'card', 'amount': 11.00}])

    second = AppContainer(data_dir=data_dir)
    assert second.startup() == []
    assert second.sales_repo.get_by_id(sale.id) == sale
    assert second.catalog_repo.get('1').stock == 98

    with open(os.path.join(data_dir, 'sales.json'), encoding='utf-8') as f:
        stored = json.load(f)
    assert stored[0]['payments'] == [{'method': 'card', 'amount': 11.0}]
    assert stored[0]['items'][0]['name'] == 'Café Expresso'


# ---------------------------------------------------------------------------
# CatalogRepository
# ---------------------------------------------------------------------------

def test_catalog_seeds_default_products():
    storage = MemoryStorage()
    catalog = CatalogRepository(storage)

    assert len(catalog) == len(DEFAULT_PRODUCTS) == 4
    assert [p.name for p in catalog.list()] == [
        'Café Expresso', 'Pão de Queijo', 'Suco de Laranja', 'Bolo de Cenoura'
    ]
    assert catalog.get('1').price == 5.50
    assert catalog.get('4').stock == 15
    assert len(json.loads(storage.data[config.PRODUCTS_KEY])) == 4


def test_catalog_does_not_reseed_empty_collection():
    storage = MemoryStorage({config.PRODUCTS_KEY: '[]'})
    assert len(CatalogRepository(storage)) == 0


def test_catalog_corrupt_json_is_not_silently_emptied():
    storage = MemoryStorage({config.PRODUCTS_KEY: '[{"id": '})
    with pytest.raises(PersistenceFailure):
        CatalogRepository(storage)
    assert storage.data[config.PRODUCTS_KEY] == '[{"id": '


def test_decrement_stock(catalog, storage):
    updated = catalog.decrement_stock('A', 3)
    assert updated.stock == 7
    assert catalog.get('A').stock == 7
    assert {p['id']: p['stock'] for p in storage.loads(config.PRODUCTS_KEY)}['A'] == 7


def test_decrement_stock_never_goes_negative(catalog):
    with pytest.raises(OutOfStock):
        catalog.decrement_stock('B', 6)
    assert catalog.get('B').stock == 5

    catalog.decrement_stock('B', 5)
    assert catalog.get('B').stock == 0


@pytest.mark.parametrize('amount', [0, -1, 2.0, True])
def test_decrement_stock_invalid_amount(catalog, amount):
    with pytest.raises(InvalidQuantity):
        catalog.decrement_stock('A', amount)


def test_decrement_stock_unknown_product(catalog):
    with pytest.raises(ProductNotFound):
        catalog.decrement_stock('Z', 1)


def test_set_stock_levels_ignores_unknown_ids(catalog):
    catalog.set_stock_levels({'A': 3, 'Z': 9})
    assert catalog.get('A').stock == 3
    assert 'Z' not in catalog


def test_failed_write_keeps_catalog_in_memory(catalog, storage):
    storage.fail_keys.add(config.PRODUCTS_KEY)
    with pytest.raises(PersistenceFailure):
        catalog.upsert(Product(id='C', name='Suco de Laranja', price=8.0, stock=30))
    assert 'C' not in catalog

    with pytest.raises(PersistenceFailure):
        catalog.remove('A')
    assert 'A' in catalog


def test_upsert_replaces_by_id(catalog):
    catalog.upsert(Product(id='A', name='Café Expresso', price=6.0, stock=10))
    assert catalog.get('A').price == 6.0
    assert len(catalog) == 2


# ---------------------------------------------------------------------------
# SalesRepository
# ---------------------------------------------------------------------------

def test_sales_prepend_and_duplicate_id():
    storage = MemoryStorage()
    repo = SalesRepository(storage)
    repo.prepend(_sale('s1'))
    repo.prepend(_sale('s2'))

    assert [s.id for s in repo.list()] == ['s2', 's1']
    assert [s['id'] for s in json.loads(storage.data[config.SALES_KEY])] == ['s2', 's1']

    with pytest.raises(ValueError):
        repo.prepend(_sale('s1'))
    assert len(repo) == 2


def test_sales_prepend_without_persist_waits_for_flush():
    storage = MemoryStorage()
    repo = SalesRepository(storage)
    repo.prepend(_sale('s1'), persist=False)
    assert config.SALES_KEY not in storage.data

    repo.flush()
    assert SalesRepository(storage).get_by_id('s1') == _sale('s1')


def test_sales_date_range_mixes_naive_and_aware_dates():
    repo = SalesRepository(MemoryStorage())
    repo.prepend(_sale('old', '2024-01-05T09:00:00+00:00'))
    repo.prepend(_sale('new', '2024-03-05T09:00:00Z'))

    assert [s.id for s in repo.get_sales_by_date_range('2024-03-01')] == ['new']
    assert [s.id for s in repo.get_sales_by_date_range(None, '2024-02-01')] == ['old']


def test_stored_sale_with_unknown_payment_method():
    stored = _sale('s1').to_dict()
    stored['payments'] = [{'method': 'bitcoin', 'amount': 5.5}]
    storage = MemoryStorage({config.SALES_KEY: json.dumps([stored])})

    with pytest.raises(PersistenceFailure) as exc:
        SalesRepository(storage)
    assert exc.value.key == config.SALES_KEY
    assert 'bitcoin' in str(exc.value)


# ---------------------------------------------------------------------------
# JournalRepository / AuditRepository
# ---------------------------------------------------------------------------

def test_journal_entries_in_order():
    storage = MemoryStorage()
    journal = JournalRepository(storage)
    assert journal.pending() == []
    assert not journal.has_pending()

    journal.begin(_sale('s1'), {'A': 9})
    journal.begin(_sale('s2'), {'A': 8})

    entries = JournalRepository(storage).pending()
    assert [e.sale.id for e in entries] == ['s1', 's2']
    assert entries[1].stock_levels == {'A': 8}
    assert entries[0].sale == _sale('s1')

    journal.clear()
    assert not journal.has_pending()
    assert json.loads(storage.data[config.JOURNAL_KEY]) == []


def test_audit_log_is_capped_and_most_recent_first():
    repo = AuditRepository(MemoryStorage(), max_logs=3)
    for i in range(5):
        repo.log('VENTA', 'caixa', f'venta {i}', related_id=str(i))

    logs = repo.load()
    assert [log['message'] for log in logs] == ['venta 4', 'venta 3', 'venta 2']
    assert repo.find_by_related_id('3')[0]['type'] == 'VENTA'
    assert repo.find_by_type('PAGO') == []


def test_journal_entry_with_unreadable_stock():
    entry = {'sale': _sale('s1').to_dict(), 'stock': {'A': 'muitos'}}
    storage = MemoryStorage({config.JOURNAL_KEY: json.dumps([entry])})

    with pytest.raises(PersistenceFailure) as exc:
        JournalRepository(storage).pending()
    assert exc.value.key == config.JOURNAL_KEY
