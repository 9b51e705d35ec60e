import json

import pytest

from app_pdv import config
from app_pdv.app_container import AppContainer
from app_pdv.errors import PersistenceFailure
from app_pdv.main import create_app
from app_pdv.repositories import MemoryStorage


PRODUCT_A = {
    'id': 'A', 'name': 'Café Expresso', 'price': 5.50, 'cost': 1.20, 'stock': 10,
    'category': 'Bebidas', 'description': 'Café forte e encorpado.',
}
PRODUCT_B = {
    'id': 'B', 'name': 'Pão de Queijo', 'price': 4.00, 'cost': 1.50, 'stock': 5,
    'category': 'Alimentos', 'description': 'Tradicional pão de queijo mineiro.',
    'barcode': '7891000100103',
}


class FlakyStorage(MemoryStorage):
    """MemoryStorage that refuses to save the keys listed in fail_keys."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_keys = set()

    def save(self, key, serialized):
        if key in self.fail_keys:
            raise PersistenceFailure(key, f"disco lleno ({key})")
        super().save(key, serialized)

    def loads(self, key):
        raw = self.data.get(key)
        return None if raw is None else json.loads(raw)


@pytest.fixture(autouse=True)
def _isolated_logs(monkeypatch, tmp_path):
    # keep profiling off and its files out of the working tree
    monkeypatch.setattr(config, 'ENABLE_PROFILING', False)
    monkeypatch.setattr(config, 'LOGS_DIR', str(tmp_path / 'logs'))
    yield
    AppContainer.reset_instance()


@pytest.fixture
def storage():
    return FlakyStorage({config.PRODUCTS_KEY: json.dumps([PRODUCT_A, PRODUCT_B])})


@pytest.fixture
def container(storage):
    c = AppContainer(storage=storage)
    c.startup()
    return c


@pytest.fixture
def catalog(container):
    return container.catalog_repo


@pytest.fixture
def cart(container):
    return container.cart


@pytest.fixture
def sales_service(container):
    return container.sales_service


@pytest.fixture
def product_a(catalog):
    return catalog.get('A')


@pytest.fixture
def product_b(catalog):
    return catalog.get('B')


@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
