import os

import pytest

from app_pdv import config, performance_logger
from app_pdv.main import create_app


@pytest.fixture
def profiling_on(monkeypatch):
    monkeypatch.setattr(config, 'ENABLE_PROFILING', True)
    performance_logger.reset_stats()
    yield
    performance_logger.reset_stats()


def test_profile_function_counts_calls(profiling_on):
    @performance_logger.profile_function(name="Suma")
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert add(1, 1) == 2

    stats = performance_logger.get_function_stats()['Suma']
    assert stats['calls'] == 2
    assert stats['max_time'] >= 0


def test_profile_function_disabled_records_nothing():
    @performance_logger.profile_function
    def noop():
        return 'ok'

    assert noop() == 'ok'
    assert 'noop' not in performance_logger.get_function_stats()


def test_slow_function_is_logged(profiling_on, monkeypatch):
    monkeypatch.setattr(config, 'THRESHOLD_WARNING', 0)

    @performance_logger.profile_function(name="Confirmar venta")
    def slow():
        return None

    slow()
    with open(os.path.join(config.LOGS_DIR, performance_logger.SLOW_FUNCTIONS_LOG), encoding='utf-8') as f:
        assert 'Función: Confirmar venta' in f.read()


def test_routes_are_logged_with_readable_names(profiling_on, container):
    app = create_app(container)
    with app.test_client() as client:
        client.get('/api/carrito')
        client.get('/api/ventas/abc')

    with open(os.path.join(config.LOGS_DIR, performance_logger.PERFORMANCE_LOG), encoding='utf-8') as f:
        content = f.read()
    assert 'Acción: Ver carrito' in content
    assert 'Acción: Ver venta' in content
