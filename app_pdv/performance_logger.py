# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide rendimiento de rutas y funciones sin afectar la experiencia del usuario.
# Guarda logs legibles en LOGS_DIR para análisis humano.
#
# ACTIVAR/DESACTIVAR: variable de entorno PDV_ENABLE_PROFILING
# ==============================================================================

import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps

from app_pdv import config


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

# Mapeo de rutas a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    # Catálogo
    'GET /api/productos': 'Ver catálogo',
    'GET /api/productos/bajo-stock': 'Ver bajo stock',
    'GET /api/productos/categorias': 'Ver categorías',
    'GET /api/productos/<product_id>/historial': 'Historial de producto',
    'POST /api/productos': 'Crear producto',
    'PUT /api/productos/<product_id>': 'Editar producto',
    'DELETE /api/productos/<product_id>': 'Eliminar producto',

    # Carrito
    'GET /api/carrito': 'Ver carrito',
    'POST /api/carrito/agregar': 'Agregar al carrito',
    'POST /api/carrito/actualizar': 'Cambiar cantidad',
    'POST /api/carrito/eliminar': 'Eliminar del carrito',
    'POST /api/carrito/limpiar': 'Vaciar carrito',
    'POST /api/carrito/pagos/validar': 'Vista previa de pagos',
    'POST /api/carrito/confirmar': 'Confirmar venta',

    # Ventas
    'GET /api/ventas': 'Ver ventas',
    'GET /api/ventas/totales': 'Ver totales',
    'GET /api/ventas/<sale_id>': 'Ver venta',
    'GET /api/ventas/<sale_id>/auditoria': 'Auditoría de venta',
    'POST /api/ventas/checkpoint': 'Reintentar guardado',

    # Auditoría
    'GET /api/auditoria': 'Ver auditoría',
}


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()
_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# FUNCIONES DE LOGGING
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    """Obtiene timestamp legible"""
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _log_path(filename):
    return os.path.join(config.LOGS_DIR, filename)


def _write_log(filename, content):
    """Escribe contenido a un archivo de log (thread-safe)"""
    try:
        with _write_lock:
            os.makedirs(config.LOGS_DIR, exist_ok=True)
            with open(_log_path(filename), 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass  # Un log de rendimiento que no se escribe no debe tumbar una venta


def _get_route_name(method, path, rule=None):
    """
    Obtiene nombre legible para una ruta.
    Intenta hacer match con ROUTE_NAMES, si no, devuelve la ruta raw.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]

    # Con la regla de Flask se resuelven las rutas con parámetros
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]

    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms):
    """
    Registra el rendimiento de una ruta en performance.log

    Args:
        method: GET, POST, etc.
        path: Ruta solicitada (/api/carrito/agregar)
        rule: Regla de Flask (/api/ventas/<sale_id>)
        time_ms: Tiempo en milisegundos
    """
    if not config.ENABLE_PROFILING:
        return

    log_entry = f"""
════════════════════════════════════════
[PERFORMANCE] {_get_timestamp()}
────────────────────────────────────────
Acción: {_get_route_name(method, path, rule)}
Ruta: {method} {path}
Tiempo: {time_ms:.0f} ms
"""
    _write_log(PERFORMANCE_LOG, log_entry)


def log_slow_route(method, path, rule, time_ms, level='WARNING'):
    """
    Registra una ruta lenta en slow_routes.log

    Args:
        level: 'WARNING' (>300ms) o 'CRITICAL' (>700ms)
    """
    if not config.ENABLE_PROFILING:
        return

    severity = 'LENTA' if level == 'WARNING' else 'MUY LENTA'
    threshold = config.THRESHOLD_WARNING if level == 'WARNING' else config.THRESHOLD_CRITICAL

    log_entry = f"""
[{level}] {_get_timestamp()}
────────────────────────────────────────
Ruta {severity}: {_get_route_name(method, path, rule)}
Detalle: {method} {path}
Tiempo: {time_ms:.0f} ms (umbral: {threshold} ms)
────────────────────────────────────────
"""
    _write_log(SLOW_ROUTES_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ HOOKS PARA FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Inicializa el sistema de profiling en una app Flask.
    Registra hooks before_request y after_request.
    """
    if not config.ENABLE_PROFILING:
        return

    from flask import g, request

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms
        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path

        log_route_performance(method, path, rule, elapsed)

        if elapsed >= config.THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, 'CRITICAL')
        elif elapsed >= config.THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Confirmar venta")
        def complete_sale():
            ...

    Registra cantidad de llamadas, tiempo promedio y tiempo máximo.
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not config.ENABLE_PROFILING:
                return fn(*args, **kwargs)

            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= config.THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    """Registra una llamada lenta a una función"""
    severity = 'CRÍTICO' if time_ms >= config.THRESHOLD_CRITICAL else 'LENTO'

    log_entry = f"""
[{severity}] {_get_timestamp()}
Función: {func_name}
Tiempo: {time_ms:.0f} ms
────────────────────────────────────────
"""
    _write_log(SLOW_FUNCTIONS_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 4️⃣ REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Obtiene estadísticas de todas las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
