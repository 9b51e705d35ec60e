# ==============================================================================
# CONFIGURACIÓN DEL PUNTO DE VENTA
# ==============================================================================
# Valores por defecto pensados para una sola caja (un solo operador).
# Todo lo que depende del entorno se puede sobrescribir con variables:
#
#   export PDV_DATA_DIR=/srv/pdv/data
#   export PDV_ENABLE_PROFILING=0
# ==============================================================================

import os


def _env_flag(name: str, default: bool) -> bool:
    """Lee una variable de entorno booleana ('1', 'true', 'si', ...)."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'si', 'sí', 'on')


# ═══════════════════════════════════════════════════════════════════════════
# MODO DE EJECUCIÓN
# ═══════════════════════════════════════════════════════════════════════════
# False = modo desarrollo (Flask en debug al ejecutar wsgi.py directamente)
PRODUCTION_MODE = _env_flag('PDV_PRODUCTION_MODE', False)

# ═══════════════════════════════════════════════════════════════════════════
# RUTAS
# ═══════════════════════════════════════════════════════════════════════════
# Directorio donde viven los JSON (products.json, sales.json, ...)
DATA_DIR = os.environ.get('PDV_DATA_DIR') or os.path.join(os.getcwd(), 'data')

# Directorio de logs de rendimiento
LOGS_DIR = os.environ.get('PDV_LOGS_DIR') or os.path.join(DATA_DIR, 'logs')

# ═══════════════════════════════════════════════════════════════════════════
# CLAVES DE PERSISTENCIA
# ═══════════════════════════════════════════════════════════════════════════
# Cada clave guarda la colección completa, re-serializada en cada cambio.
PRODUCTS_KEY = 'products'
SALES_KEY = 'sales'
JOURNAL_KEY = 'checkout_journal'
AUDIT_KEY = 'audit'

# ═══════════════════════════════════════════════════════════════════════════
# REGLAS DE NEGOCIO
# ═══════════════════════════════════════════════════════════════════════════
# Tolerancia de conciliación: media unidad menor (medio centavo).
# Solo absorbe el error de representación de float; un centavo de
# diferencia siempre se rechaza.
PAYMENT_EPSILON = 0.005

# Nombre del operador que firma los registros de auditoría
OPERATOR_NAME = os.environ.get('PDV_OPERATOR', 'caixa')

# Límite de registros de auditoría para evitar archivos muy grandes
AUDIT_MAX_LOGS = 10000

# Umbral por defecto para alertas de stock bajo
LOW_STOCK_THRESHOLD = 5

# ═══════════════════════════════════════════════════════════════════════════
# PROFILING
# ═══════════════════════════════════════════════════════════════════════════
ENABLE_PROFILING = _env_flag('PDV_ENABLE_PROFILING', True)

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms
