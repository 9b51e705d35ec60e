# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio usando dataclasses, independientes del mecanismo de
# persistencia (JSON hoy, cualquier almacenamiento clave-valor mañana).
# ==============================================================================

from .entities import (
    # Catálogo
    Product,

    # Carrito
    CartLine,

    # Pagos
    Payment,
    PaymentMethod,

    # Ventas
    Sale,
    SaleItem,
)

__all__ = [
    'Product',
    'CartLine',
    'Payment',
    'PaymentMethod',
    'Sale',
    'SaleItem',
]
