# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio del punto de venta.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento (archivos/memoria)
#
# ESTRUCTURA:
# ├── cart_service.py      → Carrito de la venta en curso
# ├── payment_service.py   → Conciliación de pagos (efectivo, tarjeta, pix)
# ├── sales_service.py     → Cierre de venta, historial, diario de caja
# ├── inventory_service.py → Alta/edición/baja de productos
# └── audit_service.py     → Logs de actividad
#
# REGLA DE ORO:
# SalesService.complete_sale() es el ÚNICO camino que crea ventas y
# descuenta stock por una venta.
# ==============================================================================

from app_pdv.services.audit_service import AuditService
from app_pdv.services.cart_service import Cart
from app_pdv.services.inventory_service import InventoryService
from app_pdv.services.payment_service import PaymentService
from app_pdv.services.sales_service import CheckoutState, SalesService

__all__ = [
    'AuditService',
    'Cart',
    'InventoryService',
    'PaymentService',
    'SalesService',
    'CheckoutState',
]
