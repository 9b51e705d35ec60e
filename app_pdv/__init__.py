# ==============================================================================
# app_pdv - Núcleo de ventas de un punto de venta (cafetería / comercio)
# ==============================================================================
# Catálogo → Carrito → Conciliación de pagos → Venta → Historial
# ==============================================================================

__version__ = '1.0.0'
