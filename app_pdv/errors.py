# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Todas las validaciones del núcleo de venta lanzan una subclase de PDVError.
# Los errores de validación dejan carrito, ventas y stock sin cambios;
# PersistenceFailure se propaga hacia quien maneja el almacenamiento.
# ==============================================================================

from typing import Any, Optional


class PDVError(Exception):
    """Excepción base del punto de venta."""

    code = 'pdv_error'

    def to_dict(self) -> dict:
        """Representación para respuestas JSON."""
        return {'error': str(self), 'code': self.code}


class OutOfStock(PDVError):
    """La cantidad solicitada supera el stock disponible."""

    code = 'out_of_stock'

    def __init__(self, product_id: str, requested: int, available: int, name: str = ''):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        label = name or product_id
        super().__init__(
            f"Stock insuficiente para {label}. "
            f"Solicitado: {requested}, Disponible: {available}"
        )

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            'product_id': self.product_id,
            'requested': self.requested,
            'available': self.available,
        })
        return d


class ProductNotFound(PDVError):
    """El producto no existe en el catálogo (o en el carrito)."""

    code = 'product_not_found'

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Producto {product_id} no encontrado")


class InvalidQuantity(PDVError, ValueError):
    """Cantidad que no es un entero positivo."""

    code = 'invalid_quantity'

    def __init__(self, quantity: Any):
        self.quantity = quantity
        super().__init__(f"Cantidad inválida: {quantity!r}")


class InvalidPayment(PDVError):
    """Un pago con método desconocido o monto no positivo."""

    code = 'invalid_payment'

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Pago #{index + 1} inválido: {reason}")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d['index'] = self.index
        return d


class PaymentMismatch(PDVError):
    """
    Los pagos no cuadran con el total.

    delta = pagado - total (negativo si falta dinero, positivo si sobra).
    """

    code = 'payment_mismatch'

    def __init__(self, delta: float, total: float, paid: float):
        self.delta = delta
        self.total = total
        self.paid = paid
        if delta < 0:
            detail = f"faltan {-delta:.2f}"
        else:
            detail = f"sobran {delta:.2f}"
        super().__init__(
            f"Los pagos ({paid:.2f}) no cuadran con el total ({total:.2f}): {detail}"
        )

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({'delta': self.delta, 'total': self.total, 'paid': self.paid})
        return d


class InvalidDiscount(PDVError):
    """Descuento negativo o mayor que el subtotal."""

    code = 'invalid_discount'

    def __init__(self, discount: Any, subtotal: float):
        self.discount = discount
        self.subtotal = subtotal
        super().__init__(
            f"Descuento inválido ({discount!r}): debe estar entre 0 y {subtotal:.2f}"
        )


class EmptyCart(PDVError):
    """No se puede cerrar una venta sin ítems."""

    code = 'empty_cart'

    def __init__(self):
        super().__init__("El carrito está vacío")


class InvalidProduct(PDVError):
    """Datos de producto que no pasan la validación del catálogo."""

    code = 'invalid_product'

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Producto inválido: {reason}")


class PersistenceFailure(PDVError):
    """
    Una escritura al almacenamiento no se completó.

    Si committed es True la venta ya quedó registrada (en memoria y en el
    diario de caja) y solo falló el volcado de las colecciones; se puede
    reintentar con SalesService.checkpoint().

    Si además saved es True, products y sales ya están en disco y lo único
    que falló fue el registro de auditoría: no hay nada que reintentar.
    """

    code = 'persistence_failure'

    def __init__(
        self,
        key: str,
        message: str = '',
        committed: bool = False,
        sale: Optional[Any] = None,
        saved: bool = False
    ):
        self.key = key
        self.committed = committed
        self.sale = sale
        self.saved = saved
        super().__init__(message or f"No se pudo guardar '{key}'")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d['key'] = self.key
        d['committed'] = self.committed
        d['saved'] = self.saved
        if self.sale is not None:
            d['sale'] = self.sale.to_dict()
        return d
