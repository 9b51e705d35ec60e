# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Centraliza toda la lógica del carrito de la venta en curso.
# El carrito vive en memoria y pertenece a un único flujo de cobro;
# nunca modifica el catálogo.
# ==============================================================================

from typing import Any, Dict, List, Optional, Tuple

from app_pdv.errors import InvalidQuantity, OutOfStock, ProductNotFound
from app_pdv.models import CartLine, Product
from app_pdv.repositories.interfaces import ICatalogStore


def _check_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity)
    return quantity


class Cart:
    """
    Carrito de compras de la venta en curso.

    Responsabilidades:
    - Agregar/eliminar items del carrito
    - Validar stock disponible al agregar o cambiar cantidades
    - Calcular el subtotal (siempre recalculado, nunca cacheado)
    - Limpiar carrito

    Si se le pasa el catálogo, el stock se valida contra el producto
    actual del catálogo; si no, contra el stock del producto recibido.
    """

    def __init__(self, catalog: Optional[ICatalogStore] = None):
        """
        Args:
            catalog: Catálogo de productos (opcional)
        """
        self.catalog = catalog
        self._lines: List[CartLine] = []

    # =========================================================================
    # CONSULTA
    # =========================================================================

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def get_line(self, product_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    def subtotal(self) -> float:
        """Suma de price * quantity de las líneas actuales."""
        return round(sum(line.product.price * line.quantity for line in self._lines), 2)

    def to_dict(self) -> Dict[str, Any]:
        """
        Carrito con totales calculados.

        Returns:
            Dict con items, total_items, subtotal, items_count
        """
        return {
            'items': [line.to_dict() for line in self._lines],
            'total_items': self.total_items(),
            'subtotal': self.subtotal(),
            'items_count': len(self._lines)
        }

    # =========================================================================
    # MODIFICACIÓN
    # =========================================================================

    def _available_stock(self, product: Product) -> int:
        """Stock actual del producto según el catálogo."""
        if self.catalog is None:
            return product.stock
        current = self.catalog.get(product.id)
        if current is None:
            raise ProductNotFound(product.id)
        return current.stock

    def add_item(self, product: Product, quantity: int = 1) -> CartLine:
        """
        Agrega un producto al carrito (o suma a su línea si ya está).

        Raises:
            InvalidQuantity: quantity no es entero >= 1
            ProductNotFound: el producto ya no está en el catálogo
            OutOfStock: la cantidad total supera el stock
        """
        if _check_quantity(quantity) < 1:
            raise InvalidQuantity(quantity)

        available = self._available_stock(product)
        existing = self.get_line(product.id)
        new_quantity = (existing.quantity if existing else 0) + quantity
        if new_quantity > available:
            raise OutOfStock(product.id, new_quantity, available, product.name)

        if existing:
            existing.quantity = new_quantity
            return existing

        line = CartLine(product=product, quantity=quantity)
        self._lines.append(line)
        return line

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """
        Cambia la cantidad de una línea. Cantidad <= 0 la elimina
        (sin error si no estaba, igual que remove_item).

        Returns:
            La línea actualizada, o None si se eliminó

        Raises:
            ProductNotFound: cantidad > 0 y el producto no está en el carrito
            OutOfStock: la nueva cantidad supera el stock
        """
        if _check_quantity(quantity) <= 0:
            self.remove_item(product_id)
            return None

        line = self.get_line(product_id)
        if line is None:
            raise ProductNotFound(product_id)

        available = self._available_stock(line.product)
        if quantity > available:
            raise OutOfStock(product_id, quantity, available, line.product.name)

        line.quantity = quantity
        return line

    def remove_item(self, product_id: str) -> None:
        """Elimina la línea del producto (sin error si no estaba)."""
        self._lines = [line for line in self._lines if line.product_id != product_id]

    def clear(self) -> None:
        """Vacía el carrito completamente."""
        self._lines = []
