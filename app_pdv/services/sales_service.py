# ==============================================================================
# SERVICIO DE VENTAS
# ==============================================================================
# Centraliza el cierre de ventas: carrito + descuento + pagos → venta
# inmutable en el historial y descuento de stock en el catálogo.
# Es el ÚNICO camino que crea ventas y que descuenta stock al cobrar.
#
# Orden del cierre:
#   1. Recalcular subtotal desde el carrito
#   2. Validar descuento y conciliar pagos
#   3. Revalidar stock contra el catálogo actual
#   4. Congelar las líneas en la venta (id + fecha nuevos)
#   5. Escribir la venta y el stock final en el diario  ← punto de confirmación
#   6. Aplicar en memoria: venta al inicio del historial + stock nuevo
#   7. Vaciar el carrito
#   8. Volcar products y sales, vaciar el diario, auditar
# ==============================================================================

import math
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from app_pdv.errors import (
    EmptyCart,
    InvalidDiscount,
    OutOfStock,
    PersistenceFailure,
    ProductNotFound,
)
from app_pdv.models import Payment, Sale, SaleItem
from app_pdv.performance_logger import profile_function
from app_pdv.repositories.interfaces import ICatalogStore, IJournalRepository, ISalesRepository
from app_pdv.services.audit_service import AuditService
from app_pdv.services.cart_service import Cart
from app_pdv.services.payment_service import PaymentInput, PaymentService


class CheckoutState(str, Enum):
    """Estados de un intento de cobro."""
    OPEN = 'OPEN'                # Carrito en edición
    RECONCILING = 'RECONCILING'  # Pagos enviados, validando
    COMMITTED = 'COMMITTED'      # Venta registrada, stock descontado, carrito vacío
    REJECTED = 'REJECTED'        # Nada cambió, el carrito sigue igual


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SalesService:
    """
    Servicio de cierre de ventas e historial.

    Responsabilidades:
    - Crear ventas desde el carrito (conciliación + stock + historial)
    - Volcado y recuperación del diario de caja
    - Consultas sobre el historial
    """

    def __init__(
        self,
        sales_repo: ISalesRepository,
        catalog_repo: ICatalogStore,
        journal_repo: IJournalRepository,
        payment_service: Optional[PaymentService] = None,
        audit_service: Optional[AuditService] = None,
        clock: Callable[[], datetime] = _utc_now
    ):
        """
        Args:
            sales_repo: Historial de ventas
            catalog_repo: Catálogo (destino de los descuentos de stock)
            journal_repo: Diario de caja
            payment_service: Conciliador de pagos
            audit_service: Servicio de auditoría (opcional)
            clock: Fuente de la fecha de la venta
        """
        self.sales_repo = sales_repo
        self.catalog_repo = catalog_repo
        self.journal_repo = journal_repo
        self.payment_service = payment_service or PaymentService()
        self.audit_service = audit_service
        self.clock = clock
        self.last_checkout_state = CheckoutState.OPEN

    # =========================================================================
    # CIERRE DE VENTA
    # =========================================================================

    @profile_function(name="Confirmar venta")
    def complete_sale(
        self,
        cart: Cart,
        discount: float = 0.0,
        payments: Sequence[PaymentInput] = (),
        user: Optional[str] = None
    ) -> Sale:
        """
        Cierra la venta del carrito.

        Args:
            cart: Carrito en curso
            discount: Descuento en moneda (0 <= discount <= subtotal)
            payments: Pagos en orden de ingreso
            user: Operador (para auditoría)

        Returns:
            La venta registrada

        Raises:
            EmptyCart, InvalidDiscount, InvalidPayment, PaymentMismatch,
            ProductNotFound, OutOfStock: nada cambió
            PersistenceFailure: si committed es False nada cambió; si es True
                la venta quedó registrada y falta volcar las colecciones
        """
        self.last_checkout_state = CheckoutState.RECONCILING
        try:
            sale = self._complete_sale(cart, discount, payments, user)
        except PersistenceFailure as e:
            self.last_checkout_state = CheckoutState.COMMITTED if e.committed else CheckoutState.REJECTED
            raise
        except Exception:
            self.last_checkout_state = CheckoutState.REJECTED
            raise
        self.last_checkout_state = CheckoutState.COMMITTED
        return sale

    def _complete_sale(
        self,
        cart: Cart,
        discount: Any,
        payments: Sequence[PaymentInput],
        user: Optional[str]
    ) -> Sale:
        if cart.is_empty():
            raise EmptyCart()

        subtotal = cart.subtotal()
        discount = self._validate_discount(discount, subtotal)
        total = round(subtotal - discount, 2)

        tendered = self.payment_service.reconcile(total, payments)
        stock_levels = self._check_stock(cart)
        sale = self._build_sale(cart, subtotal, discount, total, tendered)

        # Punto de confirmación: una sola escritura con venta + stock final
        self.journal_repo.begin(sale, stock_levels)

        # Aplicar en memoria (sin interrupciones entre ambos pasos)
        self.sales_repo.prepend(sale, persist=False)
        self.catalog_repo.set_stock_levels(stock_levels, persist=False)
        cart.clear()

        try:
            self.checkpoint()
        except PersistenceFailure as e:
            raise PersistenceFailure(
                e.key,
                f"Venta {sale.id} registrada en el diario, pero no se pudo guardar '{e.key}'",
                committed=True,
                sale=sale
            ) from e

        # Ventas y stock ya están guardados: aquí solo puede faltar el log
        if self.audit_service:
            try:
                self.audit_service.log_sale_committed(user, sale, stock_levels)
            except PersistenceFailure as e:
                raise PersistenceFailure(
                    e.key,
                    f"Venta {sale.id} guardada, pero no se pudo escribir la auditoría",
                    committed=True,
                    sale=sale,
                    saved=True
                ) from e

        return sale

    def preview_payments(
        self,
        cart: Cart,
        discount: Any = 0.0,
        payments: Sequence[PaymentInput] = ()
    ) -> Dict[str, Any]:
        """
        Vista previa de la pantalla de cobro: cuánto falta o sobra.
        No modifica nada.

        Raises:
            InvalidDiscount: El descuento no es válido para el subtotal actual
        """
        subtotal = cart.subtotal()
        discount = self._validate_discount(discount, subtotal)
        total = round(subtotal - discount, 2)
        summary = self.payment_service.summarize(total, payments)
        summary.update({'subtotal': subtotal, 'discount': discount, 'total': total})
        return summary

    def _validate_discount(self, discount: Any, subtotal: float) -> float:
        if discount is None:
            return 0.0
        if isinstance(discount, bool) or not isinstance(discount, (int, float)):
            raise InvalidDiscount(discount, subtotal)
        if not math.isfinite(discount) or discount < 0 or discount > subtotal:
            raise InvalidDiscount(discount, subtotal)
        return round(float(discount), 2)

    def _check_stock(self, cart: Cart) -> Dict[str, int]:
        """
        Revalida cada línea contra el catálogo actual.

        Returns:
            Stock final por producto vendido
        """
        levels: Dict[str, int] = {}
        for line in cart.lines:
            product = self.catalog_repo.get(line.product_id)
            if product is None:
                raise ProductNotFound(line.product_id)
            if line.quantity > product.stock:
                raise OutOfStock(product.id, line.quantity, product.stock, product.name)
            levels[product.id] = product.stock - line.quantity
        return levels

    def _build_sale(
        self,
        cart: Cart,
        subtotal: float,
        discount: float,
        total: float,
        payments: Iterable[Payment]
    ) -> Sale:
        return Sale(
            id=str(uuid.uuid4()),
            date=self.clock().isoformat(),
            items=tuple(SaleItem.from_line(line) for line in cart.lines),
            subtotal=subtotal,
            discount=discount,
            total=total,
            payments=tuple(payments)
        )

    # =========================================================================
    # VOLCADO Y RECUPERACIÓN
    # =========================================================================

    def checkpoint(self) -> None:
        """
        Vuelca products y sales y vacía el diario.
        Products va primero: si sales quedó guardado, el stock también.
        """
        self.catalog_repo.flush()
        self.sales_repo.flush()
        self.journal_repo.clear()

    def recover(self) -> List[str]:
        """
        Reaplica las ventas del diario que no llegaron al historial.
        Se llama al arrancar, antes de aceptar ventas nuevas.

        Returns:
            IDs de las ventas reaplicadas
        """
        entries = self.journal_repo.pending()
        if not entries:
            return []

        replayed = []
        for entry in entries:
            if self.sales_repo.get_by_id(entry.sale.id) is not None:
                continue
            self.sales_repo.prepend(entry.sale, persist=False)
            self.catalog_repo.set_stock_levels(entry.stock_levels, persist=False)
            replayed.append(entry.sale.id)

        self.checkpoint()
        if self.audit_service and replayed:
            self.audit_service.log_recovery(replayed)
        return replayed

    def has_pending_checkpoint(self) -> bool:
        return self.journal_repo.has_pending()

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        return self.sales_repo.get_by_id(sale_id)

    def list_sales(self, limit: Optional[int] = None) -> List[Sale]:
        """Ventas, la más reciente primero."""
        sales = self.sales_repo.list()
        return sales[:limit] if limit else sales

    def search_sales(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> List[Sale]:
        return self.sales_repo.get_sales_by_date_range(from_date, to_date)

    def calculate_totals(self) -> Dict[str, Any]:
        return self.sales_repo.calculate_totals()
