# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Centraliza toda la lógica de registro de auditoría.
# Formatea mensajes humanizados y categoriza eventos.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pdv import config
from app_pdv.models import Product, Sale
from app_pdv.repositories.interfaces import IAuditRepository


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Centraliza:
    - Registro de eventos con mensajes humanizados
    - Categorización de eventos (VENTA, PAGO, STOCK, PRODUCTO, SISTEMA)

    La regla de oro: Si entra dinero → siempre log de PAGO
    """

    # Tipos de eventos de auditoría
    TYPE_VENTA = 'VENTA'
    TYPE_PAGO = 'PAGO'
    TYPE_STOCK = 'STOCK'
    TYPE_PRODUCTO = 'PRODUCTO'
    TYPE_SISTEMA = 'SISTEMA'

    def __init__(self, audit_repo: IAuditRepository, default_user: str = config.OPERATOR_NAME):
        """
        Args:
            audit_repo: Repositorio de auditoría
            default_user: Operador cuando la llamada no indica uno
        """
        self.audit_repo = audit_repo
        self.default_user = default_user

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: str,
        user: Optional[str],
        message: str,
        related_id: str = '',
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Registra un evento de auditoría genérico."""
        self.audit_repo.log(log_type, user or self.default_user, message, related_id, details)

    def log_sale_created(self, user: Optional[str], sale: Sale) -> None:
        """Registra una venta confirmada."""
        user = user or self.default_user
        message = (
            f"Venta {sale.id} registrada por {user} - Total: R$ {sale.total:.2f}"
            f" - {sale.items_count} items"
        )
        if sale.discount:
            message += f" - Descuento: R$ {sale.discount:.2f}"
        self.log(
            self.TYPE_VENTA,
            user,
            message,
            sale.id,
            {
                'subtotal': sale.subtotal,
                'discount': sale.discount,
                'total': sale.total,
                'items_count': sale.items_count,
                'paid': sale.paid_amount
            }
        )

    def log_payment(
        self,
        user: Optional[str],
        sale_id: str,
        amount: float,
        method: str,
        total: Optional[float] = None
    ) -> None:
        """
        Registra un pago recibido.
        REGLA DE ORO: Si entra dinero, siempre se debe llamar esta función.
        """
        user = user or self.default_user
        message = f"Pago recibido en {sale_id}: R$ {amount:.2f} ({method}) - Registrado por {user}"
        self.log(
            self.TYPE_PAGO,
            user,
            message,
            sale_id,
            {'amount': amount, 'method': method, 'total': total}
        )

    def log_stock_sold(
        self,
        user: Optional[str],
        product_id: str,
        product_name: str,
        quantity: int,
        new_stock: int,
        sale_id: str
    ) -> None:
        """Registra una salida de stock por venta."""
        user = user or self.default_user
        message = (
            f"Salida de stock: -{quantity} {product_name} (venta {sale_id})"
            f" - Nuevo stock: {new_stock} - Por {user}"
        )
        self.log(
            self.TYPE_STOCK,
            user,
            message,
            product_id,
            {'quantity': quantity, 'new_stock': new_stock, 'sale_id': sale_id}
        )

    def log_sale_committed(self, user: Optional[str], sale: Sale, stock_levels: Dict[str, int]) -> None:
        """Venta + un PAGO por cada método + una salida de stock por producto."""
        self.log_sale_created(user, sale)
        for p in sale.payments:
            self.log_payment(user, sale.id, p.amount, p.method.value, sale.total)
        names = {item.id: item.name for item in sale.items}
        for product_id, quantity in sale.quantities().items():
            self.log_stock_sold(
                user, product_id, names.get(product_id, product_id), quantity,
                stock_levels.get(product_id, 0), sale.id
            )

    def log_product_change(
        self,
        user: Optional[str],
        action: str,
        product: Product,
        before: Optional[Product] = None
    ) -> None:
        """
        Registra alta, edición o baja de un producto.

        Args:
            action: 'creado', 'editado' o 'eliminado'
        """
        user = user or self.default_user
        message = f"Producto {product.name} ({product.id}) {action} por {user}"
        details: Dict[str, Any] = {'action': action, 'after': product.to_dict()}
        if before is not None:
            details['before'] = before.to_dict()
            if before.stock != product.stock:
                message += f" - Stock: {before.stock} → {product.stock}"
        self.log(self.TYPE_PRODUCTO, user, message, product.id, details)

    def log_recovery(self, sale_ids: List[str]) -> None:
        """Registra ventas reaplicadas desde el diario al arrancar."""
        message = f"Recuperación al iniciar: {len(sale_ids)} venta(s) reaplicada(s) desde el diario"
        self.log(self.TYPE_SISTEMA, 'sistema', message, '', {'sale_ids': sale_ids})

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def get_logs(self, log_type: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Logs más recientes primero, opcionalmente filtrados por tipo."""
        logs = self.audit_repo.find_by_type(log_type) if log_type else self.audit_repo.load()
        return logs[:limit] if limit else logs

    def get_sale_trail(self, sale_id: str) -> List[Dict[str, Any]]:
        """Todo lo registrado sobre una venta (venta, pagos, stock)."""
        return [
            log for log in self.audit_repo.load()
            if log.get('related_id') == sale_id
            or log.get('details', {}).get('sale_id') == sale_id
        ]

    def get_product_history(self, product_id: str) -> List[Dict[str, Any]]:
        """Altas, ediciones y salidas de stock de un producto."""
        return self.audit_repo.find_by_related_id(product_id)
