# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que usan los servicios. Permiten:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de interfaces, NO de implementaciones concretas
#    - Cambiar archivos JSON → otro almacenamiento clave-valor solo requiere
#      una nueva implementación de IStorage
#
# 2. TESTING
#    - MemoryStorage o dobles que fallen a pedido, sin tocar archivos reales
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from app_pdv.models import Product, Sale


# ==============================================================================
# PUENTE DE PERSISTENCIA
# ==============================================================================

@runtime_checkable
class IStorage(Protocol):
    """
    Almacenamiento durable clave-valor.
    Guarda texto JSON ya serializado; no conoce las entidades.
    """

    def load(self, key: str) -> Optional[str]:
        """Devuelve el JSON guardado bajo la clave, o None si no existe."""
        ...

    def save(self, key: str, serialized: str) -> None:
        """Reemplaza el contenido de la clave. Lanza PersistenceFailure si falla."""
        ...


# ==============================================================================
# INTERFACES ESPECÍFICAS POR DOMINIO
# ==============================================================================

@runtime_checkable
class ICatalogStore(Protocol):
    """
    Catálogo de productos.
    El núcleo de venta solo lee y pide descuentos de stock.
    """

    def list(self) -> List[Product]:
        """Todos los productos en orden de alta."""
        ...

    def get(self, product_id: str) -> Optional[Product]:
        """Un producto por ID."""
        ...

    def upsert(self, product: Product) -> Product:
        """Crea o reemplaza un producto."""
        ...

    def remove(self, product_id: str) -> Optional[Product]:
        """Elimina un producto."""
        ...

    def decrement_stock(self, product_id: str, amount: int) -> Product:
        """Descuenta stock de un producto."""
        ...

    def set_stock_levels(self, levels: Dict[str, int], persist: bool = True) -> None:
        """Fija el stock absoluto de varios productos de una vez."""
        ...

    def flush(self) -> None:
        """Escribe la colección completa."""
        ...


@runtime_checkable
class ISalesRepository(Protocol):
    """
    Historial de ventas (más reciente primero). Solo se agrega.
    """

    def list(self) -> List[Sale]:
        """Todas las ventas, la más reciente primero."""
        ...

    def get_by_id(self, sale_id: str) -> Optional[Sale]:
        """Una venta por ID."""
        ...

    def prepend(self, sale: Sale, persist: bool = True) -> None:
        """Agrega una venta al inicio del historial."""
        ...

    def get_sales_by_date_range(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> List[Sale]:
        """Ventas en un rango de fechas (inclusive)."""
        ...

    def calculate_totals(self) -> Dict[str, Any]:
        """Totales agregados del historial."""
        ...

    def flush(self) -> None:
        """Escribe la colección completa."""
        ...


@runtime_checkable
class IJournalRepository(Protocol):
    """
    Diario de caja: registro previo de cada venta confirmada.
    """

    def begin(self, sale: Sale, stock_levels: Dict[str, int]) -> None:
        """Registra la venta y el stock resultante en una sola escritura."""
        ...

    def pending(self) -> List[Any]:
        """Entradas aún no volcadas a products/sales."""
        ...

    def has_pending(self) -> bool:
        """True si hay ventas sin volcar."""
        ...

    def clear(self) -> None:
        """Marca todas las entradas como volcadas."""
        ...


@runtime_checkable
class IAuditRepository(Protocol):
    """
    Interfaz para el repositorio de auditoría.
    """

    def load(self) -> List[Dict[str, Any]]:
        """Carga todos los logs."""
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str,
        details: Dict[str, Any]
    ) -> None:
        """Registra un evento de auditoría."""
        ...

    def find_by_type(self, log_type: str) -> List[Dict[str, Any]]:
        """Logs de un tipo."""
        ...

    def find_by_related_id(self, related_id: str) -> List[Dict[str, Any]]:
        """Logs asociados a una venta o producto."""
        ...
