# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se puede pasar un MemoryStorage en lugar de archivos)
#   - Cambiar el almacenamiento sin tocar servicios
#
# El contenedor es dueño del único carrito de la terminal y, al arrancar,
# reaplica el diario de caja antes de aceptar ventas nuevas.
# ==============================================================================

from typing import List, Optional

from app_pdv import config

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from app_pdv.repositories import (
    AuditRepository,
    CatalogRepository,
    IStorage,
    JournalRepository,
    JsonFileStorage,
    SalesRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from app_pdv.services import (
    AuditService,
    Cart,
    InventoryService,
    PaymentService,
    SalesService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer(data_dir='/path/to/data')
        container.startup()
        sale = container.sales_service.complete_sale(container.cart, 0, pagos)
    """

    _instance: Optional['AppContainer'] = None

    def __init__(self, data_dir: str = None, storage: Optional[IStorage] = None):
        """
        Inicializa el contenedor.

        Args:
            data_dir: Carpeta de los JSON (por defecto config.DATA_DIR)
            storage: Almacenamiento ya construido (tiene prioridad sobre data_dir)
        """
        self._data_dir = data_dir or config.DATA_DIR
        self._storage = storage

        # Inicializar repositorios (lazy loading)
        self._catalog_repo: Optional[CatalogRepository] = None
        self._sales_repo: Optional[SalesRepository] = None
        self._journal_repo: Optional[JournalRepository] = None
        self._audit_repo: Optional[AuditRepository] = None

        # Inicializar servicios (lazy loading)
        self._audit_service: Optional[AuditService] = None
        self._inventory_service: Optional[InventoryService] = None
        self._payment_service: Optional[PaymentService] = None
        self._sales_service: Optional[SalesService] = None
        self._cart: Optional[Cart] = None

    # =========================================================================
    # ALMACENAMIENTO
    # =========================================================================

    @property
    def storage(self) -> IStorage:
        """Almacenamiento clave → JSON (archivos por defecto)."""
        if self._storage is None:
            self._storage = JsonFileStorage(self._data_dir)
        return self._storage

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def catalog_repo(self) -> CatalogRepository:
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self.storage)
        return self._catalog_repo

    @property
    def sales_repo(self) -> SalesRepository:
        if self._sales_repo is None:
            self._sales_repo = SalesRepository(self.storage)
        return self._sales_repo

    @property
    def journal_repo(self) -> JournalRepository:
        if self._journal_repo is None:
            self._journal_repo = JournalRepository(self.storage)
        return self._journal_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self.storage)
        return self._audit_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        """Servicio de auditoría (singleton)."""
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def inventory_service(self) -> InventoryService:
        """Servicio de inventario (singleton)."""
        if self._inventory_service is None:
            self._inventory_service = InventoryService(
                self.catalog_repo,
                self.audit_service
            )
        return self._inventory_service

    @property
    def payment_service(self) -> PaymentService:
        """Conciliador de pagos (singleton)."""
        if self._payment_service is None:
            self._payment_service = PaymentService()
        return self._payment_service

    @property
    def sales_service(self) -> SalesService:
        """Servicio de ventas (singleton)."""
        if self._sales_service is None:
            self._sales_service = SalesService(
                self.sales_repo,
                self.catalog_repo,
                self.journal_repo,
                self.payment_service,
                self.audit_service
            )
        return self._sales_service

    @property
    def cart(self) -> Cart:
        """Carrito de la terminal (uno solo por contenedor)."""
        if self._cart is None:
            self._cart = Cart(self.catalog_repo)
        return self._cart

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def startup(self) -> List[str]:
        """
        Prepara el contenedor para vender: carga el catálogo (sembrando
        los productos por defecto si no hay) y reaplica el diario de caja.

        Returns:
            IDs de las ventas recuperadas del diario
        """
        return self.sales_service.recover()

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing o para recargar datos.
        """
        self._catalog_repo = None
        self._sales_repo = None
        self._journal_repo = None
        self._audit_repo = None

        self._audit_service = None
        self._inventory_service = None
        self._payment_service = None
        self._sales_service = None
        self._cart = None

    @classmethod
    def get_instance(cls, data_dir: str = None) -> 'AppContainer':
        """
        Obtiene la instancia global del contenedor.

        Args:
            data_dir: Carpeta de datos (solo se usa en primera llamada)
        """
        if cls._instance is None:
            cls._instance = cls(data_dir)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia global (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(data_dir: str = None) -> AppContainer:
    return AppContainer.get_instance(data_dir)
