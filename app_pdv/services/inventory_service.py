# ==============================================================================
# SERVICIO DE INVENTARIO
# ==============================================================================
# Alta, edición y baja de productos del catálogo (pantalla de inventario).
# Es un camino independiente del cobro: no se concilia con carritos abiertos.
# ==============================================================================

import math
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from app_pdv import config
from app_pdv.errors import InvalidProduct, ProductNotFound
from app_pdv.models import Product
from app_pdv.repositories.interfaces import ICatalogStore
from app_pdv.services.audit_service import AuditService


# Campos que se pueden editar desde la pantalla de inventario
EDITABLE_FIELDS = frozenset([
    'name', 'price', 'cost', 'stock', 'category', 'description', 'image', 'barcode'
])


class InventoryService:
    """
    Servicio para gestión del catálogo.

    Responsabilidades:
    - Validar datos de producto
    - CRUD de productos (con auditoría)
    - Búsquedas y alertas de stock bajo
    """

    def __init__(self, catalog_repo: ICatalogStore, audit_service: Optional[AuditService] = None):
        """
        Args:
            catalog_repo: Repositorio del catálogo
            audit_service: Servicio de auditoría (opcional)
        """
        self.catalog_repo = catalog_repo
        self.audit_service = audit_service

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    @staticmethod
    def validate_product(product: Product) -> Product:
        """
        Verifica las reglas del catálogo.

        Raises:
            InvalidProduct: Si algún campo no cumple
        """
        if not product.id or not str(product.id).strip():
            raise InvalidProduct("el ID es obligatorio")
        if not isinstance(product.name, str) or not product.name.strip():
            raise InvalidProduct("el nombre es obligatorio")
        for field_name in ('price', 'cost'):
            value = getattr(product, field_name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value < 0:
                raise InvalidProduct(f"{field_name} debe ser un número >= 0")
        if isinstance(product.stock, bool) or not isinstance(product.stock, int) or product.stock < 0:
            raise InvalidProduct("el stock debe ser un entero >= 0")
        return product

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def get_product(self, product_id: str) -> Product:
        product = self.catalog_repo.get(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def list_products(self, category: Optional[str] = None, query: Optional[str] = None) -> List[Product]:
        """
        Lista productos, con filtros opcionales.

        Args:
            category: Categoría exacta
            query: Texto a buscar en nombre, descripción o código de barras
        """
        products = self.catalog_repo.list()
        if category:
            products = [p for p in products if p.category == category]
        if query:
            q = query.lower()
            products = [
                p for p in products
                if q in p.name.lower()
                or q in (p.description or '').lower()
                or q == (p.barcode or '')
            ]
        return products

    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        for product in self.catalog_repo.list():
            if barcode and product.barcode == barcode:
                return product
        return None

    def low_stock(self, threshold: int = config.LOW_STOCK_THRESHOLD) -> List[Product]:
        """Productos con stock menor o igual al umbral."""
        return [p for p in self.catalog_repo.list() if p.stock <= threshold]

    def categories(self) -> List[str]:
        return sorted({p.category for p in self.catalog_repo.list() if p.category})

    # =========================================================================
    # ALTA / EDICIÓN / BAJA
    # =========================================================================

    def add_product(self, data: Mapping[str, Any], user: Optional[str] = None) -> Product:
        """
        Crea un producto. Genera ID si no viene uno.

        Raises:
            InvalidProduct: Datos inválidos o ID duplicado
        """
        payload = dict(data)
        if not payload.get('id'):
            payload['id'] = uuid.uuid4().hex[:8]
        product = self.validate_product(Product.from_dict(payload))
        if self.catalog_repo.get(product.id) is not None:
            raise InvalidProduct(f"ya existe un producto con ID {product.id}")

        self.catalog_repo.upsert(product)
        if self.audit_service:
            self.audit_service.log_product_change(user, 'creado', product)
        return product

    def update_product(self, product_id: str, data: Mapping[str, Any], user: Optional[str] = None) -> Product:
        """
        Edita los campos indicados de un producto.

        Raises:
            ProductNotFound: El producto no existe
            InvalidProduct: Campos desconocidos o inválidos
        """
        before = self.get_product(product_id)
        unknown = set(data) - EDITABLE_FIELDS - {'id'}
        if unknown:
            raise InvalidProduct(f"campos no editables: {', '.join(sorted(unknown))}")
        if data.get('id', product_id) != product_id:
            raise InvalidProduct("el ID no se puede cambiar")

        changes: Dict[str, Any] = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        updated = self.validate_product(replace(before, **changes))

        self.catalog_repo.upsert(updated)
        if self.audit_service:
            self.audit_service.log_product_change(user, 'editado', updated, before)
        return updated

    def delete_product(self, product_id: str, user: Optional[str] = None) -> Product:
        """
        Elimina un producto. Las ventas ya registradas no se ven afectadas.

        Raises:
            ProductNotFound: El producto no existe
        """
        removed = self.catalog_repo.remove(product_id)
        if removed is None:
            raise ProductNotFound(product_id)
        if self.audit_service:
            self.audit_service.log_product_change(user, 'eliminado', removed)
        return removed
