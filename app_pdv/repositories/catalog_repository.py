# ==============================================================================
# REPOSITORIO DE CATÁLOGO
# ==============================================================================
# Encapsula todo el acceso a la clave 'products'.
# Los productos se almacenan como lista: [{producto1}, {producto2}, ...]
# y se mantienen en memoria desde el arranque.
# ==============================================================================

from dataclasses import replace
from typing import Dict, List, Optional

from app_pdv import config
from app_pdv.errors import InvalidQuantity, OutOfStock, ProductNotFound
from app_pdv.models import Product
from app_pdv.repositories.base import BaseRepository
from app_pdv.repositories.interfaces import IStorage


# Catálogo inicial de la cafetería (solo si la clave no existe todavía)
DEFAULT_PRODUCTS = [
    {'id': '1', 'name': 'Café Expresso', 'price': 5.50, 'cost': 1.20, 'stock': 100,
     'category': 'Bebidas', 'description': 'Café forte e encorpado.',
     'image': 'https://picsum.photos/id/1060/200/200'},
    {'id': '2', 'name': 'Pão de Queijo', 'price': 4.00, 'cost': 1.50, 'stock': 50,
     'category': 'Alimentos', 'description': 'Tradicional pão de queijo mineiro.',
     'image': 'https://picsum.photos/id/1084/200/200'},
    {'id': '3', 'name': 'Suco de Laranja', 'price': 8.00, 'cost': 3.00, 'stock': 30,
     'category': 'Bebidas', 'description': 'Suco natural feito na hora.',
     'image': 'https://picsum.photos/id/1080/200/200'},
    {'id': '4', 'name': 'Bolo de Cenoura', 'price': 7.50, 'cost': 2.50, 'stock': 15,
     'category': 'Alimentos', 'description': 'Com cobertura de chocolate.',
     'image': 'https://picsum.photos/id/292/200/200'},
]


class CatalogRepository(BaseRepository):
    """
    Repositorio del catálogo de productos.

    Formato de datos en products.json:
    [
        {
            "id": "1",
            "name": "Café Expresso",
            "price": 5.5,
            "cost": 1.2,
            "stock": 100,
            "category": "Bebidas",
            "description": "...",
            "image": "https://...",
            "barcode": "789..."
        }
    ]

    Cada cambio escribe primero la colección nueva y solo después la
    reemplaza en memoria: si la escritura falla, el catálogo queda igual.
    """

    def __init__(self, storage: IStorage, key: str = config.PRODUCTS_KEY, seed: bool = True):
        """
        Args:
            storage: Almacenamiento clave-valor
            key: Clave de la colección
            seed: Cargar el catálogo inicial si la clave no existe
        """
        super().__init__(storage, key)
        self._products: List[Product] = []
        self.reload(seed=seed)

    def _empty_data(self) -> List:
        return []

    def reload(self, seed: bool = False) -> None:
        """Recarga el catálogo desde el almacenamiento."""
        if seed and not self._exists():
            self._commit([Product.from_dict(p) for p in DEFAULT_PRODUCTS])
            return
        self._products = self._read_records(Product.from_dict)

    # =========================================================================
    # LECTURA
    # =========================================================================

    def list(self) -> List[Product]:
        return list(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return self.get(product_id) is not None  # type: ignore[arg-type]

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def _commit(self, products: List[Product], persist: bool = True) -> None:
        """Guarda la colección nueva y luego la adopta en memoria."""
        if persist:
            self._write_raw([p.to_dict() for p in products])
        self._products = products

    def flush(self) -> None:
        self._write_raw([p.to_dict() for p in self._products])

    def upsert(self, product: Product) -> Product:
        """
        Crea o reemplaza un producto (por ID).

        Returns:
            El producto guardado
        """
        products = list(self._products)
        for i, current in enumerate(products):
            if current.id == product.id:
                products[i] = product
                break
        else:
            products.append(product)
        self._commit(products)
        return product

    def remove(self, product_id: str) -> Optional[Product]:
        """
        Elimina un producto.

        Returns:
            El producto eliminado o None si no existía
        """
        removed = self.get(product_id)
        if removed is None:
            return None
        self._commit([p for p in self._products if p.id != product_id])
        return removed

    def decrement_stock(self, product_id: str, amount: int) -> Product:
        """
        Descuenta stock de un producto. Nunca deja stock negativo.

        Raises:
            InvalidQuantity: amount no es entero positivo
            ProductNotFound: el producto no existe
            OutOfStock: amount supera el stock actual
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidQuantity(amount)
        product = self.get(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        if amount > product.stock:
            raise OutOfStock(product_id, amount, product.stock, product.name)
        updated = replace(product, stock=product.stock - amount)
        self._commit([updated if p.id == product_id else p for p in self._products])
        return updated

    def set_stock_levels(self, levels: Dict[str, int], persist: bool = True) -> None:
        """
        Fija el stock absoluto de varios productos en una sola operación.
        Los IDs que ya no están en el catálogo se ignoran.
        """
        products = [
            replace(p, stock=levels[p.id]) if p.id in levels else p
            for p in self._products
        ]
        self._commit(products, persist=persist)
