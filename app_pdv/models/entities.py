# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia.
# Las entidades de venta son inmutables (frozen): una venta registrada
# nunca se edita.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple
from enum import Enum


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

class PaymentMethod(str, Enum):
    """Métodos de pago aceptados en caja."""
    CASH = "cash"
    CARD = "card"
    PIX = "pix"


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador único y estable
        name: Nombre del producto
        price: Precio de venta
        cost: Costo de compra
        stock: Unidades disponibles
        category: Categoría para clasificación
        description: Descripción corta
        image: URL de la imagen (opcional)
        barcode: Código de barras (opcional)
    """
    id: str
    name: str
    price: float
    cost: float = 0.0
    stock: int = 0
    category: str = ''
    description: str = ''
    image: Optional[str] = None
    barcode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        d = {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'cost': self.cost,
            'stock': self.stock,
            'category': self.category,
            'description': self.description,
        }
        if self.image is not None:
            d['image'] = self.image
        if self.barcode is not None:
            d['barcode'] = self.barcode
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=data.get('price', 0.0),
            cost=data.get('cost', 0.0),
            stock=data.get('stock', 0),
            category=data.get('category', ''),
            description=data.get('description', ''),
            image=data.get('image'),
            barcode=data.get('barcode')
        )


# ==============================================================================
# ENTIDADES DE CARRITO
# ==============================================================================

@dataclass
class CartLine:
    """
    Línea del carrito: referencia al producto más la cantidad.
    Solo existe mientras el carrito está abierto.
    """
    product: Product
    quantity: int = 1

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> float:
        """Subtotal de esta línea."""
        return round(self.product.price * self.quantity, 2)

    def to_dict(self) -> Dict[str, Any]:
        """Formato plano (producto + cantidad), como lo muestra el carrito."""
        d = self.product.to_dict()
        d['quantity'] = self.quantity
        d['line_total'] = self.line_total
        return d


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass(frozen=True)
class Payment:
    """
    Un pago entregado por el cliente.

    Attributes:
        method: Método de pago (cash, card, pix)
        amount: Monto pagado (> 0)
    """
    method: PaymentMethod
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'method': self.method.value,
            'amount': round(self.amount, 2)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payment':
        """Crea instancia desde diccionario."""
        return cls(
            method=PaymentMethod(data.get('method')),
            amount=data.get('amount', 0.0)
        )


@dataclass(frozen=True)
class SaleItem:
    """
    Copia congelada de una línea del carrito al momento de la venta.
    No depende del catálogo: editar el producto después no la altera.
    """
    id: str
    name: str
    price: float
    quantity: int
    cost: float = 0.0
    stock: int = 0
    category: str = ''
    description: str = ''
    image: Optional[str] = None
    barcode: Optional[str] = None

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)

    @property
    def line_profit(self) -> float:
        return round((self.price - self.cost) * self.quantity, 2)

    @classmethod
    def from_line(cls, line: CartLine) -> 'SaleItem':
        """Congela una línea del carrito."""
        p = line.product
        return cls(
            id=p.id,
            name=p.name,
            price=p.price,
            quantity=line.quantity,
            cost=p.cost,
            stock=p.stock,
            category=p.category,
            description=p.description,
            image=p.image,
            barcode=p.barcode
        )

    def to_dict(self) -> Dict[str, Any]:
        """Mismo formato que un producto, más la cantidad vendida."""
        d = {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'cost': self.cost,
            'stock': self.stock,
            'category': self.category,
            'description': self.description,
            'quantity': self.quantity,
        }
        if self.image is not None:
            d['image'] = self.image
        if self.barcode is not None:
            d['barcode'] = self.barcode
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleItem':
        """Crea instancia desde diccionario."""
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=data.get('price', 0.0),
            quantity=data.get('quantity', 0),
            cost=data.get('cost', 0.0),
            stock=data.get('stock', 0),
            category=data.get('category', ''),
            description=data.get('description', ''),
            image=data.get('image'),
            barcode=data.get('barcode')
        )


@dataclass(frozen=True)
class Sale:
    """
    Venta registrada. Inmutable y solo se agrega al historial.

    Attributes:
        id: Identificador único
        date: Fecha/hora ISO-8601 (UTC)
        items: Copias de las líneas vendidas
        subtotal: Suma de price * quantity
        discount: Descuento aplicado (>= 0)
        total: subtotal - discount
        payments: Pagos en el orden en que se ingresaron
    """
    id: str
    date: str
    items: Tuple[SaleItem, ...] = field(default_factory=tuple)
    subtotal: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    payments: Tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def paid_amount(self) -> float:
        return round(sum(p.amount for p in self.payments), 2)

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def profit_total(self) -> float:
        return round(sum(item.line_profit for item in self.items) - self.discount, 2)

    def quantities(self) -> Dict[str, int]:
        """Cantidad vendida por producto."""
        sold: Dict[str, int] = {}
        for item in self.items:
            sold[item.id] = sold.get(item.id, 0) + item.quantity
        return sold

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'date': self.date,
            'items': [item.to_dict() for item in self.items],
            'subtotal': self.subtotal,
            'discount': self.discount,
            'total': self.total,
            'payments': [p.to_dict() for p in self.payments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        """Crea instancia desde diccionario (formato JSON)."""
        items: List[SaleItem] = [SaleItem.from_dict(i) for i in data.get('items', [])]
        payments: List[Payment] = [Payment.from_dict(p) for p in data.get('payments', [])]
        return cls(
            id=str(data.get('id', '')),
            date=data.get('date', ''),
            items=tuple(items),
            subtotal=data.get('subtotal', 0.0),
            discount=data.get('discount', 0.0),
            total=data.get('total', 0.0),
            payments=tuple(payments)
        )
