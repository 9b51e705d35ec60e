# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Encapsula todo el acceso a la clave 'sales'.
# Las ventas se almacenan como lista, la más reciente primero:
# [{venta_nueva}, {venta_anterior}, ...]
# No hay operaciones de edición ni borrado: el historial solo crece.
# ==============================================================================

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app_pdv import config
from app_pdv.models import Sale
from app_pdv.repositories.base import BaseRepository
from app_pdv.repositories.interfaces import IStorage


def parse_date(ts_str: str) -> Optional[datetime]:
    """Parsea timestamp ISO (acepta sufijo 'Z')."""
    try:
        return datetime.fromisoformat(ts_str.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return None


class SalesRepository(BaseRepository):
    """
    Repositorio del historial de ventas.

    Formato de datos en sales.json:
    [
        {
            "id": "9b1d...",
            "date": "2024-01-01T10:00:00+00:00",
            "items": [{"id": "1", "name": "Café Expresso", "price": 5.5, "quantity": 2, ...}],
            "subtotal": 11.0,
            "discount": 0.0,
            "total": 11.0,
            "payments": [{"method": "cash", "amount": 11.0}]
        }
    ]
    """

    def __init__(self, storage: IStorage, key: str = config.SALES_KEY):
        super().__init__(storage, key)
        self._sales: List[Sale] = []
        self.reload()

    def _empty_data(self) -> List:
        return []

    def reload(self) -> None:
        """Recarga el historial desde el almacenamiento."""
        self._sales = self._read_records(Sale.from_dict)

    # =========================================================================
    # LECTURA
    # =========================================================================

    def list(self) -> List[Sale]:
        return list(self._sales)

    def get_by_id(self, sale_id: str) -> Optional[Sale]:
        for sale in self._sales:
            if sale.id == sale_id:
                return sale
        return None

    def __len__(self) -> int:
        return len(self._sales)

    def get_sales_by_date_range(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> List[Sale]:
        """
        Obtiene ventas en un rango de fechas (inclusive).

        Args:
            from_date: Fecha inicio (ISO format)
            to_date: Fecha fin (ISO format)

        Returns:
            Lista de ventas en el rango, más reciente primero
        """
        if not from_date and not to_date:
            return self.list()

        from_dt = parse_date(from_date) if from_date else None
        to_dt = parse_date(to_date) if to_date else None

        filtered = []
        for sale in self._sales:
            dt = parse_date(sale.date)
            if dt is None:
                continue
            # Comparar siempre con la misma "conciencia" de zona horaria
            if from_dt and _naive(dt) < _naive(from_dt):
                continue
            if to_dt and _naive(dt) > _naive(to_dt):
                continue
            filtered.append(sale)
        return filtered

    def calculate_totals(self) -> Dict[str, Any]:
        """
        Calcula totales agregados de todas las ventas.

        Returns:
            Dict con sales_count, total_revenue, total_discount,
            total_profit y by_method
        """
        by_method: Dict[str, float] = {}
        total_revenue = 0.0
        total_discount = 0.0
        total_profit = 0.0

        for sale in self._sales:
            total_revenue += sale.total
            total_discount += sale.discount
            total_profit += sale.profit_total
            for p in sale.payments:
                by_method[p.method.value] = by_method.get(p.method.value, 0.0) + p.amount

        return {
            'sales_count': len(self._sales),
            'total_revenue': round(total_revenue, 2),
            'total_discount': round(total_discount, 2),
            'total_profit': round(total_profit, 2),
            'by_method': {m: round(v, 2) for m, v in by_method.items()},
        }

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def prepend(self, sale: Sale, persist: bool = True) -> None:
        """
        Agrega una venta al inicio del historial.

        Args:
            sale: Venta ya conciliada
            persist: Escribir de inmediato (False cuando el volcado lo hace
                     el checkpoint del servicio de ventas)
        """
        if self.get_by_id(sale.id) is not None:
            raise ValueError(f"La venta {sale.id} ya está registrada")
        sales = [sale] + self._sales
        if persist:
            self._write_raw([s.to_dict() for s in sales])
        self._sales = sales

    def flush(self) -> None:
        self._write_raw([s.to_dict() for s in self._sales])


def _naive(dt: datetime) -> datetime:
    """Pasa a UTC y quita la zona horaria (las ventas se guardan en UTC)."""
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
