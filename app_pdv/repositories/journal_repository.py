# ==============================================================================
# DIARIO DE CAJA (write-ahead)
# ==============================================================================
# Antes de tocar products/sales, cada venta confirmada se escribe aquí en
# UNA sola escritura: la venta completa y el stock resultante de cada
# producto vendido. Luego se vuelcan las colecciones y el diario se vacía.
#
# Si el proceso muere entre medio, al arrancar se reaplican las entradas
# pendientes. El stock se guarda en valores absolutos, así reaplicar una
# entrada dos veces deja el mismo resultado.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Any, Dict, List

from app_pdv import config
from app_pdv.models import Sale
from app_pdv.repositories.base import BaseRepository
from app_pdv.repositories.interfaces import IStorage


@dataclass(frozen=True)
class JournalEntry:
    """Venta confirmada y stock final de los productos que vendió."""
    sale: Sale
    stock_levels: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sale': self.sale.to_dict(),
            'stock': dict(self.stock_levels),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JournalEntry':
        return cls(
            sale=Sale.from_dict(data.get('sale', {})),
            stock_levels={str(k): int(v) for k, v in data.get('stock', {}).items()}
        )


class JournalRepository(BaseRepository):
    """
    Formato de datos en checkout_journal.json (más antigua primero):
    [
        {"sale": {...}, "stock": {"1": 98, "2": 49}}
    ]
    Una lista vacía significa que todo está volcado.
    """

    def __init__(self, storage: IStorage, key: str = config.JOURNAL_KEY):
        super().__init__(storage, key)

    def _empty_data(self) -> List:
        return []

    def pending(self) -> List[JournalEntry]:
        return self._read_records(JournalEntry.from_dict)

    def has_pending(self) -> bool:
        return bool(self._read_raw())

    def begin(self, sale: Sale, stock_levels: Dict[str, int]) -> None:
        entries = self._read_raw()
        entries.append(JournalEntry(sale, dict(stock_levels)).to_dict())
        self._write_raw(entries)

    def clear(self) -> None:
        self._write_raw([])
