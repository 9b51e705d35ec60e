# ==============================================================================
# REPOSITORIO DE AUDITORÍA
# ==============================================================================
# Encapsula todo el acceso a la clave 'audit'.
# La auditoría se almacena como lista, más reciente primero: [{log1}, {log2}, ...]
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List, Optional

from app_pdv import config
from app_pdv.repositories.base import BaseRepository
from app_pdv.repositories.interfaces import IStorage


class AuditRepository(BaseRepository):
    """
    Repositorio para gestión del log de auditoría.

    Formato de datos en audit.json:
    [
        {
            "type": "VENTA",
            "user": "caixa",
            "message": "Venta 9b1d... registrada - Total: R$ 15.00 - 3 items",
            "timestamp": "2024-01-01 10:00:00",
            "related_id": "9b1d...",
            "details": {...}
        }
    ]
    """

    def __init__(
        self,
        storage: IStorage,
        key: str = config.AUDIT_KEY,
        max_logs: int = config.AUDIT_MAX_LOGS
    ):
        super().__init__(storage, key)
        self.max_logs = max_logs

    def _empty_data(self) -> List:
        return []

    def load(self) -> List[Dict[str, Any]]:
        """
        Carga todos los logs de auditoría.

        Returns:
            Lista de logs (más recientes primero)
        """
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save(self, logs: List[Dict[str, Any]]) -> None:
        """
        Guarda todos los logs.
        Mantiene solo los últimos max_logs registros.
        """
        if len(logs) > self.max_logs:
            logs = logs[:self.max_logs]
        self._write_raw(logs)

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Registra un nuevo evento de auditoría.

        Args:
            log_type: Tipo de evento (VENTA, PAGO, STOCK, PRODUCTO, SISTEMA)
            user: Operador que realizó la acción
            message: Mensaje descriptivo humanizado
            related_id: ID relacionado (venta, producto)
            details: Detalles adicionales
        """
        log_entry = {
            'type': log_type,
            'user': user or 'sistema',
            'message': message,
            'timestamp': datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            'related_id': related_id,
            'details': details or {}
        }

        logs = self.load()
        logs.insert(0, log_entry)  # Insertar al inicio (más reciente primero)
        self.save(logs)

    def find_by_type(self, log_type: str) -> List[Dict[str, Any]]:
        """Logs de un tipo (VENTA, PAGO, ...)."""
        return [log for log in self.load() if log.get('type') == log_type]

    def find_by_related_id(self, related_id: str) -> List[Dict[str, Any]]:
        """Logs asociados a una venta o producto."""
        return [log for log in self.load() if log.get('related_id') == related_id]
