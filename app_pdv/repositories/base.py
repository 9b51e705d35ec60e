# ==============================================================================
# REPOSITORIO BASE - Almacenamiento clave-valor y serialización JSON
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from app_pdv.errors import PersistenceFailure
from app_pdv.repositories.interfaces import IStorage


# ==============================================================================
# ALMACENAMIENTOS
# ==============================================================================

class JsonFileStorage:
    """
    Un archivo <clave>.json por clave dentro de base_path.

    La escritura va primero a un archivo temporal y luego se reemplaza el
    original con os.replace, así nunca queda un JSON a medio escribir.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio de datos (se crea si no existe)
        """
        self.base_path = base_path
        os.makedirs(base_path, exist_ok=True)

    def path_for(self, key: str) -> str:
        """Ruta del archivo de una clave."""
        return os.path.join(self.base_path, f'{key}.json')

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        with self._file_lock:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    return f.read()
            except FileNotFoundError:
                return None
            except (OSError, UnicodeDecodeError) as e:
                raise PersistenceFailure(key, f"No se pudo leer '{key}': {e}") from e

    def save(self, key: str, serialized: str) -> None:
        path = self.path_for(key)
        temp_path = path + '.tmp'
        with self._file_lock:
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    f.write(serialized)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_path, path)
            except OSError as e:
                # Limpiar archivo temporal si algo falla
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise PersistenceFailure(key, f"No se pudo guardar '{key}': {e}") from e


class MemoryStorage:
    """Almacenamiento en memoria (tests y uso embebido)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, serialized: str) -> None:
        self.data[key] = serialized


# ==============================================================================
# REPOSITORIO BASE
# ==============================================================================

class BaseRepository(ABC):
    """
    Clase base para los repositorios.
    Cada repositorio es dueño de una clave del almacenamiento y guarda ahí
    su colección completa, re-serializada en cada cambio.
    """

    def __init__(self, storage: IStorage, key: str):
        """
        Args:
            storage: Almacenamiento clave-valor
            key: Clave que maneja este repositorio
        """
        self.storage = storage
        self.key = key

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura vacía para este repositorio."""
        pass

    def _exists(self) -> bool:
        """True si la clave ya fue guardada alguna vez."""
        return self.storage.load(self.key) is not None

    def _read_raw(self) -> Any:
        """
        Lee y parsea la clave.

        Returns:
            Datos parseados, o la estructura vacía si la clave no existe

        Raises:
            PersistenceFailure: Si el contenido no es JSON válido
        """
        raw = self.storage.load(self.key)
        if raw is None:
            return self._empty_data()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            # Un historial corrupto no se reemplaza en silencio por uno vacío
            raise PersistenceFailure(self.key, f"JSON inválido en '{self.key}': {e}") from e

    def _read_records(self, factory: Callable[[Dict[str, Any]], Any]) -> List[Any]:
        """
        Lee la clave y convierte cada registro con factory (p.ej. Sale.from_dict).

        Raises:
            PersistenceFailure: Si algún registro no se puede reconstruir
        """
        data = self._read_raw()
        try:
            return [factory(item) for item in data if isinstance(item, dict)]
        except (ValueError, TypeError, KeyError) as e:
            raise PersistenceFailure(self.key, f"Registro inválido en '{self.key}': {e}") from e

    def _write_raw(self, data: Any) -> None:
        """Serializa y guarda la colección completa."""
        self.storage.save(self.key, json.dumps(data, indent=2, ensure_ascii=False))
