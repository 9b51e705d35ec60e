# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (clave → JSON).
#
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (IStorage, ICatalogStore, ...)
# ├── base.py                → JsonFileStorage, MemoryStorage, BaseRepository
# ├── catalog_repository.py  → clave 'products'
# ├── sales_repository.py    → clave 'sales'
# ├── journal_repository.py  → clave 'checkout_journal'
# └── audit_repository.py    → clave 'audit'
# ==============================================================================

# Interfaces
from app_pdv.repositories.interfaces import (
    IStorage,
    ICatalogStore,
    ISalesRepository,
    IJournalRepository,
    IAuditRepository,
)

# Almacenamientos y clase base
from app_pdv.repositories.base import BaseRepository, JsonFileStorage, MemoryStorage

# Implementaciones
from app_pdv.repositories.catalog_repository import CatalogRepository, DEFAULT_PRODUCTS
from app_pdv.repositories.sales_repository import SalesRepository
from app_pdv.repositories.journal_repository import JournalEntry, JournalRepository
from app_pdv.repositories.audit_repository import AuditRepository

__all__ = [
    # Interfaces
    'IStorage',
    'ICatalogStore',
    'ISalesRepository',
    'IJournalRepository',
    'IAuditRepository',

    # Almacenamientos
    'BaseRepository',
    'JsonFileStorage',
    'MemoryStorage',

    # Repositorios
    'CatalogRepository',
    'DEFAULT_PRODUCTS',
    'SalesRepository',
    'JournalEntry',
    'JournalRepository',
    'AuditRepository',
]
