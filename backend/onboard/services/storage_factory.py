"""
Storage backend factory.
Configures which storage implementation serves the process.
"""

from onboard.core.config import Settings
from onboard.core.logging import get_logger
from onboard.services.airport_directory import AirportDirectory, get_airport_directory
from onboard.services.interfaces.storage import StorageProvider
from onboard.services.memory_storage import MemoryStorageProvider
from onboard.services.sql_storage import SqlStorageProvider

logger = get_logger(__name__)


def build_storage_provider(settings: Settings, directory: AirportDirectory = None) -> StorageProvider:
    """
    Build the configured storage provider.

    Selection is made once, from STORAGE_BACKEND:
    - database: SqlStorageProvider (PostgreSQL in production)
    - memory: MemoryStorageProvider (local development, demos)

    There is no automatic fallback between the two. If the database is
    down, requests fail and /api/health/database reports it.
    """
    directory = directory or get_airport_directory()

    if settings.STORAGE_BACKEND == "memory":
        provider = MemoryStorageProvider()
    else:
        provider = SqlStorageProvider.from_settings(settings, directory)

    logger.info("storage_backend_selected", backend=provider.name)
    return provider
