from .base import TABLES, DataStore, StoreError
from .local import LocalStore
from .supabase import SupabaseStore

from jobcraft.config import Settings
from jobcraft.log import get_logger

log = get_logger(__name__)

__all__ = [
    "TABLES", "DataStore", "StoreError", "LocalStore", "SupabaseStore",
    "get_store",
]


def get_store(settings: Settings) -> DataStore:
    if settings.store_backend == "supabase":
        log.info("Using Supabase store at %s", settings.supabase_url)
        return SupabaseStore(settings.supabase_url, settings.supabase_key)

    log.info("Using local JSON store in %s", settings.data_dir)
    return LocalStore(settings.data_dir)
