# studyjam/storage/supabase_store.py
from typing import Any, Optional

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from supabase import Client, create_client

from studyjam.config.settings import settings
from .stable_index_store import KeyValueStore, PersistenceError


def initialize_supabase(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """Creates a Supabase client, defaulting to the configured URL and key."""
    url = url or settings.supabase_url
    key = key or settings.supabase_key
    if not url or not key:
        raise PersistenceError("Supabase URL or Key not configured in settings.")

    logger.debug(f"Initializing Supabase client with URL: {url}")
    try:
        client = create_client(url, key)
    except Exception as e:
        raise PersistenceError(f"Failed to initialize Supabase client: {e}") from e
    logger.info("Supabase client initialized.")
    return client


class SupabaseStore(KeyValueStore):
    """Key/value store backed by a Supabase table with `key` and `value` (jsonb) columns."""

    def __init__(self, client: Client, table_name: str = "kv_store"):
        self.client = client
        self.table_name = table_name

    def get(self, key: str) -> Optional[Any]:
        try:
            response: APIResponse = (
                self.client.table(self.table_name)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except APIError as e:
            logger.debug(f"Full APIError details: {e}")
            raise PersistenceError(
                f"Supabase error reading {key} from {self.table_name}: {e.message}"
            ) from e
        except Exception as e:
            raise PersistenceError(
                f"Unexpected error reading {key} from {self.table_name}: {e}"
            ) from e

        if not response.data:
            return None
        return response.data[0].get("value")

    def put(self, key: str, value: Any) -> None:
        try:
            self.client.table(self.table_name).upsert(
                {"key": key, "value": value}
            ).execute()
        except APIError as e:
            logger.debug(f"Full APIError details: {e}")
            raise PersistenceError(
                f"Supabase error writing {key} to {self.table_name}: {e.message}"
            ) from e
        except Exception as e:
            raise PersistenceError(
                f"Unexpected error writing {key} to {self.table_name}: {e}"
            ) from e
        logger.debug(f"Upserted {key} to {self.table_name}.")
