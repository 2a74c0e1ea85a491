"""NATS Key-Value backed parameter store and feed cursor."""

from typing import Optional

from nats.errors import Error as NatsError
from nats.js.errors import KeyDeletedError, KeyNotFoundError
from nats.js.kv import KeyValue

from .errors import ParameterStoreError
from .logging_setup import get_logger

logger = get_logger(__name__)


class ParameterStore:
    """Single-value parameters kept in a NATS Key-Value bucket."""

    def __init__(self, kv: KeyValue):
        self.kv = kv

    async def get(self, name: str) -> Optional[str]:
        """Return the parameter value, or None if it has never been set."""
        try:
            entry = await self.kv.get(name)
        except (KeyNotFoundError, KeyDeletedError):
            return None
        except NatsError as e:
            raise ParameterStoreError(f"Failed to read parameter {name}: {e}") from e

        if not entry or not entry.value:
            return None
        return entry.value.decode("utf-8")

    async def put(self, name: str, value: str) -> None:
        """Store a parameter, overwriting any previous value."""
        try:
            await self.kv.put(name, value.encode("utf-8"))
        except NatsError as e:
            raise ParameterStoreError(f"Failed to write parameter {name}: {e}") from e


class FetchCursor:
    """Id of the newest feed post already processed."""

    def __init__(self, store: ParameterStore, name: str):
        self.store = store
        self.name = name

    async def load(self) -> Optional[str]:
        """Load the cursor; None means no previous run."""
        cursor = await self.store.get(self.name)
        if cursor is None:
            logger.info("No saved cursor found, starting fresh", key=self.name)
        else:
            logger.info("Loaded cursor", cursor=cursor, key=self.name)
        return cursor

    async def save(self, post_id: str) -> None:
        await self.store.put(self.name, post_id)
        logger.debug("cursor_saved", cursor=post_id, key=self.name)
