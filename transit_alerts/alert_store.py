"""Alert rows kept in a NATS Key-Value bucket, one row per route and creation second."""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from nats.errors import Error as NatsError
from nats.js.errors import KeyDeletedError, KeyNotFoundError, NoKeysError
from nats.js.kv import KeyValue
from pydantic import ValidationError

from .errors import AlertStoreError
from .logging_setup import get_logger
from .types import AlertRecord

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertStore:
    """Alert rows keyed by ``<route>.<created epoch seconds>``.

    Rows whose ``expires_at`` has passed are invisible to reads even if the
    bucket has not purged them yet.
    """

    def __init__(self, kv: KeyValue, clock: Callable[[], datetime] = _utcnow):
        self.kv = kv
        self.clock = clock

    @staticmethod
    def row_key(route: str, created_at: datetime) -> str:
        return f"{route}.{int(created_at.timestamp())}"

    async def get(self, route: str, created_at: datetime) -> Optional[AlertRecord]:
        """Point lookup of the row for a route at one creation time."""
        return await self._read(self.row_key(route, created_at))

    async def put(self, record: AlertRecord) -> None:
        key = self.row_key(record.route, record.created_at)
        try:
            await self.kv.put(key, record.model_dump_json().encode("utf-8"))
        except NatsError as e:
            raise AlertStoreError(f"Failed to write alert {key}: {e}") from e

    async def query(self, route: str) -> List[AlertRecord]:
        """All live rows for a route, newest first."""
        records = []
        for key in await self._keys(filters=[f"{route}.>"]):
            record = await self._read(key)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    async def scan(self) -> List[AlertRecord]:
        """All live rows in the bucket, in no particular order."""
        records = []
        for key in await self._keys():
            record = await self._read(key)
            if record is not None:
                records.append(record)
        return records

    async def _keys(self, filters: Optional[List[str]] = None) -> List[str]:
        try:
            if filters:
                return list(await self.kv.keys(filters=filters))
            return list(await self.kv.keys())
        except NoKeysError:
            return []
        except NatsError as e:
            raise AlertStoreError(f"Failed to list alert keys: {e}") from e

    async def _read(self, key: str) -> Optional[AlertRecord]:
        try:
            entry = await self.kv.get(key)
        except (KeyNotFoundError, KeyDeletedError):
            return None
        except NatsError as e:
            raise AlertStoreError(f"Failed to read alert {key}: {e}") from e

        if not entry or not entry.value:
            return None

        try:
            record = AlertRecord.model_validate_json(entry.value)
        except ValidationError as e:
            logger.warning("alert_row_invalid", key=key, error=str(e))
            return None

        if record.expires_at <= self.clock():
            return None
        return record
